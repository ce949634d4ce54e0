"""Public API for the real-time fractal engine."""

from . import runtime
from .animation import AnimationState, PixelBuffer, RenderSettings
from .colors import color_escape_time, color_newton
from .errors import FractalError, InvalidConfig, InvalidZoom, StateDisposed
from .renderer import (
    CUBIC_UNITY,
    MAX_ITERATIONS,
    NON_CONVERGENT,
    Mode,
    NewtonPolynomial,
    escape_time,
    newton_basins,
)
from .viewport import (
    Viewport,
    apply_shift,
    apply_zoom,
    compute_zoom_factors,
    pixel_step,
    pixel_to_complex,
    plane_axes,
)

__all__ = [
    "AnimationState",
    "CUBIC_UNITY",
    "FractalError",
    "InvalidConfig",
    "InvalidZoom",
    "MAX_ITERATIONS",
    "Mode",
    "NON_CONVERGENT",
    "NewtonPolynomial",
    "PixelBuffer",
    "RenderSettings",
    "StateDisposed",
    "Viewport",
    "apply_shift",
    "apply_zoom",
    "color_escape_time",
    "color_newton",
    "compute_zoom_factors",
    "escape_time",
    "newton_basins",
    "pixel_step",
    "pixel_to_complex",
    "plane_axes",
]
