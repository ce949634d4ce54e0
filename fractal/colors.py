"""Color encodings that turn iteration results into RGBA bytes."""

from __future__ import annotations

import numpy as np
from matplotlib.colors import hsv_to_rgb

OPAQUE = 255
INSIDE_COLOR = (0, 0, 0)
NON_CONVERGENT_COLOR = (128, 128, 128)
BASIN_SATURATION = 0.85
BRIGHTNESS_FALLOFF = 0.3


def _to_bytes(rgb: np.ndarray) -> np.ndarray:
    return np.uint8(np.clip(np.rint(rgb * 255.0), 0, 255))


def color_escape_time(counts: np.ndarray, max_iterations: int, out: np.ndarray) -> None:
    """Write the escape-time palette for ``counts`` into ``out``.

    ``out`` is a ``(rows, cols, 4)`` uint8 view. Escaped points get hue
    ``n / max_iterations`` at full saturation and value. Points that never
    escaped are black.
    """

    hsv = np.ones(counts.shape + (3,), dtype=np.float64)
    hsv[..., 0] = np.minimum(counts, max_iterations) / np.float64(max_iterations)
    rgb = _to_bytes(hsv_to_rgb(hsv))

    inside = counts >= max_iterations
    rgb[inside] = INSIDE_COLOR
    out[..., :3] = rgb
    out[..., 3] = OPAQUE


def color_newton(labels: np.ndarray, iterations: np.ndarray, root_count: int, out: np.ndarray) -> None:
    """Write the Newton basin palette into ``out``.

    Each root owns an evenly spaced hue, and faster convergence is brighter.
    Points without a root are neutral grey.
    """

    converged = labels >= 0
    hsv = np.empty(labels.shape + (3,), dtype=np.float64)
    hsv[..., 0] = np.where(converged, labels, 0) / np.float64(root_count)
    hsv[..., 1] = BASIN_SATURATION
    hsv[..., 2] = np.power(np.maximum(iterations, 0) + 1.0, -BRIGHTNESS_FALLOFF)
    rgb = _to_bytes(hsv_to_rgb(hsv))

    rgb[~converged] = NON_CONVERGENT_COLOR
    out[..., :3] = rgb
    out[..., 3] = OPAQUE
