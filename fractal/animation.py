"""The stateful engine that a host animation loop drives frame after frame."""

from __future__ import annotations

import math
import numbers
import time
import warnings
from dataclasses import dataclass
from typing import Optional

import numpy as np
import PIL.Image

from .colors import color_escape_time, color_newton
from .errors import InvalidConfig, InvalidZoom, StateDisposed
from .renderer import CUBIC_UNITY, MAX_ITERATIONS, TOLERANCE, Mode, escape_time, newton_basins
from .runtime import CPU_DEVICE, log
from .viewport import BASE_EXTENT, Viewport, apply_shift, apply_zoom, plane_axes

COLOR_SIZE = 4


@dataclass(frozen=True)
class RenderSettings:
    """Constants that stay fixed for the lifetime of an engine."""

    max_iterations: int = MAX_ITERATIONS
    base_extent: float = BASE_EXTENT
    tolerance: float = TOLERANCE


class PixelBuffer:
    """RGBA8 storage for a square raster, row-major with row 0 at the top.

    The storage is allocated once and every render writes into it in place.
    Readers only ever get read-only views of it.
    """

    def __init__(self, size: int):
        self.size = size
        self._storage = bytearray(size * size * COLOR_SIZE)
        self._pixels = np.frombuffer(self._storage, dtype=np.uint8).reshape(size, size, COLOR_SIZE)

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    def view(self) -> memoryview:
        return memoryview(self._storage).toreadonly()

    def array(self) -> np.ndarray:
        array = self._pixels.view()
        array.flags.writeable = False
        return array


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _parse_size(size) -> int:
    if not _is_number(size) or not float(size).is_integer():
        raise InvalidConfig(f"size must be a positive integer, got {size!r}")
    size = int(size)
    if size <= 0:
        raise InvalidConfig(f"size must be a positive integer, got {size!r}")
    return size


def _parse_mode(mode) -> Mode:
    if isinstance(mode, Mode):
        return mode
    if isinstance(mode, str):
        try:
            return Mode(mode.strip().lower())
        except ValueError as exc:
            raise InvalidConfig(f"unknown mode {mode!r}, expected one of: {', '.join(m.value for m in Mode)}") from exc
    raise InvalidConfig(f"mode must be a string, got {mode!r}")


def _parse_zoom(zoom, extent: float) -> float:
    try:
        value = float(zoom)
    except (TypeError, ValueError) as exc:
        raise InvalidZoom(f"zoom must be a number, got {zoom!r}") from exc
    if not value > 0 or not math.isfinite(value):
        raise InvalidZoom(f"zoom must be a finite positive number, got {value!r}")
    if not math.isfinite(extent / value):
        raise InvalidZoom(f"zoom {value!r} is too small to map a plane of width {extent!r}")
    return value


def _parse_shift(shift) -> tuple[float, float]:
    try:
        shift_x, shift_y = shift
        return float(shift_x), float(shift_y)
    except (TypeError, ValueError) as exc:
        raise InvalidConfig(f"shift must be a pair of numbers, got {shift!r}") from exc


def _check_settings(settings: RenderSettings) -> None:
    if not isinstance(settings.max_iterations, numbers.Integral) or settings.max_iterations <= 0:
        raise InvalidConfig(f"max_iterations must be a positive integer, got {settings.max_iterations!r}")
    if not settings.base_extent > 0 or not math.isfinite(settings.base_extent):
        raise InvalidConfig(f"base_extent must be a finite positive number, got {settings.base_extent!r}")
    if not settings.tolerance > 0:
        raise InvalidConfig(f"tolerance must be positive, got {settings.tolerance!r}")


class AnimationState:
    """Owns a square RGBA raster of a fractal and keeps it in sync with the view.

    Every mutator that changes the view re-renders the whole buffer before it
    returns, so ``get_data`` always reflects the mutations applied so far and
    never computes anything itself. Views handed out by ``get_data`` are
    overwritten in place by the next render.
    """

    def __init__(
        self,
        size: int,
        mode: str | Mode = Mode.MANDELBROT,
        *,
        zoom: float = 1.0,
        shift: tuple[float, float] = (0.0, 0.0),
        settings: Optional[RenderSettings] = None,
        device: Optional[str] = None,
    ):
        size = _parse_size(size)
        mode = _parse_mode(mode)
        settings = settings if settings is not None else RenderSettings()
        _check_settings(settings)
        try:
            zoom = _parse_zoom(zoom, settings.base_extent)
        except InvalidZoom as exc:
            raise InvalidConfig(str(exc)) from exc
        shift_x, shift_y = _parse_shift(shift)

        self._mode = mode
        self._settings = settings
        self._device = device if device is not None else CPU_DEVICE
        self._viewport = Viewport(
            size=size,
            zoom=zoom,
            shift_x=shift_x,
            shift_y=shift_y,
            extent=float(settings.base_extent),
        )
        self._buffer = PixelBuffer(size)
        self._disposed = False
        self.render()

    @classmethod
    def new(cls, *args, **kwargs) -> "AnimationState":
        """Build an engine as ``new(size, mode)``.

        The all-numeric forms ``new(zoom, size)`` and ``new(shift_x, zoom,
        size)`` are deprecated. They build a Mandelbrot engine.
        """

        if len(args) >= 2 and all(_is_number(arg) for arg in args):
            return cls._from_legacy(*args, **kwargs)
        return cls(*args, **kwargs)

    @classmethod
    def _from_legacy(cls, *args, **kwargs) -> "AnimationState":
        warnings.warn(
            "AnimationState.new(zoom, size) is deprecated; use AnimationState.new(size, 'mandelbrot') instead.",
            DeprecationWarning,
            stacklevel=3,
        )
        if len(args) > 3:
            raise InvalidConfig(f"legacy construction takes at most 3 numbers, got {len(args)}")
        *leading, size = args
        shift_x = leading[0] if len(leading) == 2 else 0.0
        zoom = leading[-1]
        return cls(size, Mode.MANDELBROT, zoom=zoom, shift=(shift_x, 0.0), **kwargs)

    def __enter__(self) -> "AnimationState":
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def _check_alive(self) -> None:
        if self._disposed:
            raise StateDisposed("the animation state has been disposed")

    def dispose(self) -> None:
        self._disposed = True

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def settings(self) -> RenderSettings:
        return self._settings

    def render(self) -> None:
        """Recompute every pixel of the buffer for the current view."""

        self._check_alive()
        self._render(self._viewport)

    def _render(self, viewport: Viewport) -> None:
        started = time.perf_counter()
        settings = self._settings
        re, im = plane_axes(viewport)
        pixels = self._buffer.pixels

        if self._mode is Mode.MANDELBROT:
            counts = escape_time(re, im, settings.max_iterations, device=self._device)
            color_escape_time(counts, settings.max_iterations, pixels)
        else:
            labels, iterations = newton_basins(
                re,
                im,
                CUBIC_UNITY,
                settings.max_iterations,
                settings.tolerance,
                device=self._device,
            )
            color_newton(labels, iterations, len(CUBIC_UNITY.roots), pixels)

        log("rendered %dx%d %s frame at zoom %g in %.3fs" % (
            viewport.size, viewport.size, self._mode.value, viewport.zoom, time.perf_counter() - started))

    def _commit(self, viewport: Viewport) -> None:
        # the view only changes once its frame is in the buffer
        self._render(viewport)
        self._viewport = viewport

    def get_data(self) -> memoryview:
        self._check_alive()
        return self._buffer.view()

    def to_array(self) -> np.ndarray:
        """Read-only ``(size, size, 4)`` uint8 view of the buffer."""

        self._check_alive()
        return self._buffer.array()

    def to_image(self) -> PIL.Image.Image:
        """RGBA image sharing the buffer's memory."""

        self._check_alive()
        size = self._viewport.size
        return PIL.Image.frombuffer("RGBA", (size, size), self._buffer.view(), "raw", "RGBA", 0, 1)

    def get_size(self) -> int:
        self._check_alive()
        return self._viewport.size

    def get_mode(self) -> Mode:
        self._check_alive()
        return self._mode

    def get_zoom(self) -> float:
        self._check_alive()
        return self._viewport.zoom

    def get_shift_x(self) -> float:
        self._check_alive()
        return self._viewport.shift_x

    def get_shift_y(self) -> float:
        self._check_alive()
        return self._viewport.shift_y

    def set_zoom(self, zoom: float) -> None:
        self._check_alive()
        zoom = _parse_zoom(zoom, self._viewport.extent)
        if zoom != self._viewport.zoom:
            self._commit(apply_zoom(self._viewport, zoom))

    def zoom_by(self, amount: float) -> None:
        self._check_alive()
        try:
            target = self._viewport.zoom + float(amount)
        except (TypeError, ValueError) as exc:
            raise InvalidZoom(f"zoom step must be a number, got {amount!r}") from exc
        self.set_zoom(target)

    def set_shift(self, shift_x: float, shift_y: float) -> None:
        self._check_alive()
        shift_x = float(shift_x)
        shift_y = float(shift_y)
        if (shift_x, shift_y) != (self._viewport.shift_x, self._viewport.shift_y):
            self._commit(apply_shift(self._viewport, shift_x, shift_y))

    def set_shift_x(self, shift_x: float) -> None:
        self.set_shift(shift_x, self._viewport.shift_y)

    def set_shift_y(self, shift_y: float) -> None:
        self.set_shift(self._viewport.shift_x, shift_y)

    def shift_by(self, amount_x: float, amount_y: float) -> None:
        self.set_shift(self._viewport.shift_x + float(amount_x), self._viewport.shift_y + float(amount_y))
