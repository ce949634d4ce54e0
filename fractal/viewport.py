"""Mapping between raster pixels and the complex plane."""

from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np

BASE_EXTENT = 4.0


@dataclass(frozen=True)
class Viewport:
    """The square window of the complex plane currently rendered.

    ``extent`` is the plane width spanned by the raster at zoom 1. The window
    is centred on ``(shift_x, shift_y)`` and shrinks as ``1 / zoom``.
    """

    size: int
    zoom: float = 1.0
    shift_x: float = 0.0
    shift_y: float = 0.0
    extent: float = BASE_EXTENT


def pixel_step(viewport: Viewport) -> float:
    """Width of the plane region covered by a single pixel."""

    width = np.float64(viewport.extent) / np.float64(viewport.zoom)
    return float(width / np.float64(viewport.size))


def pixel_to_complex(viewport: Viewport, row: int, col: int) -> tuple[np.float64, np.float64]:
    """Plane coordinate of the pixel at ``(row, col)``.

    Row 0 is the top of the raster, so the imaginary part decreases with the
    row index.
    """

    step = np.float64(pixel_step(viewport))
    half = np.float64(viewport.size) / 2.0
    re = np.float64(viewport.shift_x) + (np.float64(col) - half) * step
    im = np.float64(viewport.shift_y) - (np.float64(row) - half) * step
    return np.float64(re), np.float64(im)


def plane_axes(viewport: Viewport) -> tuple[np.ndarray, np.ndarray]:
    """Real coordinates of every column and imaginary coordinates of every row."""

    step = np.float64(pixel_step(viewport))
    offsets = (np.arange(viewport.size, dtype=np.float64) - np.float64(viewport.size) / 2.0) * step
    re = np.float64(viewport.shift_x) + offsets
    im = np.float64(viewport.shift_y) - offsets
    return re, im


def apply_zoom(viewport: Viewport, zoom: float) -> Viewport:
    return replace(viewport, zoom=float(zoom))


def apply_shift(viewport: Viewport, shift_x: float, shift_y: float) -> Viewport:
    return replace(viewport, shift_x=float(shift_x), shift_y=float(shift_y))


def compute_zoom_factors(frames: int, zoom_factor: float, *, final_zoom: float | None, easing: str) -> np.ndarray:
    """Compute per-frame zoom multipliers for an animation.

    With ``final_zoom`` the multipliers compound to exactly that overall
    magnification, spread along a linear or smooth ease-in-out curve.
    Otherwise every frame multiplies the zoom by ``zoom_factor``.
    """

    if frames <= 0:
        return np.array([], dtype=np.float64)

    if final_zoom is not None and final_zoom > 0:
        log_target = np.log(final_zoom)

        def ease_in_out(t: float) -> float:
            return 3 * t ** 2 - 2 * t ** 3

        ease = (lambda u: u) if easing.lower() == "linear" else ease_in_out
        if frames == 1:
            alphas = np.array([1.0], dtype=np.float64)
        else:
            alphas = np.array([ease(i / (frames - 1)) for i in range(frames)], dtype=np.float64)
        alphas = np.clip(alphas, 0.0, 1.0)
        increments = np.diff(np.concatenate(([0.0], alphas)))
        return np.exp(increments * log_target)

    return np.full(frames, np.float64(zoom_factor), dtype=np.float64)
