import numpy as np
import pytest

from fractal import Viewport, apply_shift, apply_zoom, compute_zoom_factors, pixel_step, pixel_to_complex, plane_axes


def test_center_pixel_maps_to_shift():
    viewport = Viewport(size=64, zoom=3.0, shift_x=-0.75, shift_y=0.1)
    assert pixel_to_complex(viewport, 32, 32) == (-0.75, 0.1)


def test_top_row_has_largest_imaginary_part():
    viewport = Viewport(size=16)
    _, im_top = pixel_to_complex(viewport, 0, 8)
    _, im_bottom = pixel_to_complex(viewport, 15, 8)
    assert im_top == 2.0
    assert im_bottom < im_top


def test_default_view_spans_base_extent():
    viewport = Viewport(size=64)
    assert pixel_to_complex(viewport, 0, 0) == (-2.0, 2.0)
    assert pixel_to_complex(viewport, 32, 48) == (1.0, 0.0)


def test_plane_axes_agree_with_pixel_mapping():
    viewport = Viewport(size=10, zoom=2.5, shift_x=0.3, shift_y=-1.2)
    re, im = plane_axes(viewport)
    assert re.shape == (10,) and im.shape == (10,)
    for row, col in [(0, 0), (3, 7), (9, 9), (5, 5)]:
        expected_re, expected_im = pixel_to_complex(viewport, row, col)
        assert re[col] == pytest.approx(expected_re, rel=1e-15, abs=1e-15)
        assert im[row] == pytest.approx(expected_im, rel=1e-15, abs=1e-15)


def test_pixel_step_shrinks_as_zoom_grows():
    viewport = Viewport(size=256)
    steps = [pixel_step(apply_zoom(viewport, zoom)) for zoom in np.geomspace(1e-3, 1e9, 25)]
    assert all(later < earlier for earlier, later in zip(steps, steps[1:]))
    assert pixel_step(viewport) == 4.0 / 256


def test_deep_zoom_keeps_neighbouring_pixels_distinct():
    viewport = Viewport(size=1024, zoom=1e10, shift_x=-0.7436438870371587, shift_y=0.13182590420531197)
    re, im = plane_axes(viewport)
    assert np.all(np.diff(re) > 0)
    assert np.all(np.diff(im) < 0)


def test_apply_shift_replaces_offsets_only():
    viewport = Viewport(size=8, zoom=2.0)
    shifted = apply_shift(viewport, 1.5, -0.5)
    assert (shifted.shift_x, shifted.shift_y) == (1.5, -0.5)
    assert shifted.zoom == 2.0
    assert (viewport.shift_x, viewport.shift_y) == (0.0, 0.0)


def test_zoom_factors_reach_final_zoom():
    for easing in ("ease", "linear"):
        factors = compute_zoom_factors(12, 1.1, final_zoom=1e4, easing=easing)
        assert factors.shape == (12,)
        assert np.prod(factors) == pytest.approx(1e4)


def test_zoom_factors_without_target_are_constant():
    factors = compute_zoom_factors(5, 1.25, final_zoom=None, easing="ease")
    assert np.all(factors == 1.25)
    assert compute_zoom_factors(0, 1.25, final_zoom=None, easing="ease").size == 0
