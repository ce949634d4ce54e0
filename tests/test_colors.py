import numpy as np

from fractal import color_escape_time, color_newton


def _canvas(rows, cols):
    return np.zeros((rows, cols, 4), dtype=np.uint8)


def test_escape_palette_paints_interior_black():
    counts = np.array([[0, 255], [255, 100]])
    out = _canvas(2, 2)
    color_escape_time(counts, 255, out)
    assert tuple(out[0, 1]) == (0, 0, 0, 255)
    assert tuple(out[1, 0]) == (0, 0, 0, 255)
    assert tuple(out[0, 0]) == (255, 0, 0, 255)
    assert tuple(out[1, 1]) != (0, 0, 0, 255)


def test_escape_palette_is_opaque_everywhere():
    counts = np.arange(256).reshape(16, 16)
    out = _canvas(16, 16)
    color_escape_time(counts, 255, out)
    assert np.all(out[..., 3] == 255)
    # every escaped pixel has at least one channel at full intensity
    escaped = counts < 255
    assert np.all(out[..., :3].max(axis=-1)[escaped] == 255)


def test_escape_palette_varies_with_count():
    counts = np.array([[5, 60, 120, 200]])
    out = _canvas(1, 4)
    color_escape_time(counts, 255, out)
    colors = {tuple(pixel) for pixel in out[0]}
    assert len(colors) == 4


def test_newton_palette_gives_each_root_its_own_hue():
    labels = np.array([[0, 1], [2, -1]])
    iterations = np.zeros((2, 2), dtype=np.int32)
    out = _canvas(2, 2)
    color_newton(labels, iterations, 3, out)
    assert tuple(out[0, 0]) == (255, 38, 38, 255)
    assert int(np.argmax(out[0, 1, :3])) == 1
    assert int(np.argmax(out[1, 0, :3])) == 2
    assert tuple(out[1, 1]) == (128, 128, 128, 255)


def test_newton_palette_darkens_slow_convergence():
    labels = np.array([[0, 0, 0]])
    iterations = np.array([[0, 5, 40]])
    out = _canvas(1, 3)
    color_newton(labels, iterations, 3, out)
    brightness = out[0, :, :3].astype(int).sum(axis=-1)
    assert brightness[0] > brightness[1] > brightness[2]
    assert np.all(out[..., 3] == 255)
