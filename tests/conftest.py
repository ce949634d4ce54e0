import pytest

from fractal import AnimationState

SIZE = 64


@pytest.fixture
def mandelbrot_state():
    with AnimationState.new(SIZE, "mandelbrot") as state:
        yield state


@pytest.fixture
def newton_state():
    with AnimationState.new(SIZE, "newton") as state:
        yield state


def pixel_at(data, size, row, col):
    offset = (row * size + col) * 4
    return tuple(data[offset:offset + 4])
