"""Exceptions raised by the fractal engine."""


class FractalError(Exception):
    """Base class for every error raised by the engine."""


class InvalidConfig(FractalError, ValueError):
    """Construction was requested with a bad size, mode or render setting."""


class InvalidZoom(FractalError, ValueError):
    """A zoom that is not a finite positive number was rejected."""


class StateDisposed(FractalError, RuntimeError):
    """An operation was attempted on a disposed animation state."""
