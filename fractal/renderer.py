"""Iteration kernels that classify points of the complex plane."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

import numpy as np
import tensorflow as tf

from .runtime import CPU_DEVICE

HORIZON_SQUARED = 4.0
MAX_ITERATIONS = 255
TOLERANCE = 1e-6
DERIVATIVE_FLOOR = 1e-12
NON_CONVERGENT = -1


class Mode(enum.Enum):
    """The two built-in fractal families."""

    MANDELBROT = "mandelbrot"
    NEWTON = "newton"


@dataclass(frozen=True)
class NewtonPolynomial:
    """A polynomial with its derivative and known roots.

    Coefficients are listed highest degree first.
    """

    coefficients: tuple[complex, ...]
    derivative: tuple[complex, ...]
    roots: tuple[complex, ...]


_HALF_SQRT3 = float(np.sqrt(3.0) / 2.0)

CUBIC_UNITY = NewtonPolynomial(
    coefficients=(1.0, 0.0, 0.0, -1.0),
    derivative=(3.0, 0.0, 0.0),
    roots=(complex(1.0, 0.0), complex(-0.5, _HALF_SQRT3), complex(-0.5, -_HALF_SQRT3)),
)


def _abs2(zs: tf.Tensor) -> tf.Tensor:
    return tf.math.square(tf.math.real(zs)) + tf.math.square(tf.math.imag(zs))


def _horner(coefficients: tf.Tensor, zs: tf.Tensor) -> tf.Tensor:
    acc = tf.zeros_like(zs)
    for coefficient in tf.unstack(coefficients):
        acc = acc * zs + coefficient
    return acc


@tf.function
def _escape_step(zs: tf.Tensor, cs: tf.Tensor, ns: tf.Tensor, active: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every orbit that is still inside the escape horizon by one step."""

    zs_new = zs * zs + cs
    zs = tf.where(active, zs_new, zs)
    ns = ns + tf.cast(active, tf.int32)
    horizon = tf.constant(HORIZON_SQUARED, dtype=tf.float64)
    active = tf.logical_and(active, _abs2(zs) <= horizon)
    return zs, ns, active


@tf.function
def _escape_run(cs: tf.Tensor, zs: tf.Tensor, ns: tf.Tensor, max_iterations: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    active = tf.ones_like(ns, tf.bool)

    def cond(i, zs, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zs, ns, active):
        zs, ns, active = _escape_step(zs, cs, ns, active)
        return i + 1, zs, ns, active

    return tf.while_loop(cond, body, (i, zs, ns, active))


@tf.function
def _newton_step(
    i: tf.Tensor,
    zs: tf.Tensor,
    ns: tf.Tensor,
    labels: tf.Tensor,
    active: tf.Tensor,
    coefficients: tf.Tensor,
    derivative: tf.Tensor,
    roots: tf.Tensor,
    tolerance: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Take one Newton step for every point that has not settled yet.

    Points settle by converging (labelled with the nearest root), by hitting a
    vanishing derivative, or by producing a non-finite step. The last two keep
    the non-convergent label.
    """

    value = _horner(coefficients, zs)
    slope = _horner(derivative, zs)
    floor = tf.constant(DERIVATIVE_FLOOR * DERIVATIVE_FLOOR, dtype=tf.float64)
    stalled = tf.logical_and(active, _abs2(slope) < floor)
    step = value / tf.where(stalled, tf.ones_like(slope), slope)
    zs_new = zs - step

    step_size = _abs2(step)
    moving = tf.logical_and(active, tf.logical_not(stalled))
    diverged = tf.logical_and(moving, tf.logical_not(tf.math.is_finite(step_size)))
    converged = tf.logical_and(moving, step_size < tolerance * tolerance)

    distances = _abs2(tf.expand_dims(zs_new, -1) - roots)
    nearest = tf.cast(tf.argmin(distances, axis=-1), tf.int32)
    labels = tf.where(converged, nearest, labels)

    settled = tf.logical_or(converged, tf.logical_or(stalled, diverged))
    ns = tf.where(settled, tf.fill(tf.shape(ns), i), ns)
    active = tf.logical_and(active, tf.logical_not(settled))
    zs = tf.where(active, zs_new, zs)
    return zs, ns, labels, active


@tf.function
def _newton_run(
    zs: tf.Tensor,
    ns: tf.Tensor,
    labels: tf.Tensor,
    coefficients: tf.Tensor,
    derivative: tf.Tensor,
    roots: tf.Tensor,
    tolerance: tf.Tensor,
    max_iterations: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    active = tf.ones_like(ns, tf.bool)

    def cond(i, zs, ns, labels, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zs, ns, labels, active):
        zs, ns, labels, active = _newton_step(i, zs, ns, labels, active, coefficients, derivative, roots, tolerance)
        return i + 1, zs, ns, labels, active

    return tf.while_loop(cond, body, (i, zs, ns, labels, active))


def _plane_grid(re: np.ndarray, im: np.ndarray) -> tf.Tensor:
    re_tf = tf.convert_to_tensor(re, dtype=tf.float64)
    im_tf = tf.convert_to_tensor(im, dtype=tf.float64)
    X, Y = tf.meshgrid(re_tf, im_tf)
    return tf.complex(X, Y)


def escape_time(
    re: np.ndarray,
    im: np.ndarray,
    max_iterations: int = MAX_ITERATIONS,
    *,
    device: Optional[str] = None,
) -> np.ndarray:
    """Mandelbrot escape counts over the grid spanned by ``re`` and ``im``.

    The result has shape ``(len(im), len(re))``. Each entry is the first ``n``
    with ``|z_n|² > 4``, or ``max_iterations`` for orbits that stay bounded.
    """

    with tf.device(device if device is not None else CPU_DEVICE):
        cs = _plane_grid(re, im)
        zs = tf.zeros_like(cs)
        ns = tf.zeros(tf.shape(cs), dtype=tf.int32)
        _, _, ns, _ = _escape_run(cs, zs, ns, tf.constant(max_iterations, dtype=tf.int32))

    return ns.numpy()


def newton_basins(
    re: np.ndarray,
    im: np.ndarray,
    polynomial: NewtonPolynomial = CUBIC_UNITY,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = TOLERANCE,
    *,
    device: Optional[str] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Newton root labels and iteration counts over the grid of ``re`` and ``im``.

    Returns ``(labels, iterations)``, both shaped ``(len(im), len(re))``. A
    label is an index into ``polynomial.roots`` or ``NON_CONVERGENT``. A point
    converges at step ``n`` when ``|z_{n+1} - z_n| < tolerance``, so a point
    that starts on a root reports zero iterations.
    """

    with tf.device(device if device is not None else CPU_DEVICE):
        zs = _plane_grid(re, im)
        shape = tf.shape(zs)
        ns = tf.fill(shape, tf.constant(max_iterations, dtype=tf.int32))
        labels = tf.fill(shape, tf.constant(NON_CONVERGENT, dtype=tf.int32))
        _, _, ns, labels, _ = _newton_run(
            zs,
            ns,
            labels,
            tf.constant(np.asarray(polynomial.coefficients, dtype=np.complex128)),
            tf.constant(np.asarray(polynomial.derivative, dtype=np.complex128)),
            tf.constant(np.asarray(polynomial.roots, dtype=np.complex128)),
            tf.constant(tolerance, dtype=tf.float64),
            tf.constant(max_iterations, dtype=tf.int32),
        )

    return labels.numpy(), ns.numpy()
