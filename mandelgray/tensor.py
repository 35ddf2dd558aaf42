"""TensorFlow backend evaluating every pixel of a frame at once."""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np
import tensorflow as tf

from .escape import ESCAPE_LIMIT, ESCAPE_RADIUS_SQUARED
from .geometry import Bounds, plane_axes
from .renderer import PixelBuffer, check_buffer


@tf.function
def _escape_step(
    i: tf.Tensor,
    cr: tf.Tensor,
    ci: tf.Tensor,
    zr: tf.Tensor,
    zi: tf.Tensor,
    escape: tf.Tensor,
    active: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Perform a single iteration for the points that have not escaped yet."""

    # Same operations, in the same order, as Python's complex z * z + c.
    zr_new = (zr * zr - zi * zi) + cr
    zi_new = (zr * zi + zi * zr) + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    radius = tf.constant(ESCAPE_RADIUS_SQUARED, dtype=zr.dtype)
    escaped = tf.logical_and(active, zr * zr + zi * zi > radius)
    escape = tf.where(escaped, tf.fill(tf.shape(escape), i), escape)
    return zr, zi, escape, tf.logical_and(active, tf.logical_not(escaped))


@tf.function
def _escape_run(cr: tf.Tensor, ci: tf.Tensor, limit: tf.Tensor) -> tf.Tensor:
    """Iterate the Mandelbrot map using a TensorFlow while loop.

    Returns the escape iteration of every point, or -1 for points that did not
    escape within ``limit`` iterations.
    """

    limit = tf.cast(limit, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    zr = tf.zeros_like(cr)
    zi = tf.zeros_like(ci)
    escape = tf.fill(tf.shape(cr), tf.constant(-1, dtype=tf.int32))
    active = tf.ones_like(escape, tf.bool)

    def cond(i, zr, zi, escape, active):
        return tf.logical_and(tf.less(i, limit), tf.reduce_any(active))

    def body(i, zr, zi, escape, active):
        zr, zi, escape, active = _escape_step(i, cr, ci, zr, zi, escape, active)
        return i + 1, zr, zi, escape, active

    _, _, _, escape, _ = tf.while_loop(cond, body, (i, zr, zi, escape, active))
    return escape


def render_tensor(
    pixels: PixelBuffer,
    bounds: Bounds,
    upper_left: complex,
    lower_right: complex,
    *,
    device: Optional[str] = None,
) -> None:
    """Render like :func:`mandelgray.renderer.render`, evaluating the whole grid with TensorFlow."""

    check_buffer(pixels, bounds)
    re, im = plane_axes(bounds, upper_left, lower_right)
    X, Y = np.meshgrid(re, im)

    with tf.device(device if device is not None else "/CPU:0"):
        cr = tf.convert_to_tensor(X, dtype=tf.float64)
        ci = tf.convert_to_tensor(Y, dtype=tf.float64)
        escape = _escape_run(cr, ci, tf.constant(ESCAPE_LIMIT, dtype=tf.int32))
        values = tf.where(escape >= 0, ESCAPE_LIMIT - escape, tf.zeros_like(escape))

    pixels[:] = memoryview(values.numpy().astype(np.uint8).tobytes())


def select_device(log: Callable[..., None] = print) -> str:
    """Pick the first visible GPU when there is one, the CPU otherwise."""

    gpus = tf.config.list_physical_devices("GPU")
    if not gpus:
        log("No GPU found, using CPU")
        return "/CPU:0"
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        log(e)
        return "/CPU:0"
    log("GPU found, using %s" % gpus[0].name)
    return "/GPU:0"
