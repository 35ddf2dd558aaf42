"""Escape-time evaluation of single points of the complex plane."""

from __future__ import annotations

from typing import Optional

# Iteration limit used for rendering. Escape iterations range over
# 0..ESCAPE_LIMIT - 1 so ``ESCAPE_LIMIT - escape`` always fits in one byte.
ESCAPE_LIMIT = 255

ESCAPE_RADIUS_SQUARED = 4.0


def escape_time(c: complex, limit: int) -> Optional[int]:
    """Try to determine whether ``c`` is in the Mandelbrot set using at most ``limit`` iterations.

    Returns the 0-based iteration at which the orbit of ``c`` left the circle of
    radius 2 centered at the origin, or ``None`` if it did not within ``limit``
    iterations, in which case ``c`` may be a member of the set.
    """

    z = 0j
    for i in range(limit):
        z = z * z + c
        if z.real * z.real + z.imag * z.imag > ESCAPE_RADIUS_SQUARED:
            return i
    return None


def intensity(escape: Optional[int]) -> int:
    """Grayscale value for an escape iteration: points that never escaped are black."""

    if escape is None:
        return 0
    return ESCAPE_LIMIT - escape
