"""Mapping between the pixel grid and the complex plane."""

from __future__ import annotations

from typing import Optional

import numpy as np

Bounds = tuple[int, int]
Pixel = tuple[int, int]


def pixel_to_point(bounds: Bounds, pixel: Pixel, upper_left: complex, lower_right: complex) -> complex:
    """Return the point of the complex plane represented by ``pixel``.

    ``bounds`` is the ``(width, height)`` of the image in pixels and ``pixel`` a
    ``(column, row)`` within it. ``upper_left`` and ``lower_right`` are the
    corners of the plane rectangle covered by the image.
    """

    width = lower_right.real - upper_left.real
    height = upper_left.imag - lower_right.imag
    # Rows grow downwards while the imaginary part grows upwards.
    return complex(
        upper_left.real + (pixel[0] / bounds[0]) * width,
        upper_left.imag - (pixel[1] / bounds[1]) * height,
    )


def plane_axes(
    bounds: Bounds,
    upper_left: complex,
    lower_right: complex,
    rows: Optional[range] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Vectorized :func:`pixel_to_point`.

    Returns the real part of every column and the imaginary part of every row
    in ``rows`` (all rows by default) as float64 arrays. Each value is computed
    with the same operations as :func:`pixel_to_point`, so the results match it
    exactly.
    """

    x_res, y_res = bounds
    if rows is None:
        rows = range(y_res)

    width = np.float64(lower_right.real - upper_left.real)
    height = np.float64(upper_left.imag - lower_right.imag)

    columns = np.arange(x_res, dtype=np.float64)
    row_indices = np.arange(rows.start, rows.stop, dtype=np.float64)

    re = np.float64(upper_left.real) + (columns / np.float64(x_res)) * width
    im = np.float64(upper_left.imag) - (row_indices / np.float64(y_res)) * height
    return re, im
