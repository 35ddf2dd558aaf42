"""Rendering of the Mandelbrot set into grayscale pixel buffers."""

from __future__ import annotations

import math
import multiprocessing as mp
import os
from typing import MutableSequence, Optional

import numpy as np

from .escape import ESCAPE_LIMIT, escape_time, intensity
from .geometry import Bounds, pixel_to_point

PixelBuffer = MutableSequence[int]


def new_buffer(bounds: Bounds) -> np.ndarray:
    """Allocate a zeroed row-major buffer with one byte per pixel."""

    return np.zeros(bounds[0] * bounds[1], dtype=np.uint8)


def check_buffer(pixels: PixelBuffer, bounds: Bounds) -> None:
    """Raise ``ValueError`` unless ``pixels`` holds exactly one byte per pixel of ``bounds``."""

    expected = bounds[0] * bounds[1]
    if len(pixels) != expected:
        raise ValueError(
            f"pixel buffer holds {len(pixels)} bytes but bounds {bounds[0]}x{bounds[1]} need {expected}"
        )


def render_rows(
    pixels: PixelBuffer,
    bounds: Bounds,
    upper_left: complex,
    lower_right: complex,
    start: int,
    stop: int,
) -> None:
    """Render rows ``[start, stop)`` of the image into ``pixels``.

    ``pixels`` holds only that band: row ``start`` lands at index 0. Points are
    mapped against the full ``bounds`` so that bands rendered separately are
    identical to the corresponding rows of a full render.
    """

    width = bounds[0]
    for row in range(start, stop):
        offset = (row - start) * width
        for column in range(width):
            point = pixel_to_point(bounds, (column, row), upper_left, lower_right)
            pixels[offset + column] = intensity(escape_time(point, ESCAPE_LIMIT))


def render(pixels: PixelBuffer, bounds: Bounds, upper_left: complex, lower_right: complex) -> None:
    """Render a rectangle of the Mandelbrot set into a buffer of pixels.

    ``bounds`` gives the width and height of ``pixels``, which holds one
    grayscale byte per pixel. ``upper_left`` and ``lower_right`` are the points
    of the complex plane at the corresponding corners of the image.
    """

    check_buffer(pixels, bounds)
    render_rows(pixels, bounds, upper_left, lower_right, 0, bounds[1])


def split_rows(height: int, bands: int) -> list[tuple[int, int]]:
    """Split ``height`` rows into at most ``bands`` contiguous ``(start, stop)`` ranges."""

    if height <= 0:
        return []
    rows_per_band = math.ceil(height / max(bands, 1))
    return [(start, min(start + rows_per_band, height)) for start in range(0, height, rows_per_band)]


def _render_band(job: tuple[Bounds, complex, complex, int, int]) -> tuple[int, bytes]:
    bounds, upper_left, lower_right, start, stop = job
    band = bytearray(bounds[0] * (stop - start))
    render_rows(band, bounds, upper_left, lower_right, start, stop)
    return start, bytes(band)


def render_parallel(
    pixels: PixelBuffer,
    bounds: Bounds,
    upper_left: complex,
    lower_right: complex,
    workers: Optional[int] = None,
) -> None:
    """Render like :func:`render`, splitting the rows into bands over a process pool.

    Each band is computed by one worker into its own buffer and copied into
    its slice of ``pixels`` once returned. With ``workers == 1`` everything
    runs in the calling process.
    """

    check_buffer(pixels, bounds)
    if workers is None:
        workers = os.cpu_count() or 1
    bands = split_rows(bounds[1], workers)
    if workers <= 1 or len(bands) <= 1:
        render_rows(pixels, bounds, upper_left, lower_right, 0, bounds[1])
        return

    width = bounds[0]
    jobs = [(bounds, upper_left, lower_right, start, stop) for start, stop in bands]
    with mp.Pool(processes=min(workers, len(bands))) as pool:
        for start, band in pool.imap_unordered(_render_band, jobs):
            pixels[start * width:start * width + len(band)] = memoryview(band)
