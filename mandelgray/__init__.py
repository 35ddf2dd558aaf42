"""Public API for grayscale Mandelbrot rendering."""

from .escape import ESCAPE_LIMIT, escape_time, intensity
from .geometry import pixel_to_point, plane_axes
from .parsing import parse_bounds, parse_complex, parse_pair
from .renderer import check_buffer, new_buffer, render, render_parallel, render_rows, split_rows
from .encoder import resolve_format, write_image

__all__ = [
    "ESCAPE_LIMIT",
    "check_buffer",
    "escape_time",
    "intensity",
    "new_buffer",
    "parse_bounds",
    "parse_complex",
    "parse_pair",
    "pixel_to_point",
    "plane_axes",
    "render",
    "render_parallel",
    "render_rows",
    "resolve_format",
    "split_rows",
    "write_image",
]
