"""Serialization of pixel buffers into grayscale image files."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import PIL.Image

from .geometry import Bounds
from .renderer import PixelBuffer, check_buffer


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def resolve_format(path: Union[str, Path], image_format: Optional[str] = None) -> str:
    """Return the Pillow format name used to write ``path``.

    An explicit ``image_format`` wins over the file suffix; PNG is used when
    neither is given. Raises ``ValueError`` for formats Pillow cannot write.
    """

    ext = (image_format or Path(path).suffix or "png").lower().lstrip(".")
    pil_format = _pil_format_name(ext)
    PIL.Image.init()
    if pil_format not in PIL.Image.SAVE:
        raise ValueError(f"unsupported image format '{ext}'")
    return pil_format


def write_image(
    filename: Union[str, Path],
    pixels: PixelBuffer,
    bounds: Bounds,
    image_format: Optional[str] = None,
) -> Path:
    """Write ``pixels``, whose dimensions are given by ``bounds``, to ``filename``.

    Each byte becomes one 8-bit grayscale pixel. Errors raised while writing
    the file are left to the caller.
    """

    check_buffer(pixels, bounds)
    output_path = Path(filename)
    pil_format = resolve_format(output_path, image_format)
    image = PIL.Image.frombytes("L", (bounds[0], bounds[1]), bytes(pixels))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)
    return output_path
