"""Image container helpers built on Pillow."""

from __future__ import annotations

import io
from pathlib import Path

import numpy as np
import PIL.Image


def pil_format_name(ext: str) -> str:
    upper = ext.upper().lstrip(".")
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def to_image(pixels: np.ndarray) -> PIL.Image.Image:
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"expected a (height, width, 3) buffer, got shape {pixels.shape}")
    return PIL.Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))


def serialize_image(image: PIL.Image.Image, image_format: str = "jpeg", quality: int = 95) -> bytes:
    """Encode ``image`` into an in-memory byte string."""

    pil_format = pil_format_name(image_format)
    data = io.BytesIO()
    if pil_format == "JPEG":
        image.save(data, format=pil_format, quality=quality)
    else:
        image.save(data, format=pil_format)
    return data.getvalue()


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(serialize_image(image, image_format))
