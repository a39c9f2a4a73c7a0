"""
Output formats and their encoders.

OutputFormat is the closed set of targets the service produces. Each member
has exactly one encoder in ENCODERS; encode() is the only place that picks
one, so adding a format means adding an enum member and an encoder.

Dependencies: Pillow
System role: Format dispatch for the conversion engine
"""

import enum
import io
from typing import Any, Callable

from PIL import Image


class OutputFormat(str, enum.Enum):
    """Target formats accepted for a job."""

    WEBP = "webp"
    JPG = "jpg"
    PNG = "png"
    AVIF = "avif"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]

    @property
    def supports_alpha(self) -> bool:
        """Whether outputs keep an alpha channel (jpg and avif are flattened)."""
        return self in (OutputFormat.WEBP, OutputFormat.PNG)


_MIME_TYPES = {
    OutputFormat.WEBP: "image/webp",
    OutputFormat.JPG: "image/jpeg",
    OutputFormat.PNG: "image/png",
    OutputFormat.AVIF: "image/avif",
}

# Declared upload MIME type -> recorded original format
INPUT_MIME_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
}


def mime_to_input_format(mime_type: str) -> str | None:
    """Map an upload MIME type to its short format name, None if unsupported."""
    return INPUT_MIME_TYPES.get(mime_type)


Encoder = Callable[[Image.Image, io.BytesIO, Any, dict], None]


def _encode_webp(image: Image.Image, buffer: io.BytesIO, options, extra: dict) -> None:
    image.save(
        buffer,
        format="WEBP",
        quality=options.quality,
        lossless=options.lossless,
        method=4,
        **extra,
    )


def _encode_jpg(image: Image.Image, buffer: io.BytesIO, options, extra: dict) -> None:
    image.save(
        buffer,
        format="JPEG",
        quality=options.quality,
        optimize=True,
        progressive=True,
        **extra,
    )


def _encode_png(image: Image.Image, buffer: io.BytesIO, options, extra: dict) -> None:
    # PNG is lossless; quality has no meaning here
    image.save(buffer, format="PNG", optimize=True, compress_level=9, **extra)


def _encode_avif(image: Image.Image, buffer: io.BytesIO, options, extra: dict) -> None:
    image.save(
        buffer,
        format="AVIF",
        quality=options.quality,
        speed=options.avif_speed,
        **extra,
    )


ENCODERS: dict[OutputFormat, Encoder] = {
    OutputFormat.WEBP: _encode_webp,
    OutputFormat.JPG: _encode_jpg,
    OutputFormat.PNG: _encode_png,
    OutputFormat.AVIF: _encode_avif,
}


def encode(image: Image.Image, options, extra: dict | None = None) -> bytes:
    """
    Encode an image in the options' output format.

    Args:
        image: RGB or RGBA image ready for encoding
        options: ConversionOptions carrying format and encoder settings
        extra: Additional save() keyword arguments (exif, icc_profile)

    Returns:
        bytes: Encoded image
    """
    buffer = io.BytesIO()
    ENCODERS[options.output_format](image, buffer, options, extra or {})
    return buffer.getvalue()
