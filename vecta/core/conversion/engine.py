"""
Image conversion engine.

convert_image() is a pure function over bytes: it never touches storage or
the database, so the worker can run it in a thread and tests can call it
directly.

Algorithm:
    1. Decode input (corrupt input -> ConversionError)
    2. Resize per ResizeSpec, never enlarging
    3. Flatten alpha onto the background when the target lacks alpha
    4. Drop or carry EXIF/ICC metadata
    5. Encode through the OutputFormat dispatch

Dependencies: Pillow
System role: Per-file conversion algorithm used by conversion workers
"""

import io
import logging

from PIL import Image, ImageColor

from vecta.core.conversion.formats import encode
from vecta.core.conversion.models import (
    ConversionMetadata,
    ConversionOptions,
    ConversionResult,
)
from vecta.core.conversion.resize import compute_target_size
from vecta.core.exceptions import ConversionError

logger = logging.getLogger(__name__)

ALPHA_DROPPED = "alphaDropped"

_ALPHA_MODES = {"RGBA", "LA", "PA", "RGBa", "La"}
_METADATA_KEYS = ("exif", "icc_profile", "xmp", "XML:com.adobe.xmp")


def _open_image(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise ConversionError(f"Invalid image buffer: {e}") from e
    return image


def has_alpha_channel(image: Image.Image) -> bool:
    """Whether the decoded image carries transparency."""
    if image.mode in _ALPHA_MODES:
        return True
    return "transparency" in image.info


def _parse_background(color: str) -> tuple[int, int, int]:
    try:
        return ImageColor.getrgb(color)[:3]
    except ValueError as e:
        raise ConversionError(f"Invalid background color: {color}") from e


def flatten_alpha(image: Image.Image, background_color: str) -> Image.Image:
    """Composite an RGBA image onto a solid background, returning RGB."""
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    background = Image.new("RGB", rgba.size, _parse_background(background_color))
    background.paste(rgba, mask=rgba.getchannel("A"))
    return background


def convert_image(data: bytes, options: ConversionOptions) -> ConversionResult:
    """
    Convert one image.

    Args:
        data: Encoded source image
        options: Target format, quality, resize and metadata policy

    Returns:
        ConversionResult: Encoded output and size/dimension metadata

    Raises:
        ConversionError: Input cannot be decoded or output cannot be encoded
    """
    source = _open_image(data)
    alpha = has_alpha_channel(source)
    exif = source.info.get("exif")
    icc_profile = source.info.get("icc_profile")

    warnings: list[str] = []
    extra: dict = {}
    if not options.strip_metadata:
        if exif:
            extra["exif"] = exif
        if icc_profile:
            extra["icc_profile"] = icc_profile

    try:
        image = source.convert("RGBA" if alpha else "RGB")

        target_size = compute_target_size(image.width, image.height, options.resize)
        if target_size != image.size:
            image = image.resize(target_size, Image.Resampling.LANCZOS)

        if alpha and not options.output_format.supports_alpha:
            image = flatten_alpha(image, options.background_color)
            warnings.append(ALPHA_DROPPED)

        # Some encoders fall back to image.info when no explicit value is passed
        if options.strip_metadata:
            for key in _METADATA_KEYS:
                image.info.pop(key, None)

        output = encode(image, options, extra)
    except (OSError, ValueError, KeyError) as e:
        raise ConversionError(
            f"Failed to encode {options.output_format.value}: {e}"
        ) from e

    logger.debug(
        "Image converted",
        extra={
            "output_format": options.output_format.value,
            "source_size": source.size,
            "target_size": image.size,
            "alpha": alpha,
        },
    )

    return ConversionResult(
        data=output,
        metadata=ConversionMetadata(
            input_size=len(data),
            output_size=len(output),
            width=image.width,
            height=image.height,
            mime=options.output_format.mime_type,
            warnings=warnings,
        ),
    )
