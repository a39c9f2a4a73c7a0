"""
Image conversion engine.

Pure buffer-in/buffer-out conversion: resize, alpha flattening, metadata
policy and format encoding.

Exports:
  - convert_image: Run one conversion
  - OutputFormat: Closed set of target formats
  - ConversionOptions, ResizeSpec, ConversionResult, ConversionMetadata
  - compute_target_size: Resize policy
"""

from vecta.core.conversion.engine import ALPHA_DROPPED, convert_image
from vecta.core.conversion.formats import OutputFormat, mime_to_input_format
from vecta.core.conversion.models import (
    ConversionMetadata,
    ConversionOptions,
    ConversionResult,
    ResizeSpec,
)
from vecta.core.conversion.resize import compute_target_size

__all__ = [
    "ALPHA_DROPPED",
    "convert_image",
    "OutputFormat",
    "mime_to_input_format",
    "ConversionMetadata",
    "ConversionOptions",
    "ConversionResult",
    "ResizeSpec",
    "compute_target_size",
]
