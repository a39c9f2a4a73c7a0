"""
Resize policy.

Outputs are never larger than the source: percentages above 100 and boxes
larger than the image leave it untouched.
"""

import math

from vecta.core.conversion.models import ResizeSpec


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_target_size(width: int, height: int, resize: ResizeSpec | None) -> tuple[int, int]:
    """
    Compute output dimensions for a source image.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        resize: Requested resize, None for no resize

    Returns:
        tuple[int, int]: (width, height) of the output
    """
    if resize is None or resize.is_empty:
        return width, height

    if resize.percent is not None:
        if resize.percent >= 100:
            return width, height
        factor = resize.percent / 100
        return (
            min(width, max(1, _round_half_up(width * factor))),
            min(height, max(1, _round_half_up(height * factor))),
        )

    scale = 1.0
    if resize.width is not None:
        scale = min(scale, resize.width / width)
    if resize.height is not None:
        scale = min(scale, resize.height / height)
    if scale >= 1.0:
        return width, height

    return (
        min(width, max(1, _round_half_up(width * scale))),
        min(height, max(1, _round_half_up(height * scale))),
    )
