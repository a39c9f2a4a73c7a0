"""
Conversion engine value types.

Dependencies: dataclasses
System role: Inputs and outputs of convert_image
"""

from dataclasses import dataclass, field

from vecta.core.conversion.formats import OutputFormat


@dataclass(frozen=True)
class ResizeSpec:
    """
    Resize request: a percentage OR a bounding box, never both.

    Attributes:
        percent: Scale both dimensions by this percentage
        width: Maximum output width in pixels
        height: Maximum output height in pixels
    """

    percent: int | None = None
    width: int | None = None
    height: int | None = None

    def __post_init__(self) -> None:
        has_box = self.width is not None or self.height is not None
        if self.percent is not None and has_box:
            raise ValueError("Cannot specify both pixel dimensions and resize percentage")
        for name in ("percent", "width", "height"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"Resize {name} must be a positive integer")

    @property
    def is_empty(self) -> bool:
        return self.percent is None and self.width is None and self.height is None


@dataclass(frozen=True)
class ConversionOptions:
    output_format: OutputFormat
    quality: int = 82
    lossless: bool = False
    strip_metadata: bool = True
    background_color: str = "#FFFFFF"
    resize: ResizeSpec | None = None
    avif_speed: int = 6


@dataclass
class ConversionMetadata:
    input_size: int
    output_size: int
    width: int
    height: int
    mime: str
    warnings: list[str] = field(default_factory=list)

    @property
    def savings_percent(self) -> float:
        if self.input_size <= 0:
            return 0.0
        return round((self.input_size - self.output_size) / self.input_size * 100, 1)


@dataclass
class ConversionResult:
    data: bytes
    metadata: ConversionMetadata
