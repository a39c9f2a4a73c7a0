"""
Conversion task payload.

Serialized as JSON into each Celery message; one message per JobFile.

Dependencies: pydantic
System role: Queue message contract between API and workers
"""

from uuid import UUID

from pydantic import BaseModel, Field

from vecta.core.conversion import ConversionOptions, OutputFormat, ResizeSpec


class TaskOptions(BaseModel):
    """Encoder options copied from the job at start time."""

    quality: int = Field(ge=1, le=100)
    resize_percent: int | None = Field(default=None, gt=0)
    resize_width: int | None = Field(default=None, gt=0)
    resize_height: int | None = Field(default=None, gt=0)

    def resize_spec(self) -> ResizeSpec | None:
        if self.resize_percent is None and self.resize_width is None and self.resize_height is None:
            return None
        return ResizeSpec(
            percent=self.resize_percent,
            width=self.resize_width,
            height=self.resize_height,
        )


class ConversionTask(BaseModel):
    """One queued file conversion."""

    job_id: UUID
    file_id: UUID
    input_key: str
    output_format: OutputFormat
    options: TaskOptions

    def to_conversion_options(
        self,
        strip_metadata: bool = True,
        background_color: str = "#FFFFFF",
        avif_speed: int = 6,
    ) -> ConversionOptions:
        """Build engine options, filling encoder defaults from configuration."""
        return ConversionOptions(
            output_format=self.output_format,
            quality=self.options.quality,
            strip_metadata=strip_metadata,
            background_color=background_color,
            resize=self.options.resize_spec(),
            avif_speed=avif_speed,
        )
