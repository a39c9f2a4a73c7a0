"""
Job submission validators.

Business rules applied to a create-job request before anything is
persisted. Each validator raises a VectaError subclass naming the rejected
value.

Dependencies: vecta.core
System role: Input validation for JobService
"""

import re
from dataclasses import dataclass
from typing import Sequence

from vecta.configs.limits import LimitsSettings
from vecta.core.conversion import OutputFormat, ResizeSpec, mime_to_input_format
from vecta.core.conversion.formats import INPUT_MIME_TYPES
from vecta.core.exceptions import FileTooLargeError, ValidationError

DANGEROUS_FILENAME_PATTERN = re.compile(r'[<>:"/\\|?*\x00-\x1f]|\.{2,}')


@dataclass(frozen=True)
class ValidatedFile:
    """A file that passed validation, with its sanitized name."""

    name: str
    size: int
    mime_type: str
    input_format: str


def sanitize_file_name(name: str) -> str:
    """
    Reject unsafe names and reduce to a basename.

    Raises:
        ValidationError: Name contains reserved characters, "..", or is a dotfile
    """
    if DANGEROUS_FILENAME_PATTERN.search(name):
        raise ValidationError(f'Invalid file name: "{name}"', field="name")

    basename = name.split("/")[-1].split("\\")[-1]
    if not basename or basename.startswith("."):
        raise ValidationError(f'Invalid file name: "{name}"', field="name")
    return basename


def base_name(file_name: str) -> str:
    """File name without its last extension ("a.b.png" -> "a.b")."""
    dot = file_name.rfind(".")
    return file_name[:dot] if dot > 0 else file_name


def output_file_name(file_name: str, output_format: OutputFormat) -> str:
    return f"{base_name(file_name)}.{output_format.extension}"


def validate_output_format(value: str) -> OutputFormat:
    try:
        return OutputFormat(value.lower())
    except ValueError:
        allowed = ", ".join(f.value for f in OutputFormat)
        raise ValidationError(
            f'Invalid output format "{value}". Allowed: {allowed}',
            field="output_format",
        ) from None


def validate_quality(quality: int | None, default: int) -> int:
    if quality is None:
        return default
    if not 1 <= quality <= 100:
        raise ValidationError("Quality must be between 1 and 100", field="quality")
    return quality


def validate_resize(
    percent: int | None = None,
    width: int | None = None,
    height: int | None = None,
) -> ResizeSpec | None:
    """Build a ResizeSpec, None when no resize was requested."""
    try:
        spec = ResizeSpec(percent=percent, width=width, height=height)
    except ValueError as e:
        raise ValidationError(str(e), field="resize") from e
    return None if spec.is_empty else spec


def validate_files(
    files: Sequence,
    limits: LimitsSettings,
    output_format: OutputFormat,
) -> list[ValidatedFile]:
    """
    Validate the declared files of a job.

    Args:
        files: Objects with name, size and mime_type attributes
        limits: Configured limits
        output_format: Target format, used to detect colliding output names

    Returns:
        list[ValidatedFile]: Files in submission order with sanitized names

    Raises:
        ValidationError: Count, total size, MIME type, name or duplicates rejected
        FileTooLargeError: A single file exceeds max_file_size
    """
    if not files:
        raise ValidationError("At least one file is required", field="files")
    if len(files) > limits.max_files_per_job:
        raise ValidationError(
            f"At most {limits.max_files_per_job} files per job (received {len(files)})",
            field="files",
        )

    validated: list[ValidatedFile] = []
    seen_names: set[str] = set()
    seen_outputs: set[str] = set()
    total_size = 0

    for file in files:
        input_format = mime_to_input_format(file.mime_type)
        if input_format is None:
            allowed = ", ".join(INPUT_MIME_TYPES)
            raise ValidationError(
                f'Invalid MIME type "{file.mime_type}" for "{file.name}". Allowed: {allowed}',
                field="mime_type",
            )
        if file.size > limits.max_file_size:
            raise FileTooLargeError(file.size, limits.max_file_size)

        name = sanitize_file_name(file.name)
        if name in seen_names:
            raise ValidationError(f'Duplicate file name: "{name}"', field="name")
        output_name = output_file_name(name, output_format)
        if output_name in seen_outputs:
            raise ValidationError(
                f'Files produce the same output name: "{output_name}"',
                field="name",
            )
        seen_names.add(name)
        seen_outputs.add(output_name)

        total_size += file.size
        validated.append(
            ValidatedFile(
                name=name,
                size=file.size,
                mime_type=file.mime_type,
                input_format=input_format,
            )
        )

    if total_size > limits.max_total_job_size:
        total_mb = total_size / 1024 / 1024
        limit_mb = limits.max_total_job_size / 1024 / 1024
        raise ValidationError(
            f"Total job size {total_mb:.1f}MB exceeds {limit_mb:.0f}MB limit",
            field="files",
        )

    return validated
