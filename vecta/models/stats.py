"""
Admin statistics response schema.

Dependencies: pydantic
System role: GET /admin/stats contract
"""

from datetime import datetime

from pydantic import BaseModel


class ConversionCounts(BaseModel):
    today: int
    week: int
    month: int
    total: int


class BytesProcessed(BaseModel):
    total_input: int
    total_output: int


class FormatCount(BaseModel):
    format: str
    count: int


class HourlyCount(BaseModel):
    hour: datetime
    count: int


class ErrorRate(BaseModel):
    """Finished jobs; failed includes jobs expired by the reaper."""

    total: int
    failed: int


class ConversionPerformance(BaseModel):
    events: int
    avg_savings_percent: float | None = None
    avg_duration_ms: int | None = None


class StatsResponse(BaseModel):
    conversions: ConversionCounts
    bytes: BytesProcessed
    formats: list[FormatCount]
    hourly: list[HourlyCount]
    error_rate: ErrorRate
    performance: ConversionPerformance
