"""
Analytics event ORM model.

Append-only record of completed conversions. Written fire-and-forget by
workers; read only by the admin statistics queries.

Dependencies: sqlalchemy, vecta.boundary.db.base
System role: Conversion analytics storage
"""

from sqlalchemy import BigInteger, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from vecta.boundary.db.base import Base, TimestampMixin, UUIDMixin

CONVERSION_COMPLETED = "conversion_completed"


class AnalyticsEventModel(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "analytics_events"

    event_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    input_format: Mapped[str | None] = mapped_column(String(16), nullable=True)
    output_format: Mapped[str] = mapped_column(String(16), nullable=False)
    input_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    output_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    savings_percent: Mapped[float] = mapped_column(Float, nullable=False)
    duration_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    quality: Mapped[int] = mapped_column(Integer, nullable=False)
