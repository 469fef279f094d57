# db_models/asset_record.py
from datetime import datetime

from sqlalchemy import (
    String,
    DateTime,
    Float,
    Boolean,
    Text,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from db_base import Base


class GradingRecordRow(Base):
    """Append-only grading history; the latest row per asset is effective."""
    __tablename__ = "grading_records"
    __table_args__ = (
        Index("ix_grading_job_asset", "job_id", "asset_id"),
    )

    id: Mapped[str] = mapped_column(String(40), primary_key=True)

    job_id: Mapped[str] = mapped_column(
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    asset_id: Mapped[str] = mapped_column(String(40), nullable=False)
    asset_category: Mapped[str] = mapped_column(String(40), nullable=False)

    # A / B / C / D / Recycled
    grade: Mapped[str] = mapped_column(String(20), nullable=False)

    # Per-unit value at grading time
    resale_value: Mapped[float] = mapped_column(Float, nullable=False)

    graded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    graded_by: Mapped[str] = mapped_column(String(100), nullable=False)
    condition: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class SanitisationRecordRow(Base):
    """Append-only data-wipe history."""
    __tablename__ = "sanitisation_records"
    __table_args__ = (
        Index("ix_sanitisation_job_asset", "job_id", "asset_id"),
    )

    id: Mapped[str] = mapped_column(String(40), primary_key=True)

    job_id: Mapped[str] = mapped_column(
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    asset_id: Mapped[str] = mapped_column(String(40), nullable=False)

    # blancco / physical-destruction / degaussing / shredding / other
    method: Mapped[str] = mapped_column(String(30), nullable=False)
    method_details: Mapped[str | None] = mapped_column(Text, nullable=True)

    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    performed_by: Mapped[str] = mapped_column(String(100), nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
