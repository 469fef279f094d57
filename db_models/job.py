# db_models/job.py
from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, Float, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from db_base import Base


class JobRecord(Base):
    """
    Persisted collection job.

    Assets, driver, evidence and certificates are owned by the job and stored
    as JSON documents alongside it. co2e_saved, buyback_value, charity_percent
    and charity_value are denormalised caches written by the domain core on
    every mutation; they are never edited directly.
    """
    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(String(40), primary_key=True)

    erp_job_number: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False,
    )

    client_id: Mapped[str] = mapped_column(String(40), index=True, nullable=False)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    reseller_id: Mapped[str | None] = mapped_column(String(40), index=True, nullable=True)
    site_name: Mapped[str] = mapped_column(String(255), nullable=False)
    site_address: Mapped[str] = mapped_column(Text, nullable=False)

    # booked / routed / en-route / collected / warehouse / sanitised / graded / finalised
    status: Mapped[str] = mapped_column(
        String(20),
        index=True,
        nullable=False,
        default="booked",
        server_default="booked",
    )

    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False)
    completed_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    assets: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    driver: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    evidence: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    certificates: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)

    # Derived caches
    co2e_saved: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    buyback_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    charity_percent: Mapped[float | None] = mapped_column(Float, nullable=True)
    charity_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Routing inputs
    travel_emissions: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    round_trip_distance_km: Mapped[float | None] = mapped_column(Float, nullable=True)

    charity_rate: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Optimistic concurrency token, bumped on every write
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
