# api/jobs/models.py
"""
Request/response models for job endpoints. Jobs themselves are returned as
the domain `Job` record.
"""
from datetime import date

from pydantic import BaseModel, Field

from domain.models import (
    Driver,
    Evidence,
    Grade,
    GradingRecord,
    Job,
    SanitisationMethod,
    SanitisationRecord,
    WorkflowStatus,
)


class AssetBooking(BaseModel):
    category_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    serial_numbers: list[str] | None = None
    weight: float | None = Field(None, ge=0)


class JobCreate(BaseModel):
    erp_job_number: str = Field(..., min_length=1, max_length=100)
    client_id: str | None = None  # forced to the caller's own client for CLIENT users
    client_name: str = Field(..., min_length=1, max_length=255)
    reseller_id: str | None = None
    site_name: str = Field(..., min_length=1, max_length=255)
    site_address: str = Field(..., min_length=1)
    scheduled_date: date
    assets: list[AssetBooking] = Field(..., min_length=1)
    charity_rate: float | None = Field(None, ge=0, le=100)
    round_trip_distance_km: float | None = Field(None, ge=0)


class EvidenceCreate(BaseModel):
    photos: list[str] = Field(default_factory=list)
    signature: str | None = None
    seal_numbers: list[str] = Field(default_factory=list)
    notes: str | None = None

    def to_domain(self) -> Evidence:
        return Evidence(**self.model_dump())


class StatusUpdate(BaseModel):
    status: WorkflowStatus
    evidence: EvidenceCreate | None = None
    expected_version: int | None = None
    expected_status: WorkflowStatus | None = None


class EvidenceAppend(EvidenceCreate):
    expected_version: int | None = None

    def to_domain(self) -> Evidence:
        return Evidence(**self.model_dump(exclude={"expected_version"}))


class DriverAssign(BaseModel):
    driver: Driver | None = None  # None detaches the current driver
    expected_version: int | None = None


class GradingCreate(BaseModel):
    grade: Grade
    condition: str | None = None
    notes: str | None = None
    expected_version: int | None = None


class SanitisationCreate(BaseModel):
    method: SanitisationMethod
    method_details: str | None = None
    notes: str | None = None
    expected_version: int | None = None


class GradingResponse(BaseModel):
    job: Job
    record: GradingRecord


class SanitisationResponse(BaseModel):
    job: Job
    record: SanitisationRecord
