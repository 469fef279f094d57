# api/jobs/views.py
"""
Collection job endpoints: booking, workflow progression, driver assignment,
evidence capture, and per-asset grading and sanitisation.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from db_models.user import User
from core.deps import (
    AdminUser,
    Aggregate,
    AuthorizationError,
    BookingUser,
    CurrentUser,
    Scope,
    scope_for,
)
from domain.dashboard import is_visible_to
from domain.errors import (
    AssetNotFoundError,
    JobDomainError,
    MissingEvidenceError,
    UnknownCategoryError,
)
from domain.jobs import new_id
from domain.models import (
    Asset,
    GradingRecord,
    Job,
    JobsFilter,
    SanitisationRecord,
    WorkflowStatus,
)
from .models import (
    DriverAssign,
    EvidenceAppend,
    GradingCreate,
    GradingResponse,
    JobCreate,
    SanitisationCreate,
    SanitisationResponse,
    StatusUpdate,
)
from . import db_manager

router = APIRouter(prefix="/jobs", tags=["jobs"])


def _http_error(exc: Exception) -> HTTPException:
    """Map a job or domain error onto its HTTP status."""
    if isinstance(exc, (db_manager.JobNotFoundError, AssetNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, UnknownCategoryError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, MissingEvidenceError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        code = status.HTTP_409_CONFLICT
    return HTTPException(status_code=code, detail=str(exc))


async def _visible_job(db: AsyncSession, job_id: str, user: User) -> Job:
    """Load a job, hiding jobs outside the caller's scope as not found."""
    try:
        job = await db_manager.get_job(db, job_id)
    except db_manager.JobNotFoundError as exc:
        raise _http_error(exc) from exc
    if not is_visible_to(job, scope_for(user)):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job {job_id} not found",
        )
    return job


def _require_operator(job: Job, user: User) -> None:
    """Admins, or the driver assigned to this job."""
    if user.can_manage_jobs():
        return
    if user.is_driver() and job.driver is not None and job.driver.id == str(user.id):
        return
    raise AuthorizationError("Only admins or the assigned driver can update this job")


# ---------- Booking and reads ----------

@router.post(
    "",
    response_model=Job,
    status_code=status.HTTP_201_CREATED,
    summary="Book a collection job",
)
async def book_job_endpoint(
    payload: JobCreate,
    user: BookingUser,
    aggregate: Aggregate,
    db: AsyncSession = Depends(get_session),
) -> Job:
    """
    Book a job with its expected assets. Clients always book for their own
    organisation; admins must name the client.
    """
    client_id = user.client_id if not user.can_manage_jobs() else payload.client_id
    if not client_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="client_id is required",
        )

    try:
        assets = [
            Asset(
                id=new_id("ast"),
                category_id=item.category_id,
                quantity=item.quantity,
                serial_numbers=item.serial_numbers,
                weight=item.weight,
            )
            for item in payload.assets
        ]
        job = aggregate.book_job(
            erp_job_number=payload.erp_job_number,
            client_id=client_id,
            client_name=payload.client_name,
            reseller_id=payload.reseller_id,
            site_name=payload.site_name,
            site_address=payload.site_address,
            scheduled_date=payload.scheduled_date,
            assets=assets,
            charity_rate=payload.charity_rate,
            round_trip_distance_km=payload.round_trip_distance_km,
        )
        return await db_manager.create_job(db, job)
    except db_manager.DuplicateJobNumberError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    except JobDomainError as exc:
        raise _http_error(exc) from exc


@router.get(
    "",
    response_model=list[Job],
    summary="List jobs visible to the caller",
)
async def list_jobs_endpoint(
    scope: Scope,
    db: AsyncSession = Depends(get_session),
    status_filter: WorkflowStatus | None = Query(None, alias="status"),
    client_id: str | None = Query(None),
    client_name: str | None = Query(None),
    search: str | None = Query(None, description="Matches ERP number, client or site name"),
    limit: int | None = Query(None, gt=0, le=500),
    offset: int = Query(0, ge=0),
) -> list[Job]:
    jobs_filter = JobsFilter(
        status=status_filter,
        client_id=client_id,
        client_name=client_name,
        search_query=search,
        limit=limit,
        offset=offset,
    )
    return await db_manager.list_jobs(db, scope, jobs_filter)


@router.get(
    "/{job_id}",
    response_model=Job,
    summary="Get job by ID",
)
async def get_job_endpoint(
    job_id: str,
    user: CurrentUser,
    db: AsyncSession = Depends(get_session),
) -> Job:
    return await _visible_job(db, job_id, user)


# ---------- Workflow ----------

@router.patch(
    "/{job_id}/status",
    response_model=Job,
    summary="Advance a job to its next stage",
)
async def update_status_endpoint(
    job_id: str,
    payload: StatusUpdate,
    user: CurrentUser,
    aggregate: Aggregate,
    db: AsyncSession = Depends(get_session),
) -> Job:
    """
    Move the job exactly one stage forward. Pass `expected_version` (or
    `expected_status`) to fail with 409 instead of overwriting a concurrent
    change.
    """
    job = await _visible_job(db, job_id, user)
    _require_operator(job, user)

    try:
        return await db_manager.transition_job(
            db,
            aggregate,
            job_id,
            payload.status,
            evidence=payload.evidence.to_domain() if payload.evidence else None,
            expected_version=payload.expected_version,
            expected_status=payload.expected_status,
        )
    except (db_manager.JobNotFoundError, JobDomainError) as exc:
        raise _http_error(exc) from exc


@router.put(
    "/{job_id}/driver",
    response_model=Job,
    summary="Assign, replace or remove the job's driver",
)
async def assign_driver_endpoint(
    job_id: str,
    payload: DriverAssign,
    admin: AdminUser,
    aggregate: Aggregate,
    db: AsyncSession = Depends(get_session),
) -> Job:
    try:
        return await db_manager.assign_driver(
            db,
            aggregate,
            job_id,
            payload.driver,
            expected_version=payload.expected_version,
        )
    except (db_manager.JobNotFoundError, JobDomainError) as exc:
        raise _http_error(exc) from exc


@router.post(
    "/{job_id}/evidence",
    response_model=Job,
    status_code=status.HTTP_201_CREATED,
    summary="Attach further collection evidence",
)
async def add_evidence_endpoint(
    job_id: str,
    payload: EvidenceAppend,
    user: CurrentUser,
    aggregate: Aggregate,
    db: AsyncSession = Depends(get_session),
) -> Job:
    job = await _visible_job(db, job_id, user)
    _require_operator(job, user)

    try:
        return await db_manager.add_evidence(
            db,
            aggregate,
            job_id,
            payload.to_domain(),
            expected_version=payload.expected_version,
        )
    except (db_manager.JobNotFoundError, JobDomainError) as exc:
        raise _http_error(exc) from exc


# ---------- Asset records ----------

@router.post(
    "/{job_id}/assets/{asset_id}/grading",
    response_model=GradingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Grade an asset",
)
async def grade_asset_endpoint(
    job_id: str,
    asset_id: str,
    payload: GradingCreate,
    admin: AdminUser,
    aggregate: Aggregate,
    db: AsyncSession = Depends(get_session),
) -> GradingResponse:
    """
    Record a grade for one asset. The asset's resale value is priced from
    the grade table and the job's buyback total is refreshed. Admin only.
    """
    try:
        job, record = await db_manager.grade_asset(
            db,
            aggregate,
            job_id,
            asset_id,
            payload.grade,
            graded_by=admin.email,
            condition=payload.condition,
            notes=payload.notes,
            expected_version=payload.expected_version,
        )
    except (db_manager.JobNotFoundError, JobDomainError) as exc:
        raise _http_error(exc) from exc

    return GradingResponse(job=job, record=record)


@router.post(
    "/{job_id}/assets/{asset_id}/sanitisation",
    response_model=SanitisationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record data sanitisation for an asset",
)
async def sanitise_asset_endpoint(
    job_id: str,
    asset_id: str,
    payload: SanitisationCreate,
    admin: AdminUser,
    aggregate: Aggregate,
    db: AsyncSession = Depends(get_session),
) -> SanitisationResponse:
    try:
        job, record = await db_manager.sanitise_asset(
            db,
            aggregate,
            job_id,
            asset_id,
            payload.method,
            performed_by=admin.email,
            method_details=payload.method_details,
            notes=payload.notes,
            expected_version=payload.expected_version,
        )
    except (db_manager.JobNotFoundError, JobDomainError) as exc:
        raise _http_error(exc) from exc

    return SanitisationResponse(job=job, record=record)


@router.get(
    "/{job_id}/grading",
    response_model=list[GradingRecord],
    summary="Grading history for a job",
)
async def list_grading_endpoint(
    job_id: str,
    user: CurrentUser,
    db: AsyncSession = Depends(get_session),
) -> list[GradingRecord]:
    await _visible_job(db, job_id, user)
    return await db_manager.list_grading_records(db, job_id)


@router.get(
    "/{job_id}/sanitisation",
    response_model=list[SanitisationRecord],
    summary="Sanitisation history for a job",
)
async def list_sanitisation_endpoint(
    job_id: str,
    user: CurrentUser,
    db: AsyncSession = Depends(get_session),
) -> list[SanitisationRecord]:
    await _visible_job(db, job_id, user)
    return await db_manager.list_sanitisation_records(db, job_id)
