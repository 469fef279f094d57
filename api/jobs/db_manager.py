# api/jobs/db_manager.py
"""
Persistence for collection jobs.

Loads job rows as domain records, runs the requested JobAggregate operation,
and writes the result back under an optimistic version check. No business
rule lives here; every decision is made by the domain core.
"""
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from db_models.job import JobRecord
from db_models.asset_record import GradingRecordRow, SanitisationRecordRow
from domain.dashboard import filter_jobs, scope_jobs
from domain.errors import ConcurrentModificationError
from domain.jobs import JobAggregate
from domain.models import (
    Driver,
    Evidence,
    Grade,
    GradingRecord,
    Job,
    JobsFilter,
    RequesterScope,
    SanitisationMethod,
    SanitisationRecord,
    WorkflowStatus,
)
from . import queries

log = structlog.get_logger(__name__)

# Owned sub-documents stored as JSON columns
_DOCUMENT_FIELDS = {"assets", "driver", "evidence", "certificates"}


class JobNotFoundError(Exception):
    """Raised when job doesn't exist."""
    pass


class DuplicateJobNumberError(Exception):
    """Raised when ERP job number already exists."""
    pass


# ---------- Row <-> domain mapping ----------

def to_domain(record: JobRecord) -> Job:
    return Job.model_validate({name: getattr(record, name) for name in Job.model_fields})


def _row_values(job: Job) -> dict:
    values = job.model_dump(exclude=_DOCUMENT_FIELDS)
    values["status"] = job.status.value
    values.update(job.model_dump(mode="json", include=_DOCUMENT_FIELDS))
    return values


# ---------- Reads ----------

async def get_job(db: AsyncSession, job_id: str) -> Job:
    """Get a job by ID. Raises JobNotFoundError if not found."""
    result = await db.execute(queries.select_job_by_id(job_id))
    record = result.scalar_one_or_none()
    if record is None:
        raise JobNotFoundError(f"Job {job_id} not found")
    return to_domain(record)


async def list_jobs(
    db: AsyncSession,
    scope: RequesterScope | None = None,
    jobs_filter: JobsFilter | None = None,
) -> list[Job]:
    """
    Jobs visible to `scope`, filtered and paginated.

    Pagination is applied after scoping so every page is full.
    """
    status = jobs_filter.status.value if jobs_filter and jobs_filter.status else None
    client_id = jobs_filter.client_id if jobs_filter else None
    result = await db.execute(queries.select_jobs(status=status, client_id=client_id))
    jobs = [to_domain(record) for record in result.scalars().all()]
    return filter_jobs(scope_jobs(jobs, scope), jobs_filter)


async def list_grading_records(db: AsyncSession, job_id: str) -> list[GradingRecord]:
    await get_job(db, job_id)
    result = await db.execute(queries.select_grading_records(job_id))
    return [GradingRecord.model_validate(row, from_attributes=True) for row in result.scalars().all()]


async def list_sanitisation_records(db: AsyncSession, job_id: str) -> list[SanitisationRecord]:
    await get_job(db, job_id)
    result = await db.execute(queries.select_sanitisation_records(job_id))
    return [SanitisationRecord.model_validate(row, from_attributes=True) for row in result.scalars().all()]


# ---------- Writes ----------

async def create_job(db: AsyncSession, job: Job) -> Job:
    """
    Persist a freshly booked job.

    Raises:
        DuplicateJobNumberError: If the ERP job number is taken
    """
    result = await db.execute(queries.select_job_by_erp_number(job.erp_job_number))
    if result.scalar_one_or_none() is not None:
        raise DuplicateJobNumberError(f"Job number '{job.erp_job_number}' already exists")

    db.add(JobRecord(**_row_values(job)))
    await db.commit()
    log.info("job.created", job_id=job.id, erp_job_number=job.erp_job_number)
    return job


async def save_job(
    db: AsyncSession,
    job: Job,
    read_version: int,
    *records: GradingRecordRow | SanitisationRecordRow,
) -> Job:
    """
    Write an updated job (and any new asset records) in one transaction.

    Raises:
        ConcurrentModificationError: If the stored version is no longer
            `read_version`; nothing is written in that case.
    """
    result = await db.execute(queries.update_job_if_version(job.id, read_version, _row_values(job)))
    if result.rowcount != 1:
        await db.rollback()
        current = await get_job(db, job.id)
        log.warning(
            "job.write_conflict",
            job_id=job.id,
            read_version=read_version,
            stored_version=current.version,
        )
        raise ConcurrentModificationError(job.id, read_version, current.version)

    for record in records:
        db.add(record)
    await db.commit()
    return job


# ---------- Domain operations ----------

async def transition_job(
    db: AsyncSession,
    aggregate: JobAggregate,
    job_id: str,
    target: WorkflowStatus,
    *,
    evidence: Evidence | None = None,
    expected_version: int | None = None,
    expected_status: WorkflowStatus | None = None,
) -> Job:
    job = await get_job(db, job_id)
    updated = aggregate.apply_status_transition(
        job,
        target,
        evidence=evidence,
        expected_version=expected_version,
        expected_status=expected_status,
    )
    return await save_job(db, updated, job.version)


async def assign_driver(
    db: AsyncSession,
    aggregate: JobAggregate,
    job_id: str,
    driver: Driver | None,
    *,
    expected_version: int | None = None,
) -> Job:
    job = await get_job(db, job_id)
    updated = aggregate.attach_driver(job, driver, expected_version=expected_version)
    return await save_job(db, updated, job.version)


async def add_evidence(
    db: AsyncSession,
    aggregate: JobAggregate,
    job_id: str,
    evidence: Evidence,
    *,
    expected_version: int | None = None,
) -> Job:
    job = await get_job(db, job_id)
    updated = aggregate.append_evidence(job, evidence, expected_version=expected_version)
    return await save_job(db, updated, job.version)


async def grade_asset(
    db: AsyncSession,
    aggregate: JobAggregate,
    job_id: str,
    asset_id: str,
    grade: Grade,
    *,
    graded_by: str,
    condition: str | None = None,
    notes: str | None = None,
    expected_version: int | None = None,
) -> tuple[Job, GradingRecord]:
    job = await get_job(db, job_id)
    updated, record = aggregate.record_grading(
        job,
        asset_id,
        grade,
        graded_by=graded_by,
        condition=condition,
        notes=notes,
        expected_version=expected_version,
    )
    row = GradingRecordRow(**record.model_dump(mode="python") | {"grade": record.grade.value})
    await save_job(db, updated, job.version, row)
    return updated, record


async def sanitise_asset(
    db: AsyncSession,
    aggregate: JobAggregate,
    job_id: str,
    asset_id: str,
    method: SanitisationMethod,
    *,
    performed_by: str,
    method_details: str | None = None,
    notes: str | None = None,
    expected_version: int | None = None,
) -> tuple[Job, SanitisationRecord]:
    job = await get_job(db, job_id)
    updated, record = aggregate.record_sanitisation(
        job,
        asset_id,
        method,
        performed_by=performed_by,
        method_details=method_details,
        notes=notes,
        expected_version=expected_version,
    )
    row = SanitisationRecordRow(**record.model_dump(mode="python") | {"method": record.method.value})
    await save_job(db, updated, job.version, row)
    return updated, record
