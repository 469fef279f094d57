# api/jobs/queries.py
"""
SQLAlchemy query builders for collection jobs and their asset records.
"""
from sqlalchemy import select, update

from db_models.job import JobRecord
from db_models.asset_record import GradingRecordRow, SanitisationRecordRow


def select_job_by_id(job_id: str):
    """Select a job by its ID."""
    return select(JobRecord).where(JobRecord.id == job_id)


def select_job_by_erp_number(erp_job_number: str):
    """Select a job by its external ERP job number."""
    return select(JobRecord).where(JobRecord.erp_job_number == erp_job_number)


def select_jobs(status: str | None = None, client_id: str | None = None):
    """
    Select jobs newest-scheduled first, optionally narrowed by the indexed
    status and client columns. Remaining filters run in the domain layer.
    """
    stmt = select(JobRecord)
    if status is not None:
        stmt = stmt.where(JobRecord.status == status)
    if client_id is not None:
        stmt = stmt.where(JobRecord.client_id == client_id)
    return stmt.order_by(JobRecord.scheduled_date.desc(), JobRecord.id.asc())


def update_job_if_version(job_id: str, read_version: int, values: dict):
    """
    Conditional write: only matches while the row still has the version the
    caller read. Zero affected rows means someone else wrote first.
    """
    return (
        update(JobRecord)
        .where(JobRecord.id == job_id, JobRecord.version == read_version)
        .values(**values)
        .execution_options(synchronize_session=False)
    )


def select_grading_records(job_id: str):
    """Grading history for a job, newest first."""
    return (
        select(GradingRecordRow)
        .where(GradingRecordRow.job_id == job_id)
        .order_by(GradingRecordRow.graded_at.desc())
    )


def select_sanitisation_records(job_id: str):
    """Sanitisation history for a job, newest first."""
    return (
        select(SanitisationRecordRow)
        .where(SanitisationRecordRow.job_id == job_id)
        .order_by(SanitisationRecordRow.timestamp.desc())
    )
