# domain/errors.py
"""
Business-rule violations raised by the job/asset domain core.

Every error carries the offending entity ids and the job's current state so
the caller can decide how to present it. The core never retries or corrects
these itself.
"""


class JobDomainError(Exception):
    """Base class for all job domain errors."""

    def __init__(self, message: str, *, job_id: str | None = None):
        super().__init__(message)
        self.job_id = job_id


class InvalidTransitionError(JobDomainError):
    """Raised when the requested status is not the immediate successor."""

    def __init__(self, job_id: str, current: str, requested: str):
        super().__init__(
            f"Cannot move job {job_id} from '{current}' to '{requested}'",
            job_id=job_id,
        )
        self.current = current
        self.requested = requested


class MissingDriverError(JobDomainError):
    """Raised when a job leaves for collection with no driver attached."""

    def __init__(self, job_id: str, current: str):
        super().__init__(
            f"Job {job_id} has no driver attached (status '{current}')",
            job_id=job_id,
        )
        self.current = current


class MissingEvidenceError(JobDomainError):
    """Raised when collection is recorded without an evidence bundle."""

    def __init__(self, job_id: str, current: str):
        super().__init__(
            f"Job {job_id} cannot be marked collected without evidence (status '{current}')",
            job_id=job_id,
        )
        self.current = current


class IncompleteSanitisationError(JobDomainError):
    """Raised when some assets have not been wiped yet."""

    def __init__(self, job_id: str, asset_ids: list[str]):
        super().__init__(
            f"Job {job_id} has unsanitised assets: {', '.join(asset_ids)}",
            job_id=job_id,
        )
        self.asset_ids = asset_ids


class IncompleteGradingError(JobDomainError):
    """Raised when some assets have not been graded yet."""

    def __init__(self, job_id: str, asset_ids: list[str]):
        super().__init__(
            f"Job {job_id} has ungraded assets: {', '.join(asset_ids)}",
            job_id=job_id,
        )
        self.asset_ids = asset_ids


class UnknownCategoryError(JobDomainError):
    """Raised when a category id has no reference entry."""

    def __init__(self, category_id: str, job_id: str | None = None):
        super().__init__(f"Unknown asset category '{category_id}'", job_id=job_id)
        self.category_id = category_id


class AssetNotFoundError(JobDomainError):
    """Raised when an asset id does not belong to the job."""

    def __init__(self, job_id: str, asset_id: str):
        super().__init__(f"Asset {asset_id} not found in job {job_id}", job_id=job_id)
        self.asset_id = asset_id


class ConcurrentModificationError(JobDomainError):
    """Raised when the job moved on since the caller last read it."""

    def __init__(self, job_id: str, expected, actual):
        super().__init__(
            f"Job {job_id} was modified concurrently: expected {expected}, found {actual}",
            job_id=job_id,
        )
        self.expected = expected
        self.actual = actual


class DriverLockedError(JobDomainError):
    """Raised when reassigning a driver after the job was collected."""

    def __init__(self, job_id: str, current: str):
        super().__init__(
            f"Driver of job {job_id} can no longer be changed (status '{current}')",
            job_id=job_id,
        )
        self.current = current


class EvidenceNotAllowedError(JobDomainError):
    """Raised when evidence is appended before collection."""

    def __init__(self, job_id: str, current: str):
        super().__init__(
            f"Evidence for job {job_id} is only accepted once collected (status '{current}')",
            job_id=job_id,
        )
        self.current = current


class JobFinalisedError(JobDomainError):
    """Raised when asset records are changed on a finalised job."""

    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} is finalised. No further edits allowed.", job_id=job_id)


class AssetRecordNotAllowedError(JobDomainError):
    """Raised when grading or sanitisation is recorded too early in the workflow."""

    def __init__(self, job_id: str, record_type: str, current: str, required: str):
        super().__init__(
            f"Cannot record {record_type} on job {job_id} before '{required}' (status '{current}')",
            job_id=job_id,
        )
        self.record_type = record_type
        self.current = current
        self.required = required
