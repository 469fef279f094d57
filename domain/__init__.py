"""
Collection-job domain core.

- models: job, asset and reference-data records
- workflow: fixed stage order and stage entry rules
- valuation: resale, buyback, charity and CO2e arithmetic
- jobs: JobAggregate, the mutations a job goes through
- dashboard: fleet statistics over many jobs
"""
from .dashboard import aggregate, filter_jobs, scope_jobs
from .errors import (
    AssetNotFoundError,
    AssetRecordNotAllowedError,
    ConcurrentModificationError,
    DriverLockedError,
    EvidenceNotAllowedError,
    IncompleteGradingError,
    IncompleteSanitisationError,
    InvalidTransitionError,
    JobDomainError,
    JobFinalisedError,
    MissingDriverError,
    MissingEvidenceError,
    UnknownCategoryError,
)
from .jobs import JobAggregate
from .valuation import CategoryCatalog, ValuationEngine
from .workflow import WORKFLOW_ORDER, successor, transition

__all__ = [
    "aggregate",
    "filter_jobs",
    "scope_jobs",
    "JobAggregate",
    "CategoryCatalog",
    "ValuationEngine",
    "WORKFLOW_ORDER",
    "successor",
    "transition",
    "JobDomainError",
    "InvalidTransitionError",
    "MissingDriverError",
    "MissingEvidenceError",
    "IncompleteSanitisationError",
    "IncompleteGradingError",
    "UnknownCategoryError",
    "AssetNotFoundError",
    "AssetRecordNotAllowedError",
    "ConcurrentModificationError",
    "DriverLockedError",
    "EvidenceNotAllowedError",
    "JobFinalisedError",
]
