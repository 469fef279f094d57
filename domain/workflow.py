# domain/workflow.py
"""
Job workflow: the fixed stage order and what entering each stage requires.

Stages only ever move one step forward. Each entry hook below validates the
stage's precondition and appends its audit artifacts; the hooks run on a copy
of the job so a failed transition leaves the caller's record untouched.
"""
from datetime import datetime, timezone
from typing import Callable

from .errors import (
    ConcurrentModificationError,
    EvidenceNotAllowedError,
    IncompleteGradingError,
    IncompleteSanitisationError,
    InvalidTransitionError,
    MissingDriverError,
    MissingEvidenceError,
)
from .models import Certificate, CertificateType, Evidence, Grade, Job, WorkflowStatus

WORKFLOW_ORDER: tuple[WorkflowStatus, ...] = tuple(WorkflowStatus)
INITIAL_STATUS = WORKFLOW_ORDER[0]
TERMINAL_STATUS = WORKFLOW_ORDER[-1]

_SUCCESSORS = dict(zip(WORKFLOW_ORDER, WORKFLOW_ORDER[1:]))
_POSITION = {status: index for index, status in enumerate(WORKFLOW_ORDER)}


def successor(status: WorkflowStatus | str) -> WorkflowStatus | None:
    """Next stage after `status`, or None for the terminal stage."""
    return _SUCCESSORS.get(WorkflowStatus(status))


def is_terminal(status: WorkflowStatus | str) -> bool:
    return WorkflowStatus(status) == TERMINAL_STATUS


def has_reached(status: WorkflowStatus | str, stage: WorkflowStatus) -> bool:
    """True when `status` is `stage` or any later stage."""
    return _POSITION[WorkflowStatus(status)] >= _POSITION[stage]


def check_expected_state(
    job: Job,
    expected_version: int | None = None,
    expected_status: WorkflowStatus | str | None = None,
) -> None:
    """
    Optimistic concurrency guard.

    Raises:
        ConcurrentModificationError: If the job's version or status differs
            from what the caller last read.
    """
    if expected_version is not None and expected_version != job.version:
        raise ConcurrentModificationError(job.id, expected_version, job.version)
    if expected_status is not None and WorkflowStatus(expected_status) != job.status:
        raise ConcurrentModificationError(
            job.id, WorkflowStatus(expected_status).value, job.status.value
        )


def validate_transition(job: Job, target: WorkflowStatus | str) -> WorkflowStatus:
    """
    Check that `target` is the immediate successor of the job's status.

    Raises:
        InvalidTransitionError: For unknown, skipped, backward or self transitions.
    """
    try:
        target_status = WorkflowStatus(target)
    except ValueError as exc:
        raise InvalidTransitionError(job.id, job.status.value, str(target)) from exc

    if successor(job.status) != target_status:
        raise InvalidTransitionError(job.id, job.status.value, target_status.value)
    return target_status


def issue_certificate(
    job: Job,
    certificate_type: CertificateType,
    now: datetime,
    base_url: str = "",
) -> Certificate:
    return Certificate(
        type=certificate_type,
        generated_date=now,
        download_url=f"{base_url.rstrip('/')}/jobs/{job.id}/certificates/{certificate_type.value}",
    )


# ---------- Stage entry hooks ----------

def _enter_en_route(job: Job, evidence: Evidence | None, now: datetime, base_url: str) -> None:
    if job.driver is None:
        raise MissingDriverError(job.id, job.status.value)


def _enter_collected(job: Job, evidence: Evidence | None, now: datetime, base_url: str) -> None:
    if evidence is None or evidence.is_empty():
        raise MissingEvidenceError(job.id, job.status.value)
    job.certificates.append(issue_certificate(job, CertificateType.CHAIN_OF_CUSTODY, now, base_url))


def _enter_sanitised(job: Job, evidence: Evidence | None, now: datetime, base_url: str) -> None:
    pending = [asset.id for asset in job.assets if not asset.sanitised]
    if pending:
        raise IncompleteSanitisationError(job.id, pending)
    job.certificates.append(issue_certificate(job, CertificateType.DATA_WIPE, now, base_url))


def _enter_graded(job: Job, evidence: Evidence | None, now: datetime, base_url: str) -> None:
    ungraded = [asset.id for asset in job.assets if asset.grade is None]
    if ungraded:
        raise IncompleteGradingError(job.id, ungraded)


def _enter_finalised(job: Job, evidence: Evidence | None, now: datetime, base_url: str) -> None:
    job.completed_date = now
    if any(asset.grade == Grade.RECYCLED for asset in job.assets):
        certificate_type = CertificateType.RECYCLING
    else:
        certificate_type = CertificateType.DESTRUCTION
    job.certificates.append(issue_certificate(job, certificate_type, now, base_url))


EntryHook = Callable[[Job, Evidence | None, datetime, str], None]

STAGE_ENTRY_HOOKS: dict[WorkflowStatus, EntryHook] = {
    WorkflowStatus.EN_ROUTE: _enter_en_route,
    WorkflowStatus.COLLECTED: _enter_collected,
    WorkflowStatus.SANITISED: _enter_sanitised,
    WorkflowStatus.GRADED: _enter_graded,
    WorkflowStatus.FINALISED: _enter_finalised,
}


def transition(
    job: Job,
    target: WorkflowStatus | str,
    *,
    evidence: Evidence | None = None,
    expected_version: int | None = None,
    expected_status: WorkflowStatus | str | None = None,
    now: datetime | None = None,
    certificate_base_url: str = "",
) -> Job:
    """
    Move `job` one stage forward and return the updated copy.

    The status write, its certificates and any supplied evidence are applied
    together; on any error the original job is returned unchanged to the
    caller (nothing is mutated in place).

    Raises:
        ConcurrentModificationError, InvalidTransitionError, MissingDriverError,
        MissingEvidenceError, IncompleteSanitisationError, IncompleteGradingError,
        EvidenceNotAllowedError
    """
    check_expected_state(job, expected_version, expected_status)
    target_status = validate_transition(job, target)
    now = now or datetime.now(timezone.utc)

    if evidence is not None and not has_reached(target_status, WorkflowStatus.COLLECTED):
        raise EvidenceNotAllowedError(job.id, job.status.value)

    updated = job.model_copy(deep=True)
    hook = STAGE_ENTRY_HOOKS.get(target_status)
    if hook is not None:
        hook(updated, evidence, now, certificate_base_url)

    if evidence is not None and not evidence.is_empty():
        updated.evidence.append(
            evidence.model_copy(
                update={"status": target_status, "created_at": evidence.created_at or now}
            )
        )

    updated.status = target_status
    updated.version += 1
    return updated
