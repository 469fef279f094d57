# domain/jobs.py
"""
Job aggregate: every mutation a collection job goes through after booking.

Each operation takes the job as last read by the caller, validates it, and
returns a new job with its derived totals recomputed and its version bumped.
The caller's object is never modified, so a failed call has no side effects.
"""
import uuid
from datetime import date, datetime, timezone
from typing import Iterable

import structlog

from .errors import (
    AssetNotFoundError,
    AssetRecordNotAllowedError,
    DriverLockedError,
    EvidenceNotAllowedError,
    JobFinalisedError,
    MissingEvidenceError,
)
from .models import (
    Asset,
    Driver,
    Evidence,
    Grade,
    GradingRecord,
    Job,
    SanitisationMethod,
    SanitisationRecord,
    WorkflowStatus,
)
from .valuation import (
    ValuationEngine,
    calculate_charity_value,
    estimate_travel_emissions,
    resolve_charity_percent,
)
from .workflow import check_expected_state, has_reached, is_terminal, transition

log = structlog.get_logger(__name__)


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class JobAggregate:
    """Applies workflow, grading and sanitisation changes to jobs."""

    def __init__(
        self,
        valuation: ValuationEngine,
        default_charity_percent: float = 0.0,
        certificate_base_url: str = "",
    ):
        if not 0 <= default_charity_percent <= 100:
            raise ValueError(f"Charity percent must be within 0-100, got {default_charity_percent}")
        self.valuation = valuation
        self.default_charity_percent = default_charity_percent
        self.certificate_base_url = certificate_base_url

    # ---------- Derived totals ----------

    def derive_totals(self, job: Job) -> Job:
        """
        Recompute co2e, buyback and charity figures from the asset list.

        Travel emissions are an external input and are left alone. The charity
        percent of a finalised job is a snapshot and is never recomputed.
        """
        updated = job.model_copy(deep=True)
        updated.co2e_saved = self.valuation.calculate_co2e(job.assets)
        updated.buyback_value = self.valuation.calculate_buyback(job.assets)
        if not is_terminal(job.status):
            updated.charity_percent = resolve_charity_percent(
                updated.buyback_value, job.charity_rate, self.default_charity_percent
            )
        updated.charity_value = calculate_charity_value(updated.buyback_value, updated.charity_percent)
        return updated

    def _commit(self, job: Job) -> Job:
        updated = self.derive_totals(job)
        updated.version += 1
        return updated

    # ---------- Booking ----------

    def book_job(
        self,
        *,
        erp_job_number: str,
        client_id: str,
        client_name: str,
        site_name: str,
        site_address: str,
        scheduled_date: date,
        assets: Iterable[Asset],
        reseller_id: str | None = None,
        charity_rate: float | None = None,
        round_trip_distance_km: float | None = None,
        travel_emissions: float = 0.0,
        job_id: str | None = None,
    ) -> Job:
        """
        Create a booked job with estimated totals.

        Assets enter ungraded and unsanitised whatever the input carries.

        Raises:
            UnknownCategoryError: If any asset names an unknown category.
        """
        booked_assets = []
        for asset in assets:
            self.valuation.catalog.get(asset.category_id)
            booked_assets.append(
                Asset(
                    id=asset.id,
                    category_id=asset.category_id,
                    quantity=asset.quantity,
                    serial_numbers=asset.serial_numbers,
                    weight=asset.weight,
                )
            )

        job = Job(
            id=job_id or new_id("job"),
            erp_job_number=erp_job_number,
            client_id=client_id,
            client_name=client_name,
            reseller_id=reseller_id,
            site_name=site_name,
            site_address=site_address,
            scheduled_date=scheduled_date,
            assets=booked_assets,
            charity_rate=charity_rate,
            round_trip_distance_km=round_trip_distance_km,
            travel_emissions=travel_emissions,
        )
        job = self.derive_totals(job)
        log.info("job.booked", job_id=job.id, erp_job_number=erp_job_number, assets=job.total_assets)
        return job

    # ---------- Workflow ----------

    def apply_status_transition(
        self,
        job: Job,
        target: WorkflowStatus | str,
        *,
        evidence: Evidence | None = None,
        expected_version: int | None = None,
        expected_status: WorkflowStatus | str | None = None,
        now: datetime | None = None,
    ) -> Job:
        """
        Advance the job one stage. Totals are refreshed first, so finalising
        snapshots the charity rate configured at that moment.
        """
        check_expected_state(job, expected_version, expected_status)
        refreshed = self.derive_totals(job)
        updated = transition(
            refreshed,
            target,
            evidence=evidence,
            now=now,
            certificate_base_url=self.certificate_base_url,
        )
        log.info(
            "job.transition",
            job_id=job.id,
            from_status=job.status.value,
            to_status=updated.status.value,
            version=updated.version,
        )
        return updated

    def attach_driver(
        self,
        job: Job,
        driver: Driver | None,
        *,
        expected_version: int | None = None,
    ) -> Job:
        """
        Assign, replace or (with None) detach the job's driver.

        Travel emissions follow the vehicle: they are re-estimated when the
        round trip is known and cleared when the driver is detached.

        Raises:
            ConcurrentModificationError: If the job moved on.
            DriverLockedError: Once the job has been collected.
        """
        check_expected_state(job, expected_version)
        if has_reached(job.status, WorkflowStatus.COLLECTED):
            raise DriverLockedError(job.id, job.status.value)

        updated = job.model_copy(deep=True)
        updated.driver = driver.model_copy() if driver is not None else None
        if driver is None:
            updated.travel_emissions = 0.0
        else:
            travel = estimate_travel_emissions(updated.round_trip_distance_km, driver)
            if travel is not None:
                updated.travel_emissions = travel
        updated = self._commit(updated)
        log.info("job.driver_attached", job_id=job.id, driver=driver.name if driver else None)
        return updated

    def append_evidence(
        self,
        job: Job,
        evidence: Evidence,
        *,
        expected_version: int | None = None,
        now: datetime | None = None,
    ) -> Job:
        """
        Add a further evidence bundle to a collected job.

        Raises:
            EvidenceNotAllowedError: Before the job reaches collected.
            MissingEvidenceError: If the bundle is empty.
        """
        check_expected_state(job, expected_version)
        if not has_reached(job.status, WorkflowStatus.COLLECTED):
            raise EvidenceNotAllowedError(job.id, job.status.value)
        if evidence.is_empty():
            raise MissingEvidenceError(job.id, job.status.value)

        now = now or datetime.now(timezone.utc)
        updated = job.model_copy(deep=True)
        updated.evidence.append(
            evidence.model_copy(
                update={
                    "status": evidence.status or job.status,
                    "created_at": evidence.created_at or now,
                }
            )
        )
        updated.version += 1
        return updated

    # ---------- Asset records ----------

    def _ensure_open(self, job: Job, record_type: str, required: WorkflowStatus) -> None:
        if is_terminal(job.status):
            raise JobFinalisedError(job.id)
        if not has_reached(job.status, required):
            raise AssetRecordNotAllowedError(job.id, record_type, job.status.value, required.value)

    def _get_asset(self, job: Job, asset_id: str) -> Asset:
        asset = job.find_asset(asset_id)
        if asset is None:
            raise AssetNotFoundError(job.id, asset_id)
        return asset

    def _replace_asset(self, job: Job, asset: Asset) -> Job:
        updated = job.model_copy(deep=True)
        updated.assets = [asset if a.id == asset.id else a for a in updated.assets]
        return updated

    def record_grading(
        self,
        job: Job,
        asset_id: str,
        grade: Grade | str,
        *,
        graded_by: str,
        condition: str | None = None,
        notes: str | None = None,
        expected_version: int | None = None,
        now: datetime | None = None,
    ) -> tuple[Job, GradingRecord]:
        """
        Grade one asset and price it from the grade table.

        A newer grading record supersedes the asset's previous one.

        Raises:
            ConcurrentModificationError, JobFinalisedError,
            AssetRecordNotAllowedError (before sanitised), AssetNotFoundError,
            UnknownCategoryError
        """
        check_expected_state(job, expected_version)
        self._ensure_open(job, "grading", WorkflowStatus.SANITISED)
        asset = self._get_asset(job, asset_id)
        grade = Grade(grade)
        unit_value = round(self.valuation.unit_resale_value(asset.category_id, grade), 2)

        record = GradingRecord(
            id=new_id("grd"),
            job_id=job.id,
            asset_id=asset.id,
            asset_category=asset.category_id,
            grade=grade,
            resale_value=unit_value,
            graded_at=now or datetime.now(timezone.utc),
            graded_by=graded_by,
            condition=condition,
            notes=notes,
        )
        graded = Asset.model_validate(
            {
                **asset.model_dump(),
                "grade": grade,
                "grading_record_id": record.id,
                "resale_value": unit_value,
            }
        )
        updated = self._commit(self._replace_asset(job, graded))
        log.info("job.asset_graded", job_id=job.id, asset_id=asset.id, grade=grade.value)
        return updated, record

    def record_sanitisation(
        self,
        job: Job,
        asset_id: str,
        method: SanitisationMethod | str,
        *,
        performed_by: str,
        method_details: str | None = None,
        notes: str | None = None,
        expected_version: int | None = None,
        now: datetime | None = None,
    ) -> tuple[Job, SanitisationRecord]:
        """
        Mark one asset as wiped.

        Raises:
            ConcurrentModificationError, JobFinalisedError,
            AssetRecordNotAllowedError (before collected), AssetNotFoundError
        """
        check_expected_state(job, expected_version)
        self._ensure_open(job, "sanitisation", WorkflowStatus.COLLECTED)
        asset = self._get_asset(job, asset_id)
        method = SanitisationMethod(method)

        record = SanitisationRecord(
            id=new_id("san"),
            job_id=job.id,
            asset_id=asset.id,
            method=method,
            method_details=method_details,
            timestamp=now or datetime.now(timezone.utc),
            performed_by=performed_by,
            notes=notes,
        )
        sanitised = Asset.model_validate(
            {
                **asset.model_dump(),
                "sanitised": True,
                "wipe_method": method.value,
                "sanitisation_record_id": record.id,
            }
        )
        updated = self._commit(self._replace_asset(job, sanitised))
        log.info("job.asset_sanitised", job_id=job.id, asset_id=asset.id, method=method.value)
        return updated, record
