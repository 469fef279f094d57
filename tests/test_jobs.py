from datetime import date, datetime, timezone

import pytest

from domain.errors import (
    AssetNotFoundError,
    AssetRecordNotAllowedError,
    ConcurrentModificationError,
    DriverLockedError,
    EvidenceNotAllowedError,
    JobFinalisedError,
    MissingEvidenceError,
    UnknownCategoryError,
)
from domain.jobs import JobAggregate
from domain.models import Asset, Evidence, Grade, SanitisationMethod, WorkflowStatus
from domain.valuation import ValuationEngine

NOW = datetime(2024, 12, 2, 9, 0, tzinfo=timezone.utc)


def test_book_job_estimates_totals(booked_job):
    assert booked_job.status == WorkflowStatus.BOOKED
    assert booked_job.version == 0
    assert booked_job.completed_date is None
    assert booked_job.total_assets == 14
    assert booked_job.co2e_saved == 10 * 150 + 4 * 280
    assert booked_job.buyback_value == 10 * 80 + 4 * 25
    assert booked_job.charity_percent == 10.0
    assert booked_job.charity_value == 90.0


def test_book_job_strips_grading_and_sanitisation(job_aggregate):
    job = job_aggregate.book_job(
        erp_job_number="ERP-1",
        client_id="client-1",
        client_name="TechCorp",
        site_name="HQ",
        site_address="1 Road",
        scheduled_date=date(2025, 1, 6),
        assets=[
            Asset(
                id="a1", category_id="laptop", quantity=2, serial_numbers=["SN1", "SN2"],
                grade=Grade.A, grading_record_id="grd-old",
                sanitised=True, wipe_method="blancco", sanitisation_record_id="san-old",
            )
        ],
    )
    asset = job.assets[0]
    assert asset.grade is None
    assert asset.grading_record_id is None
    assert asset.sanitised is False
    assert asset.serial_numbers == ["SN1", "SN2"]
    assert job.id.startswith("job-")


def test_book_job_rejects_unknown_category(job_aggregate):
    with pytest.raises(UnknownCategoryError):
        job_aggregate.book_job(
            erp_job_number="ERP-2",
            client_id="client-1",
            client_name="TechCorp",
            site_name="HQ",
            site_address="1 Road",
            scheduled_date=date(2025, 1, 6),
            assets=[Asset(id="a1", category_id="typewriter", quantity=1)],
        )


def test_per_job_charity_rate_overrides_default(job_aggregate):
    job = job_aggregate.book_job(
        erp_job_number="ERP-3",
        client_id="client-1",
        client_name="TechCorp",
        site_name="HQ",
        site_address="1 Road",
        scheduled_date=date(2025, 1, 6),
        assets=[Asset(id="a1", category_id="laptop", quantity=5)],
        charity_rate=25.0,
    )
    assert job.charity_percent == 25.0
    assert job.charity_value == 100.0


def test_default_charity_percent_must_be_a_percentage(valuation):
    with pytest.raises(ValueError):
        JobAggregate(valuation, default_charity_percent=120)


def test_derive_totals_is_idempotent(job_aggregate, walk_to, booked_job):
    job = walk_to(booked_job, WorkflowStatus.GRADED, grade=Grade.C)
    once = job_aggregate.derive_totals(job)
    twice = job_aggregate.derive_totals(once)

    assert once.co2e_saved == twice.co2e_saved
    assert once.buyback_value == twice.buyback_value
    assert once.charity_value == twice.charity_value
    assert once.version == job.version


def test_grading_reprices_asset_and_refreshes_buyback(job_aggregate, walk_to, booked_job):
    sanitised = walk_to(booked_job, WorkflowStatus.SANITISED)
    graded, record = job_aggregate.record_grading(
        sanitised, "a1", Grade.B, graded_by="tech@test.com", condition="Scuffed lid", now=NOW
    )

    asset = graded.find_asset("a1")
    assert asset.grade == Grade.B
    assert asset.grading_record_id == record.id
    assert asset.resale_value == 56.0
    assert record.job_id == booked_job.id
    assert record.asset_category == "laptop"
    assert record.graded_at == NOW
    assert record.condition == "Scuffed lid"

    assert graded.buyback_value == 560 + 100
    assert graded.charity_value == 66.0
    assert graded.version == sanitised.version + 1
    assert sanitised.find_asset("a1").grade is None


def test_recycled_grading_switches_to_scrap_and_recycling_co2e(job_aggregate, walk_to, booked_job):
    sanitised = walk_to(booked_job, WorkflowStatus.SANITISED)
    graded, record = job_aggregate.record_grading(sanitised, "a1", Grade.RECYCLED, graded_by="tech@test.com")

    assert record.resale_value == 5.0
    assert graded.buyback_value == 10 * 5 + 4 * 25
    assert graded.co2e_saved == 10 * 20 + 4 * 280


def test_regrading_supersedes_previous_record(job_aggregate, walk_to, booked_job):
    sanitised = walk_to(booked_job, WorkflowStatus.SANITISED)
    first, first_record = job_aggregate.record_grading(sanitised, "a2", Grade.D, graded_by="tech@test.com")
    second, second_record = job_aggregate.record_grading(first, "a2", Grade.A, graded_by="tech@test.com")

    asset = second.find_asset("a2")
    assert asset.grade == Grade.A
    assert asset.grading_record_id == second_record.id != first_record.id


def test_sanitisation_marks_asset(job_aggregate, walk_to, booked_job):
    collected = walk_to(booked_job, WorkflowStatus.COLLECTED)
    updated, record = job_aggregate.record_sanitisation(
        collected, "a2", SanitisationMethod.DEGAUSSING,
        performed_by="tech@test.com", method_details="Pass 3/3", now=NOW,
    )
    asset = updated.find_asset("a2")
    assert asset.sanitised is True
    assert asset.wipe_method == "degaussing"
    assert asset.sanitisation_record_id == record.id
    assert record.timestamp == NOW
    assert record.verified is False
    assert record.method_details == "Pass 3/3"


def test_asset_must_belong_to_job(job_aggregate, walk_to, booked_job):
    sanitised = walk_to(booked_job, WorkflowStatus.SANITISED)
    with pytest.raises(AssetNotFoundError) as exc_info:
        job_aggregate.record_grading(sanitised, "nope", Grade.A, graded_by="tech@test.com")
    assert exc_info.value.asset_id == "nope"

    with pytest.raises(AssetNotFoundError):
        job_aggregate.record_sanitisation(sanitised, "nope", "blancco", performed_by="tech@test.com")


@pytest.mark.parametrize(
    "stage",
    [WorkflowStatus.BOOKED, WorkflowStatus.ROUTED, WorkflowStatus.EN_ROUTE],
)
def test_sanitisation_waits_for_collection(job_aggregate, walk_to, booked_job, stage):
    job = walk_to(booked_job, stage)
    snapshot = job.model_dump()

    with pytest.raises(AssetRecordNotAllowedError) as exc_info:
        job_aggregate.record_sanitisation(job, "a1", SanitisationMethod.BLANCCO, performed_by="tech@test.com")
    assert exc_info.value.required == "collected"
    assert exc_info.value.current == stage.value
    assert job.model_dump() == snapshot


@pytest.mark.parametrize(
    "stage",
    [
        WorkflowStatus.BOOKED,
        WorkflowStatus.ROUTED,
        WorkflowStatus.EN_ROUTE,
        WorkflowStatus.COLLECTED,
        WorkflowStatus.WAREHOUSE,
    ],
)
def test_grading_waits_for_sanitised(job_aggregate, walk_to, booked_job, stage):
    job = walk_to(booked_job, stage)

    with pytest.raises(AssetRecordNotAllowedError) as exc_info:
        job_aggregate.record_grading(job, "a1", Grade.A, graded_by="tech@test.com")
    assert exc_info.value.required == "sanitised"
    assert job.find_asset("a1").grade is None


def test_records_accepted_from_their_stage_onwards(job_aggregate, walk_to, booked_job):
    collected = walk_to(booked_job, WorkflowStatus.COLLECTED)
    wiped, _ = job_aggregate.record_sanitisation(
        collected, "a1", SanitisationMethod.SHREDDING, performed_by="tech@test.com"
    )
    assert wiped.find_asset("a1").sanitised is True

    graded = walk_to(booked_job, WorkflowStatus.GRADED)
    regraded, _ = job_aggregate.record_grading(graded, "a1", Grade.D, graded_by="tech@test.com")
    assert regraded.find_asset("a1").grade == Grade.D


def test_finalised_job_rejects_asset_records(job_aggregate, walk_to, booked_job):
    finalised = walk_to(booked_job, WorkflowStatus.FINALISED)

    with pytest.raises(JobFinalisedError):
        job_aggregate.record_grading(finalised, "a1", Grade.D, graded_by="tech@test.com")
    with pytest.raises(JobFinalisedError):
        job_aggregate.record_sanitisation(finalised, "a1", "blancco", performed_by="tech@test.com")


def test_driver_can_be_replaced_until_collected(job_aggregate, walk_to, booked_job, driver):
    routed = walk_to(booked_job, WorkflowStatus.ROUTED)
    with_driver = job_aggregate.attach_driver(routed, driver)
    replaced = job_aggregate.attach_driver(
        with_driver, driver.model_copy(update={"name": "Sarah Chen", "id": "9"})
    )
    detached = job_aggregate.attach_driver(replaced, None)

    assert with_driver.driver.name == "James Wilson"
    assert replaced.driver.name == "Sarah Chen"
    assert detached.driver is None
    assert detached.version == routed.version + 3

    collected = walk_to(booked_job, WorkflowStatus.COLLECTED)
    with pytest.raises(DriverLockedError):
        job_aggregate.attach_driver(collected, driver)


def test_travel_emissions_follow_the_driver(job_aggregate, driver):
    job = job_aggregate.book_job(
        erp_job_number="ERP-TRAVEL",
        client_id="client-1",
        client_name="TechCorp",
        site_name="HQ",
        site_address="1 Road",
        scheduled_date=date(2025, 1, 6),
        assets=[Asset(id="a1", category_id="laptop", quantity=1)],
        round_trip_distance_km=50.0,
    )
    assert job.travel_emissions == 0.0

    in_van = job_aggregate.attach_driver(job, driver)
    assert in_van.travel_emissions == 12.0

    in_truck = job_aggregate.attach_driver(in_van, driver.model_copy(update={"vehicle_type": "truck"}))
    assert in_truck.travel_emissions == 44.5

    detached = job_aggregate.attach_driver(in_truck, None)
    assert detached.travel_emissions == 0.0
    assert in_truck.travel_emissions == 44.5


def test_append_evidence_after_collection(job_aggregate, walk_to, booked_job):
    collected = walk_to(booked_job, WorkflowStatus.COLLECTED)
    warehouse = job_aggregate.apply_status_transition(collected, WorkflowStatus.WAREHOUSE)

    updated = job_aggregate.append_evidence(warehouse, Evidence(notes="Seal intact on arrival"), now=NOW)

    assert len(updated.evidence) == 2
    assert updated.evidence[-1].status == WorkflowStatus.WAREHOUSE
    assert updated.evidence[-1].created_at == NOW
    assert updated.evidence[0] == collected.evidence[0]


def test_append_evidence_rules(job_aggregate, walk_to, booked_job):
    with pytest.raises(EvidenceNotAllowedError):
        job_aggregate.append_evidence(booked_job, Evidence(notes="too early"))

    collected = walk_to(booked_job, WorkflowStatus.COLLECTED)
    with pytest.raises(MissingEvidenceError):
        job_aggregate.append_evidence(collected, Evidence())


def test_charity_percent_snapshot_on_finalise(catalog, walk_to, booked_job):
    finalised = walk_to(booked_job, WorkflowStatus.FINALISED)
    assert finalised.charity_percent == 10.0

    # The configured rate changes after the job closed
    later = JobAggregate(ValuationEngine(catalog), default_charity_percent=30.0)
    rederived = later.derive_totals(finalised)
    assert rederived.charity_percent == 10.0

    open_job = later.derive_totals(booked_job)
    assert open_job.charity_percent == 30.0


def test_stale_reader_loses(job_aggregate, walk_to, booked_job):
    collected = walk_to(booked_job, WorkflowStatus.COLLECTED)
    read_version = collected.version

    # Caller A commits first
    after_a = job_aggregate.apply_status_transition(
        collected, WorkflowStatus.WAREHOUSE, expected_version=read_version
    )
    assert after_a.status == WorkflowStatus.WAREHOUSE

    # Caller B retries from A's result with its stale version
    with pytest.raises(ConcurrentModificationError) as exc_info:
        job_aggregate.apply_status_transition(
            after_a, WorkflowStatus.WAREHOUSE, expected_version=read_version
        )
    assert exc_info.value.expected == read_version
    assert exc_info.value.actual == after_a.version
    assert len(after_a.certificates) == 1


def test_failed_operations_leave_job_untouched(job_aggregate, booked_job):
    snapshot = booked_job.model_dump()
    with pytest.raises(AssetRecordNotAllowedError):
        job_aggregate.record_grading(booked_job, "a1", Grade.A, graded_by="tech@test.com")
    with pytest.raises(ConcurrentModificationError):
        job_aggregate.attach_driver(booked_job, None, expected_version=7)
    assert booked_job.model_dump() == snapshot
