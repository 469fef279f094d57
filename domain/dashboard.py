# domain/dashboard.py
"""
Fleet-wide statistics over a collection of jobs.

Everything here is a read-only fold: no job is modified, and the result does
not depend on the order the jobs arrive in.
"""
import math
from typing import Iterable

from .models import (
    DashboardStats,
    FuelType,
    Job,
    JobsFilter,
    RequesterRole,
    RequesterScope,
    TravelEmissionsBreakdown,
    WorkflowStatus,
)
from .valuation import calculate_travel_emissions, km_to_miles
from .workflow import is_terminal


def is_visible_to(job: Job, scope: RequesterScope) -> bool:
    if scope.role == RequesterRole.ADMIN:
        return True
    if scope.role == RequesterRole.CLIENT:
        return scope.client_id is not None and job.client_id == scope.client_id
    if scope.role == RequesterRole.RESELLER:
        return scope.reseller_id is not None and job.reseller_id == scope.reseller_id
    if scope.role == RequesterRole.DRIVER:
        return job.driver is not None and job.driver.id == scope.user_id
    return False


def scope_jobs(jobs: Iterable[Job], scope: RequesterScope | None) -> list[Job]:
    """Jobs the requester may see. No scope means an unrestricted view."""
    if scope is None:
        return list(jobs)
    return [job for job in jobs if is_visible_to(job, scope)]


def filter_jobs(jobs: Iterable[Job], jobs_filter: JobsFilter | None) -> list[Job]:
    """Apply status/client/search filters, then offset and limit."""
    selected = list(jobs)
    if jobs_filter is None:
        return selected

    if jobs_filter.status is not None:
        selected = [j for j in selected if j.status == jobs_filter.status]
    if jobs_filter.client_id:
        selected = [j for j in selected if j.client_id == jobs_filter.client_id]
    if jobs_filter.client_name:
        name = jobs_filter.client_name.lower()
        selected = [j for j in selected if j.client_name.lower() == name]
    if jobs_filter.search_query:
        text = jobs_filter.search_query.lower()
        selected = [
            j for j in selected
            if text in j.erp_job_number.lower()
            or text in j.client_name.lower()
            or text in j.site_name.lower()
        ]

    end = jobs_filter.offset + jobs_filter.limit if jobs_filter.limit else None
    return selected[jobs_filter.offset:end]


def _travel_breakdown(jobs: list[Job]) -> TravelEmissionsBreakdown:
    distances = [j.round_trip_distance_km for j in jobs if j.round_trip_distance_km is not None]
    total_km = math.fsum(distances)
    return TravelEmissionsBreakdown(
        petrol=round(math.fsum(calculate_travel_emissions(d, FuelType.PETROL) for d in distances), 2),
        diesel=round(math.fsum(calculate_travel_emissions(d, FuelType.DIESEL) for d in distances), 2),
        electric=0.0,
        total_distance_km=round(total_km, 2),
        total_distance_miles=round(km_to_miles(total_km), 2),
    )


def aggregate(jobs: Iterable[Job], scope: RequesterScope | None = None) -> DashboardStats:
    """
    Summarise the jobs visible to `scope`.

    The charity average only counts jobs with a defined charity percent;
    jobs with no buyback are left out rather than counted as zero.
    """
    visible = scope_jobs(jobs, scope)
    if not visible:
        return DashboardStats()

    finalised = [j for j in visible if is_terminal(j.status)]
    open_jobs = [j for j in visible if not is_terminal(j.status)]
    charity = [j.charity_percent for j in visible if j.charity_percent is not None]

    return DashboardStats(
        total_jobs=len(visible),
        active_jobs=len(open_jobs),
        total_co2e_saved=math.fsum(j.co2e_saved for j in visible),
        total_buyback=round(math.fsum(j.buyback_value for j in visible), 2),
        total_assets=sum(j.total_assets for j in visible),
        avg_charity_percent=round(math.fsum(charity) / len(charity), 2) if charity else 0.0,
        travel_emissions=_travel_breakdown(visible),
        completed_jobs_count=len(finalised),
        booked_jobs_count=sum(1 for j in visible if j.status == WorkflowStatus.BOOKED),
        completed_co2e_saved=math.fsum(j.co2e_saved for j in finalised),
        estimated_co2e_saved=math.fsum(j.co2e_saved for j in open_jobs),
    )
