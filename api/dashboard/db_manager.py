# api/dashboard/db_manager.py
"""
Dashboard statistics over the stored jobs.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from api.jobs import db_manager as jobs_db
from domain.dashboard import aggregate
from domain.models import DashboardStats, RequesterScope


async def get_dashboard_stats(db: AsyncSession, scope: RequesterScope | None = None) -> DashboardStats:
    """
    Roll every job visible to `scope` into fleet-wide statistics.
    """
    jobs = await jobs_db.list_jobs(db)
    return aggregate(jobs, scope)
