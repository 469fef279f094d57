# api/dashboard/views.py
"""
Dashboard and aggregate statistics endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from core.deps import Scope
from domain.models import DashboardStats
from . import db_manager

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get(
    "/stats",
    response_model=DashboardStats,
    summary="Get job statistics for the caller's scope",
)
async def get_stats_endpoint(
    scope: Scope,
    db: AsyncSession = Depends(get_session),
) -> DashboardStats:
    """
    Totals across the caller's jobs: counts, CO2e saved, buyback, charity
    share and the travel emissions of their collections. Admins see the
    whole fleet.
    """
    return await db_manager.get_dashboard_stats(db, scope)
