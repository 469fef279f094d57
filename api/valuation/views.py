# api/valuation/views.py
"""
Asset category reference data and resale quotes.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from core.deps import AdminUser, CurrentUser, Valuation
from domain.errors import UnknownCategoryError
from domain.models import AssetCategory, Grade
from .models import CategoryCreate, ResaleQuote
from . import db_manager

# Reference data router
categories_router = APIRouter(prefix="/categories", tags=["categories"])

# Quote router
valuation_router = APIRouter(prefix="/valuation", tags=["valuation"])


@categories_router.get(
    "",
    response_model=list[AssetCategory],
    summary="List asset categories",
)
async def list_categories_endpoint(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_session),
) -> list[AssetCategory]:
    return await db_manager.list_categories(db)


@categories_router.post(
    "",
    response_model=AssetCategory,
    status_code=status.HTTP_201_CREATED,
    summary="Add an asset category",
)
async def create_category_endpoint(
    payload: CategoryCreate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_session),
) -> AssetCategory:
    """
    Add a category to the reference set. Admin only.
    """
    try:
        return await db_manager.create_category(db, AssetCategory(**payload.model_dump()))
    except db_manager.DuplicateCategoryError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc


@valuation_router.get(
    "/resale-value",
    response_model=ResaleQuote,
    summary="Quote resale value for a category, grade and quantity",
)
async def resale_value_endpoint(
    current_user: CurrentUser,
    valuation: Valuation,
    category_id: str = Query(..., min_length=1),
    grade: Grade = Query(...),
    quantity: int = Query(..., gt=0),
) -> ResaleQuote:
    try:
        total = valuation.calculate_resale_value(category_id, grade, quantity)
    except UnknownCategoryError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return ResaleQuote(
        category_id=category_id,
        grade=grade,
        quantity=quantity,
        unit_value=round(valuation.unit_resale_value(category_id, grade), 2),
        total_value=total,
    )
