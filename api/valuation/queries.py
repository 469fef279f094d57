# api/valuation/queries.py
"""
SQLAlchemy query builders for asset category reference data.
"""
from sqlalchemy import select

from db_models.asset_category import AssetCategoryRecord


def select_all_categories():
    """Select all categories ordered by name."""
    return select(AssetCategoryRecord).order_by(AssetCategoryRecord.name.asc())


def select_category_by_id(category_id: str):
    """Select a category by its ID."""
    return select(AssetCategoryRecord).where(AssetCategoryRecord.id == category_id)
