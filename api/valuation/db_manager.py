# api/valuation/db_manager.py
"""
Loading and maintaining the asset category reference set.
"""
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from db_models.asset_category import AssetCategoryRecord
from domain.models import AssetCategory
from domain.valuation import CategoryCatalog
from . import queries

log = structlog.get_logger(__name__)


class DuplicateCategoryError(Exception):
    """Raised when category id already exists."""
    pass


async def list_categories(db: AsyncSession) -> list[AssetCategory]:
    """Return all categories as domain reference data."""
    result = await db.execute(queries.select_all_categories())
    return [AssetCategory.model_validate(record) for record in result.scalars().all()]


async def load_catalog(db: AsyncSession) -> CategoryCatalog:
    return CategoryCatalog(await list_categories(db))


async def create_category(db: AsyncSession, category: AssetCategory) -> AssetCategory:
    """
    Add a category to the reference set. Existing categories are never edited.

    Raises:
        DuplicateCategoryError: If the id is taken
    """
    result = await db.execute(queries.select_category_by_id(category.id))
    if result.scalar_one_or_none() is not None:
        raise DuplicateCategoryError(f"Category '{category.id}' already exists")

    record = AssetCategoryRecord(**category.model_dump())
    db.add(record)
    await db.commit()
    await db.refresh(record)
    log.info("category.created", category_id=category.id)
    return AssetCategory.model_validate(record)
