# api/valuation/models.py
"""
Pydantic models for category and valuation endpoints.
"""
from pydantic import BaseModel, Field

from domain.models import Grade


class CategoryCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=40, pattern=r"^[a-z0-9-]+$")
    name: str = Field(..., min_length=1, max_length=255)
    icon: str = Field("", max_length=16)
    co2e_per_unit: float = Field(..., ge=0)
    avg_weight: float = Field(0.0, ge=0)
    avg_buyback_value: float = Field(..., ge=0)
    recycling_co2e_per_unit: float = Field(0.0, ge=0)
    scrap_value_per_unit: float = Field(0.0, ge=0)


class ResaleQuote(BaseModel):
    """A single resale-value quote."""
    category_id: str
    grade: Grade
    quantity: int
    unit_value: float
    total_value: float
