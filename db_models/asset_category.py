# db_models/asset_category.py
from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column

from db_base import Base


class AssetCategoryRecord(Base):
    """Reference data, seeded at bootstrap and read by the valuation engine."""
    __tablename__ = "asset_categories"

    id: Mapped[str] = mapped_column(String(40), primary_key=True)

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    icon: Mapped[str] = mapped_column(String(16), nullable=False, default="")

    # kg CO2e saved per reused unit
    co2e_per_unit: Mapped[float] = mapped_column(Float, nullable=False)
    avg_weight: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    avg_buyback_value: Mapped[float] = mapped_column(Float, nullable=False)

    # Recycled units: lower CO2e factor and scrap credit instead of resale
    recycling_co2e_per_unit: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    scrap_value_per_unit: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
