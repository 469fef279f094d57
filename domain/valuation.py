# domain/valuation.py
"""
Resale, buyback, charity and emissions arithmetic.

Grade multipliers and per-category factors are configuration, passed in by
the caller; nothing here reads settings directly.
"""
import math
from typing import Iterable, Iterator, Mapping

from .errors import UnknownCategoryError
from .models import Asset, AssetCategory, Driver, FuelType, Grade

DEFAULT_GRADE_MULTIPLIERS: dict[Grade, float] = {
    Grade.A: 1.0,
    Grade.B: 0.7,
    Grade.C: 0.4,
    Grade.D: 0.15,
    Grade.RECYCLED: 0.0,
}

# kg CO2e per km travelled
VEHICLE_EMISSION_FACTORS: dict[str, float] = {
    "petrol": 0.21,
    "diesel": 0.19,
    "electric": 0.0,
    "car": 0.17,
    "van": 0.24,
    "truck": 0.89,
}

KM_TO_MILES = 0.621371


class CategoryCatalog:
    """Read-only lookup over the asset category reference set."""

    def __init__(self, categories: Iterable[AssetCategory]):
        self._by_id: dict[str, AssetCategory] = {c.id: c for c in categories}

    def get(self, category_id: str) -> AssetCategory:
        """
        Raises:
            UnknownCategoryError: If the category has no reference entry.
        """
        try:
            return self._by_id[category_id]
        except KeyError:
            raise UnknownCategoryError(category_id) from None

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id

    def __iter__(self) -> Iterator[AssetCategory]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)


class ValuationEngine:
    """
    Prices assets and totals their CO2e against one category catalog.

    Reuse and recycling are valued differently: a Recycled asset earns its
    category's scrap credit instead of a graded resale value, and avoids only
    the recycling-specific CO2e rather than the embodied reuse saving.
    """

    def __init__(
        self,
        catalog: CategoryCatalog,
        grade_multipliers: Mapping[Grade | str, float] | None = None,
    ):
        self.catalog = catalog
        self.grade_multipliers = dict(DEFAULT_GRADE_MULTIPLIERS)
        for grade, multiplier in (grade_multipliers or {}).items():
            self.grade_multipliers[Grade(grade)] = float(multiplier)
        self._unit_values: dict[tuple[str, Grade], float] = {}

    def unit_resale_value(self, category_id: str, grade: Grade | str) -> float:
        """Per-unit value of one graded unit. Memoised per (category, grade)."""
        grade = Grade(grade)
        key = (category_id, grade)
        if key not in self._unit_values:
            category = self.catalog.get(category_id)
            if grade == Grade.RECYCLED:
                value = category.scrap_value_per_unit
            else:
                value = category.avg_buyback_value * self.grade_multipliers[grade]
            self._unit_values[key] = value
        return self._unit_values[key]

    def calculate_resale_value(self, category_id: str, grade: Grade | str, quantity: int) -> float:
        """
        Quote for `quantity` units of one category at one grade.

        Raises:
            UnknownCategoryError: If the category has no reference entry.
            ValueError: If quantity is not positive.
        """
        if quantity <= 0:
            raise ValueError(f"Quantity must be positive, got {quantity}")
        return round(self.unit_resale_value(category_id, grade) * quantity, 2)

    def asset_co2e(self, asset: Asset) -> float:
        category = self.catalog.get(asset.category_id)
        if asset.grade == Grade.RECYCLED:
            return asset.quantity * category.recycling_co2e_per_unit
        return asset.quantity * category.co2e_per_unit

    def calculate_co2e(self, assets: Iterable[Asset]) -> float:
        """Total kg CO2e saved across `assets`."""
        return math.fsum(self.asset_co2e(asset) for asset in assets)

    def asset_buyback(self, asset: Asset) -> float:
        # Recycled units are always worth scrap, whatever value they carry
        if asset.grade == Grade.RECYCLED:
            return self.calculate_resale_value(asset.category_id, asset.grade, asset.quantity)
        # Recorded grading value first, then grade table, then ungraded estimate
        if asset.resale_value is not None:
            return asset.resale_value * asset.quantity
        if asset.grade is not None:
            return self.calculate_resale_value(asset.category_id, asset.grade, asset.quantity)
        return self.catalog.get(asset.category_id).avg_buyback_value * asset.quantity

    def calculate_buyback(self, assets: Iterable[Asset]) -> float:
        return round(math.fsum(self.asset_buyback(asset) for asset in assets), 2)


def resolve_charity_percent(
    buyback_value: float,
    charity_rate: float | None,
    default_rate: float,
) -> float | None:
    """Charity share for a job; undefined when there is nothing to share."""
    if buyback_value <= 0:
        return None
    return float(default_rate if charity_rate is None else charity_rate)


def calculate_charity_value(buyback_value: float, charity_percent: float | None) -> float:
    if not charity_percent:
        return 0.0
    return round(buyback_value * charity_percent / 100, 2)


def calculate_travel_emissions(distance_km: float, vehicle_type: str) -> float:
    """kg CO2e for a trip, by fuel or vehicle type. Unknown types count as petrol."""
    vehicle_type = getattr(vehicle_type, "value", vehicle_type)
    if vehicle_type == FuelType.ELECTRIC.value:
        return 0.0
    factor = VEHICLE_EMISSION_FACTORS.get(vehicle_type, VEHICLE_EMISSION_FACTORS["petrol"])
    return round(distance_km * factor, 2)


def estimate_travel_emissions(distance_km: float | None, driver: Driver | None) -> float | None:
    """Emissions for a job's round trip with its assigned vehicle, if both are known."""
    if distance_km is None or driver is None:
        return None
    vehicle = driver.fuel_type or driver.vehicle_type
    return calculate_travel_emissions(distance_km, vehicle)


def km_to_miles(km: float) -> float:
    return km * KM_TO_MILES
