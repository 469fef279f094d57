# domain/models.py
"""
Plain data types for collection jobs and the assets they carry.

These are the records exchanged with the persistence and query collaborators.
They hold no behaviour beyond their own field invariants; the workflow,
valuation and aggregation rules live in their own modules.
"""
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class WorkflowStatus(str, Enum):
    """Job stages, declared in workflow order."""
    BOOKED = "booked"
    ROUTED = "routed"
    EN_ROUTE = "en-route"
    COLLECTED = "collected"
    WAREHOUSE = "warehouse"
    SANITISED = "sanitised"
    GRADED = "graded"
    FINALISED = "finalised"


class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    RECYCLED = "Recycled"


class VehicleType(str, Enum):
    VAN = "van"
    TRUCK = "truck"
    CAR = "car"


class FuelType(str, Enum):
    PETROL = "petrol"
    DIESEL = "diesel"
    ELECTRIC = "electric"


class CertificateType(str, Enum):
    CHAIN_OF_CUSTODY = "chain-of-custody"
    DATA_WIPE = "data-wipe"
    DESTRUCTION = "destruction"
    RECYCLING = "recycling"


class SanitisationMethod(str, Enum):
    BLANCCO = "blancco"
    PHYSICAL_DESTRUCTION = "physical-destruction"
    DEGAUSSING = "degaussing"
    SHREDDING = "shredding"
    OTHER = "other"


class RequesterRole(str, Enum):
    """Who is asking; drives which jobs are visible."""
    ADMIN = "admin"
    CLIENT = "client"
    RESELLER = "reseller"
    DRIVER = "driver"


class AssetCategory(BaseModel):
    """Reference data for one kind of equipment. Never mutated by job processing."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    name: str
    icon: str = ""
    co2e_per_unit: float = Field(..., ge=0, description="kg CO2e saved per reused unit")
    avg_weight: float = Field(0.0, ge=0, description="kg")
    avg_buyback_value: float = Field(..., ge=0, description="Currency per unit")
    recycling_co2e_per_unit: float = Field(0.0, ge=0, description="kg CO2e avoided per recycled unit")
    scrap_value_per_unit: float = Field(0.0, ge=0, description="Scrap credit per recycled unit")


class Asset(BaseModel):
    id: str
    category_id: str
    quantity: int = Field(..., gt=0)
    serial_numbers: list[str] | None = None
    grade: Grade | None = None
    weight: float | None = Field(None, ge=0)

    sanitised: bool = False
    wipe_method: str | None = None
    sanitisation_record_id: str | None = None

    grading_record_id: str | None = None
    resale_value: float | None = Field(None, ge=0, description="Per-unit value")

    @model_validator(mode="after")
    def _check_records(self) -> "Asset":
        if self.sanitised and not (self.wipe_method and self.sanitisation_record_id):
            raise ValueError(
                f"Asset {self.id}: sanitised assets need a wipe method and a sanitisation record"
            )
        if self.grade is not None and not self.grading_record_id:
            raise ValueError(f"Asset {self.id}: graded assets need a grading record")
        if self.serial_numbers is not None and len(self.serial_numbers) != self.quantity:
            raise ValueError(
                f"Asset {self.id}: {len(self.serial_numbers)} serial numbers for quantity {self.quantity}"
            )
        return self


class Driver(BaseModel):
    id: str | None = None  # user id when the driver has an account
    name: str = Field(..., min_length=1)
    vehicle_reg: str = Field(..., min_length=1)
    vehicle_type: VehicleType
    fuel_type: FuelType | None = None
    eta: datetime | None = None
    phone: str


class Evidence(BaseModel):
    status: WorkflowStatus | None = None
    photos: list[str] = Field(default_factory=list)
    signature: str | None = None
    seal_numbers: list[str] = Field(default_factory=list)
    notes: str | None = None
    created_at: datetime | None = None

    def is_empty(self) -> bool:
        return not (self.photos or self.signature or self.seal_numbers or self.notes)


class Certificate(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: CertificateType
    generated_date: datetime
    download_url: str


class Job(BaseModel):
    id: str
    erp_job_number: str
    client_id: str
    client_name: str
    reseller_id: str | None = None
    site_name: str
    site_address: str

    status: WorkflowStatus = WorkflowStatus.BOOKED
    scheduled_date: date
    completed_date: datetime | None = None

    assets: list[Asset] = Field(default_factory=list)
    driver: Driver | None = None
    evidence: list[Evidence] = Field(default_factory=list)
    certificates: list[Certificate] = Field(default_factory=list)

    # Denormalised caches, recomputed on every asset mutation
    co2e_saved: float = 0.0
    buyback_value: float = 0.0
    charity_percent: float | None = Field(None, ge=0, le=100)
    charity_value: float = 0.0

    # Routing inputs
    travel_emissions: float = 0.0
    round_trip_distance_km: float | None = Field(None, ge=0)

    charity_rate: float | None = Field(None, ge=0, le=100)
    version: int = 0

    @model_validator(mode="after")
    def _check_completion(self) -> "Job":
        finalised = self.status == WorkflowStatus.FINALISED
        if finalised != (self.completed_date is not None):
            raise ValueError(
                f"Job {self.id}: completed_date must be set exactly when the job is finalised"
            )
        return self

    def find_asset(self, asset_id: str) -> Asset | None:
        for asset in self.assets:
            if asset.id == asset_id:
                return asset
        return None

    @property
    def total_assets(self) -> int:
        return sum(asset.quantity for asset in self.assets)


class GradingRecord(BaseModel):
    id: str
    job_id: str
    asset_id: str
    asset_category: str
    grade: Grade
    resale_value: float
    graded_at: datetime
    graded_by: str
    condition: str | None = None
    notes: str | None = None


class SanitisationRecord(BaseModel):
    id: str
    job_id: str
    asset_id: str
    method: SanitisationMethod
    method_details: str | None = None
    timestamp: datetime
    performed_by: str
    verified: bool = False
    notes: str | None = None


class TravelEmissionsBreakdown(BaseModel):
    """kg CO2e the fleet's round trips would emit per fuel type."""
    petrol: float = 0.0
    diesel: float = 0.0
    electric: float = 0.0
    total_distance_km: float = 0.0
    total_distance_miles: float = 0.0


class DashboardStats(BaseModel):
    total_jobs: int = 0
    active_jobs: int = 0
    total_co2e_saved: float = 0.0
    total_buyback: float = 0.0
    total_assets: int = 0
    avg_charity_percent: float = 0.0

    travel_emissions: TravelEmissionsBreakdown = Field(default_factory=TravelEmissionsBreakdown)
    completed_jobs_count: int = 0
    booked_jobs_count: int = 0
    completed_co2e_saved: float = 0.0
    estimated_co2e_saved: float = 0.0


class RequesterScope(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    role: RequesterRole
    client_id: str | None = None
    reseller_id: str | None = None


class JobsFilter(BaseModel):
    status: WorkflowStatus | None = None
    client_name: str | None = None
    client_id: str | None = None
    search_query: str | None = None
    limit: int | None = Field(None, gt=0)
    offset: int = Field(0, ge=0)
