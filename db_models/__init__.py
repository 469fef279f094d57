# Import models so they are registered on Base.metadata
from db_models.asset_category import AssetCategoryRecord
from db_models.asset_record import GradingRecordRow, SanitisationRecordRow
from db_models.job import JobRecord
from db_models.user import User, UserRole

__all__ = [
    "AssetCategoryRecord",
    "GradingRecordRow",
    "SanitisationRecordRow",
    "JobRecord",
    "User",
    "UserRole",
]
