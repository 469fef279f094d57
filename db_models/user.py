# db_models/user.py
"""
User model with role-based access control for collection jobs.

Roles:
- ADMIN: Operations staff, sees and manages every job
- CLIENT: Sees and books jobs for their own organisation (client_id)
- RESELLER: Sees jobs of the clients they manage (reseller_id)
- DRIVER: Sees jobs they are assigned to, records collection evidence
"""
from datetime import datetime
from enum import Enum

from sqlalchemy import String, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from db_base import Base


class UserRole(str, Enum):
    """User roles for authorization."""
    ADMIN = "ADMIN"
    CLIENT = "CLIENT"
    RESELLER = "RESELLER"
    DRIVER = "DRIVER"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    # Login credentials
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Profile
    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Role-based access control
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.CLIENT.value,
    )

    # Organisation links used for job scoping
    client_id: Mapped[str | None] = mapped_column(String(40), nullable=True, index=True)
    reseller_id: Mapped[str | None] = mapped_column(String(40), nullable=True, index=True)

    # Account status
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def is_driver(self) -> bool:
        return self.role == UserRole.DRIVER.value

    def can_book_jobs(self) -> bool:
        """ADMIN books for anyone, CLIENT for their own organisation."""
        return self.role in (UserRole.ADMIN.value, UserRole.CLIENT.value)

    def can_manage_jobs(self) -> bool:
        """Only ADMIN records grading, sanitisation and driver assignment."""
        return self.role == UserRole.ADMIN.value
