# core/deps.py
"""
FastAPI dependencies for authentication, requester scoping and the
configured domain services.
"""
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from db import get_session
from db_models.user import User
from core.security import decode_token
from domain.jobs import JobAggregate
from domain.models import RequesterRole, RequesterScope
from domain.valuation import ValuationEngine
from api.valuation.db_manager import load_catalog

# OAuth2 scheme for token extraction from Authorization header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


class AuthenticationError(HTTPException):
    """Raised when authentication fails."""
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(HTTPException):
    """Raised when user lacks required permissions."""
    def __init__(self, detail: str = "Not enough permissions"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


async def get_current_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Dependency to get the current authenticated user from JWT token.

    Raises:
        AuthenticationError: If token is missing, invalid, or user not found
    """
    if token is None:
        raise AuthenticationError("Not authenticated")

    payload = decode_token(token)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type")

    try:
        user_id = int(payload.get("sub"))
    except (ValueError, TypeError):
        raise AuthenticationError("Invalid user ID in token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is disabled")

    return user


async def require_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency that requires ADMIN role."""
    if not current_user.can_manage_jobs():
        raise AuthorizationError("Admin access required")
    return current_user


async def require_booker(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency that requires ADMIN or CLIENT role."""
    if not current_user.can_book_jobs():
        raise AuthorizationError("Booking access required")
    return current_user


def scope_for(user: User) -> RequesterScope:
    """The job visibility scope of an authenticated user."""
    return RequesterScope(
        user_id=str(user.id),
        role=RequesterRole(user.role.lower()),
        client_id=user.client_id,
        reseller_id=user.reseller_id,
    )


async def get_requester_scope(
    current_user: Annotated[User, Depends(get_current_user)],
) -> RequesterScope:
    return scope_for(current_user)


async def get_valuation_engine(
    db: AsyncSession = Depends(get_session),
) -> ValuationEngine:
    """Valuation engine over the current category reference set."""
    catalog = await load_catalog(db)
    return ValuationEngine(catalog, settings.GRADE_MULTIPLIERS)


async def get_job_aggregate(
    valuation: Annotated[ValuationEngine, Depends(get_valuation_engine)],
) -> JobAggregate:
    return JobAggregate(
        valuation,
        default_charity_percent=settings.DEFAULT_CHARITY_PERCENT,
        certificate_base_url=settings.CERTIFICATE_BASE_URL,
    )


# Type aliases for cleaner endpoint signatures
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
BookingUser = Annotated[User, Depends(require_booker)]
Scope = Annotated[RequesterScope, Depends(get_requester_scope)]
Valuation = Annotated[ValuationEngine, Depends(get_valuation_engine)]
Aggregate = Annotated[JobAggregate, Depends(get_job_aggregate)]
