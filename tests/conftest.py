import os
import uuid
from datetime import date

os.environ.setdefault("MODE", "test")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from httpx import AsyncClient, ASGITransport

from config import settings
from main import app as fastapi_app
import db as project_db
import db_models  # noqa: F401  ensure models are registered
from db_base import Base
from db_models.asset_category import AssetCategoryRecord
from db_models.user import User
from core.security import get_password_hash, create_access_token
from seed_database import DEFAULT_CATEGORIES
from domain.jobs import JobAggregate
from domain.models import (
    Asset,
    AssetCategory,
    Driver,
    Evidence,
    Grade,
    SanitisationMethod,
    VehicleType,
    WorkflowStatus,
)
from domain.valuation import CategoryCatalog, ValuationEngine
from domain.workflow import successor

TEST_DATABASE_URL = settings.DATABASE_URL


def get_sync_url(url: str) -> str:
    return url.replace("sqlite+aiosqlite", "sqlite")


sync_url = get_sync_url(TEST_DATABASE_URL)

# Use an async engine for app interactions
engine = create_async_engine(
    TEST_DATABASE_URL,
    future=True,
    echo=False,
    poolclass=NullPool,  # Disable connection pooling for tests
)
AsyncSessionTest = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)

TEST_USERS = [
    # (id, email, password, role, client_id, reseller_id)
    (1, "admin@test.com", "adminpass", "ADMIN", None, None),
    (2, "client@test.com", "clientpass", "CLIENT", "client-1", None),
    (3, "reseller@test.com", "resellerpass", "RESELLER", None, "reseller-1"),
    (4, "driver@test.com", "driverpass", "DRIVER", None, None),
    (5, "other-client@test.com", "otherpass", "CLIENT", "client-2", None),
]


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session", autouse=True)
def prepare_db():
    # Create/drop tables for tests (Destructive - use a dedicated test DB)
    sync_engine = create_engine(sync_url)
    Base.metadata.drop_all(bind=sync_engine)
    Base.metadata.create_all(bind=sync_engine)
    yield
    Base.metadata.drop_all(bind=sync_engine)
    sync_engine.dispose()


@pytest.fixture(scope="session", autouse=True)
def seed_reference_data(prepare_db):
    """Seed the category reference set and one user per role."""
    sync_engine = create_engine(sync_url)
    Session = sessionmaker(bind=sync_engine)

    with Session() as session:
        session.add_all(
            User(
                id=user_id,
                email=email,
                hashed_password=get_password_hash(password),
                full_name=f"Test {role.title()}",
                role=role,
                client_id=client_id,
                reseller_id=reseller_id,
                is_active=True,
            )
            for user_id, email, password, role, client_id, reseller_id in TEST_USERS
        )
        session.add_all(AssetCategoryRecord(**data) for data in DEFAULT_CATEGORIES)
        session.commit()
    sync_engine.dispose()


@pytest.fixture
async def db_session():
    async with AsyncSessionTest() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def async_client():
    # Override the get_session dependency to create a fresh session for each request
    async def override_get_session():
        async with AsyncSessionTest() as session:
            yield session

    fastapi_app.dependency_overrides[project_db.get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://testserver") as ac:
        yield ac

    # Clean up
    fastapi_app.dependency_overrides.clear()


def _headers(user_id: int) -> dict:
    token = create_access_token(data={"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="session")
def admin_headers():
    return _headers(1)


@pytest.fixture(scope="session")
def client_headers():
    return _headers(2)


@pytest.fixture(scope="session")
def reseller_headers():
    return _headers(3)


@pytest.fixture(scope="session")
def driver_headers():
    return _headers(4)


@pytest.fixture(scope="session")
def other_client_headers():
    return _headers(5)


@pytest.fixture
def erp_number():
    """A fresh ERP job number; the test database is shared across tests."""
    return f"ERP-{uuid.uuid4().hex[:10].upper()}"


# ---------- Domain builders ----------

@pytest.fixture
def catalog():
    return CategoryCatalog([
        AssetCategory(
            id="laptop", name="Laptops", co2e_per_unit=150, avg_weight=2.5,
            avg_buyback_value=80, recycling_co2e_per_unit=20, scrap_value_per_unit=5,
        ),
        AssetCategory(
            id="monitor", name="Monitors", co2e_per_unit=280, avg_weight=5,
            avg_buyback_value=25, recycling_co2e_per_unit=10, scrap_value_per_unit=2,
        ),
    ])


@pytest.fixture
def valuation(catalog):
    return ValuationEngine(catalog)


@pytest.fixture
def job_aggregate(valuation):
    return JobAggregate(valuation, default_charity_percent=10.0, certificate_base_url="https://certs.example")


@pytest.fixture
def driver():
    return Driver(
        id="4", name="James Wilson", vehicle_reg="AB12 CDE",
        vehicle_type=VehicleType.VAN, phone="+44 7700 900123",
    )


@pytest.fixture
def evidence():
    return Evidence(photos=["s3://evidence/pallet-1.jpg"], signature="J. Smith", seal_numbers=["SEAL-001"])


@pytest.fixture
def booked_job(job_aggregate):
    return job_aggregate.book_job(
        job_id="job-1",
        erp_job_number="ERP-2024-00142",
        client_id="client-1",
        client_name="TechCorp Industries",
        site_name="London HQ",
        site_address="123 Tech Street, London EC1A 1BB",
        scheduled_date=date(2024, 11, 28),
        assets=[
            Asset(id="a1", category_id="laptop", quantity=10),
            Asset(id="a2", category_id="monitor", quantity=4),
        ],
    )


@pytest.fixture
def walk_to(job_aggregate, driver, evidence):
    """Drive a job forward to `target`, doing whatever each stage requires."""
    def _walk(job, target, grade=Grade.A):
        target = WorkflowStatus(target)
        while job.status != target:
            following = successor(job.status)
            if following == WorkflowStatus.EN_ROUTE and job.driver is None:
                job = job_aggregate.attach_driver(job, driver)
            if following == WorkflowStatus.SANITISED:
                for asset in job.assets:
                    if not asset.sanitised:
                        job, _ = job_aggregate.record_sanitisation(
                            job, asset.id, SanitisationMethod.BLANCCO, performed_by="tech@test.com"
                        )
            if following == WorkflowStatus.GRADED:
                for asset in job.assets:
                    if asset.grade is None:
                        job, _ = job_aggregate.record_grading(job, asset.id, grade, graded_by="tech@test.com")
            job = job_aggregate.apply_status_transition(
                job,
                following,
                evidence=evidence if following == WorkflowStatus.COLLECTED else None,
            )
        return job
    return _walk
