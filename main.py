import json
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from core.logging import RequestIdMiddleware, setup_logging
from db import init_db
from api.auth.views import router as auth_router
from api.dashboard.views import router as dashboard_router
from api.jobs.views import router as jobs_router
from api.valuation.views import categories_router, valuation_router

log = structlog.get_logger(__name__)


def get_cors_origins() -> list[str]:
    """Get CORS origins from settings or use development defaults."""
    cors_env = settings.CORS_ORIGINS

    # Try to parse as JSON array
    if cors_env:
        try:
            origins = json.loads(cors_env)
            if isinstance(origins, list):
                return origins
        except json.JSONDecodeError:
            # If not valid JSON, treat as comma-separated
            return [o.strip() for o in cors_env.split(",") if o.strip()]

    return [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.DATABASE_URL.startswith("sqlite"):
        await init_db()
    log.info("app.startup", env=settings.APP_ENV)
    yield


app = FastAPI(
    title="ITAD Job Tracker API",
    description="API for booking IT asset collections and tracking them through to disposal",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)

# Authentication endpoints
app.include_router(auth_router, prefix="/api/v1")

# Business endpoints
app.include_router(categories_router, prefix="/api/v1")
app.include_router(valuation_router, prefix="/api/v1")
app.include_router(jobs_router, prefix="/api/v1")
app.include_router(dashboard_router, prefix="/api/v1")


# Health check endpoint
@app.get("/health", tags=["system"])
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}
