"""
Campus Compass API - application entry point.

Campus events for university students:
- Upcoming events per university, filtered by interests and time window
- Per-user registration status (going / interested / cancelled)
- Walking ETA with a "leave by" time for each event
- Organizer submissions with optional LLM pre-fill

Routing (Google Distance Matrix), the LLM and Redis are all optional at
startup: without them ETAs report unavailable, extraction reports
success=false and reference data is read straight from the database.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from campus_compass.api.middleware import RequestLoggingMiddleware
from campus_compass.api.router import api_router
from campus_compass.core.config import get_settings
from campus_compass.core.errors import AppError, app_error_handler
from campus_compass.core.logging import setup_logging, get_logger
from campus_compass.core.metrics import metrics_endpoint
from campus_compass.db.session import AsyncSessionLocal, engine
from campus_compass.services.cache_service import get_redis, close_redis, get_cache_stats

settings = get_settings()
logger = get_logger(__name__)


def _integrations() -> dict[str, bool]:
    return {
        "routing": bool(settings.GOOGLE_MAPS_API_KEY),
        "extraction": bool(settings.OPENAI_API_KEY),
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        **_integrations(),
    )

    if await get_redis() is None:
        logger.warning("redis_unavailable", message="Reference data will be read from the database")
    if not settings.GOOGLE_MAPS_API_KEY:
        logger.warning("routing_unconfigured", message="ETA lookups will report unavailable")

    yield

    await close_redis()
    await engine.dispose()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Campus events, registrations and walking ETAs",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)
app.add_exception_handler(AppError, app_error_handler)
app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness plus the state of each backing service. Degraded integrations do not fail the check."""
    database = "ok"
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error("health_database_failed", error=str(e))
        database = "unavailable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": database,
        "cache": await get_cache_stats(),
        "integrations": _integrations(),
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {"message": f"Welcome to {settings.APP_NAME}", "version": settings.APP_VERSION, "docs": "/docs"}
