"""Quality Assessment service entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from quality_assessment import __version__
from quality_assessment.adapters.database import close_database, init_database
from quality_assessment.api.router import get_settings, router
from quality_assessment.api.schemas import HealthResponse
from quality_assessment.core.questions import get_catalog
from quality_assessment.observability import configure_logging, get_logger

settings = get_settings()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        None
    """
    # Startup
    configure_logging(settings.log_level, settings.log_json)
    # Fail fast if the configured version has no catalog.
    get_catalog(settings.current_survey_version)
    init_database(settings)
    logger.info(
        "Service started",
        service=settings.service_name,
        survey_version=settings.current_survey_version,
        min_responses=settings.min_responses,
    )
    yield
    # Shutdown
    await close_database()


app: FastAPI = FastAPI(
    title="Quality Assessment",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(status="ok", service=settings.service_name, version=__version__)


app.include_router(router, prefix="/api/v1")
