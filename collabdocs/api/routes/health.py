"""
Health Check Routes - System health and monitoring endpoints.

These endpoints are used for:
1. Load balancer health checks
2. Container liveness/readiness probes
3. Monitoring systems
"""
from datetime import datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from collabdocs import __version__
from collabdocs.core.logging_config import get_logger
from collabdocs.database.connection import get_database
from collabdocs.models.common import HealthResponse

logger = get_logger(__name__)

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description="Returns 200 OK while the API process is up. Does not touch the database.",
)
async def health_check() -> HealthResponse:
    logger.debug("Health check requested")

    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.utcnow()
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness check endpoint",
    description="""
    Returns whether the service is ready to accept requests.

    Runs SELECT 1 against the database; answers 503 when it fails.
    """,
    responses={503: {"model": HealthResponse, "description": "Database unreachable"}},
)
async def readiness_check():
    """Readiness probe: the API is only ready when the database answers."""
    logger.debug("Readiness check requested")

    database_ok = get_database().check_connection()
    body = HealthResponse(
        status="ready" if database_ok else "unavailable",
        version=__version__,
        database="connected" if database_ok else "unreachable",
        timestamp=datetime.utcnow()
    )

    if not database_ok:
        return JSONResponse(status_code=503, content=body.model_dump(mode="json"))
    return body
