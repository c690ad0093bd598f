"""
Database Routes - connectivity test and guarded wipe.

- GET /api/db/test : SELECT 1
- GET /api/db/wipe : drop, recreate and reseed every table
"""
import hmac

from fastapi import APIRouter, Query
from sqlalchemy import text

from collabdocs.core.config import get_settings
from collabdocs.core.exceptions import WipeKeyError
from collabdocs.core.logging_config import get_logger
from collabdocs.database import get_database, wipe_and_reinitialize
from collabdocs.models.common import ErrorResponse, result

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api/db",
    tags=["Database"],
)


@router.get(
    "/test",
    summary="Test database connectivity",
    responses={503: {"model": ErrorResponse, "description": "Database unreachable"}},
)
async def test_database():
    with get_database().get_session() as session:
        value = session.execute(text("SELECT 1")).scalar()
    return result(success=value)


@router.get(
    "/wipe",
    summary="Drop and recreate all tables",
    description="""
    Deletes **all** data, recreates the schema and reseeds the default
    commands and preferences.

    Disabled unless WIPE_SECRET is configured; the `secret` query
    parameter must match it.
    """,
    responses={403: {"model": ErrorResponse, "description": "Wipe disabled or wrong secret"}},
)
async def wipe_database(secret: str = Query(default="", description="Must equal WIPE_SECRET")):
    expected = get_settings().wipe_secret
    if not expected or not hmac.compare_digest(secret.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Rejected database wipe request")
        raise WipeKeyError()

    logger.warning("Wiping database on request")
    wipe_and_reinitialize()
    return result(message="Database wiped and reinitialized")
