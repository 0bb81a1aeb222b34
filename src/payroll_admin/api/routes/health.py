"""Health check endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from payroll_admin import __version__
from payroll_admin.api.dependencies import DbSession
from payroll_admin.calculators.matchers import AbsenceThresholdMatcher, ServiceBracketMatcher
from payroll_admin.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    engine_version: str
    timestamp: datetime
    database: str


class ReadinessResponse(BaseModel):
    """Readiness plus the rate configuration the engine will calculate with."""

    status: str
    active_service_brackets: int = 0
    active_absence_thresholds: int = 0


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(db: DbSession) -> HealthResponse:
    """Report API and database health; degraded when the database is unreachable."""
    try:
        await db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        database = "unhealthy"

    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        version=__version__,
        engine_version=get_settings().engine_version,
        timestamp=datetime.now(timezone.utc),
        database=database,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(db: DbSession) -> ReadinessResponse | JSONResponse:
    """Ready once the rate tables can be read."""
    try:
        brackets = await ServiceBracketMatcher(db).active_brackets()
        thresholds = await AbsenceThresholdMatcher(db).active_thresholds()
    except SQLAlchemyError:
        logger.warning("Readiness check could not read rate tables", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ReadinessResponse(status="not_ready").model_dump(),
        )

    if not brackets:
        logger.debug("No active service brackets; service incentives will be zero")
    return ReadinessResponse(
        status="ready",
        active_service_brackets=len(brackets),
        active_absence_thresholds=len(thresholds),
    )


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}
