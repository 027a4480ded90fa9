"""Health check endpoints for liveness and readiness probes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agent_chat.api.dependencies import get_session_factory
from agent_chat.api.schemas.common import HealthResponse, ServiceStatus

logger = logging.getLogger(__name__)

router = APIRouter()

APP_VERSION = "0.1.0"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Liveness check endpoint (always returns 200 OK).

    Returns immediately without checking dependencies.

    Returns:
        HealthResponse with status "ok".
    """
    logger.debug("health_check: status=ok")
    return HealthResponse(status="ok", version=APP_VERSION)


@router.get("/ready", response_model=HealthResponse)
async def readiness_check(
    session_factory: Optional[async_sessionmaker[AsyncSession]] = Depends(get_session_factory),
) -> HealthResponse:
    """
    Readiness check endpoint with database status.

    Args:
        session_factory: Session factory, None when the database is not configured.

    Returns:
        HealthResponse with status and service health information.

    Raises:
        HTTPException: 503 if database is unavailable.
    """
    database_status = "error"
    database_error: Optional[str] = None

    if session_factory is not None:
        try:
            async with session_factory() as session:
                await session.execute(text("SELECT 1"))
            database_status = "connected"
            logger.info("readiness_check: database=connected")
        except Exception as e:
            logger.warning("readiness_check: database=error, error=%s", str(e))
            database_error = str(e)
    else:
        logger.warning("readiness_check: database=unavailable, reason=not_configured")
        database_error = "Database not configured"

    if database_status == "error":
        logger.error("readiness_check: status=error, reason=database_down")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database service unavailable",
        )

    services = {"database": ServiceStatus(status=database_status, error=database_error)}
    logger.info("readiness_check: status=ok")
    return HealthResponse(status="ok", version=APP_VERSION, services=services)
