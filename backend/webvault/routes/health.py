"""
WebVault Backend — Health Check Route
=======================================

What:  GET /api/health for load balancers and monitoring.
How:   Runs `SELECT 1` against the configured engine and reports the
       configured data channel (database dialect) from settings.

    healthy    database reachable (HTTP 200)
    unhealthy  database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from webvault import __version__
from webvault.config import settings
from webvault.schemas.common import HealthResponse
from webvault.schemas.envelope import SuccessEnvelope, success

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=SuccessEnvelope[HealthResponse],
    responses={503: {"description": "Database unreachable", "model": SuccessEnvelope[HealthResponse]}},
    summary="Service health check",
)
async def health_check(response: Response) -> SuccessEnvelope[HealthResponse]:
    db_status = "connected"
    overall = "healthy"

    try:
        from webvault.database import engine

        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))
        response.status_code = 503

    return success(
        HealthResponse(
            status=overall,
            version=__version__,
            data_channel=settings.data_channel,
            uptime_seconds=round(time.time() - _start_time, 2),
            checks={"database": db_status},
        ),
        message=overall,
    )
