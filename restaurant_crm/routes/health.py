"""
Restaurant CRM Backend - Health & Info Probes
==============================================

What:  GET /health and GET /info, open without credentials.
Who:   Docker health checks, load balancers, monitoring.

Status levels:
    - healthy:   database reachable
    - unhealthy: database unreachable (still HTTP 200, so the body is
                 readable by monitors; status says what is wrong)
"""

import logging
import time

from fastapi import APIRouter, Request
from sqlalchemy import text

from restaurant_crm import __version__
from restaurant_crm.database import engine
from restaurant_crm.schemas.system import HealthResponse, InfoResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    """
    Runs `SELECT 1` against the database and reports the result with
    version and uptime.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )


@router.get(
    "/info",
    response_model=InfoResponse,
    summary="Application information",
)
async def info(request: Request) -> InfoResponse:
    return InfoResponse(
        name=request.app.title,
        version=__version__,
        environment=request.app.state.settings.environment,
        access_policy=request.app.state.access_policy.name,
    )
