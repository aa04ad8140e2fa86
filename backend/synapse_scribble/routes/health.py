"""
Synapse Scribble Backend - Health Check Route
=============================================

What:  Health check endpoint for monitoring and container probes.
How:   Reports the Gemini status (circuit breaker first, then a cheap
       list_models probe), the number of live sessions and uptime.
Who:   Called by Docker health checks and monitoring.

Status levels:
    - healthy:   Gemini reachable
    - degraded:  Gemini unreachable or circuit open; the service still
                 answers every flow with its fallback text
"""

import logging
import time

from fastapi import APIRouter

from synapse_scribble import __version__
from synapse_scribble.schemas.session import HealthResponse
from synapse_scribble.services.gemini_service import gemini_service
from synapse_scribble.services.session_service import session_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    gemini_status = "available"
    overall = "healthy"

    try:
        if gemini_service.circuit_breaker.state == gemini_service.circuit_breaker.OPEN:
            gemini_status = "circuit_open"
            overall = "degraded"
        elif not await gemini_service.health_check():
            gemini_status = "unavailable"
            overall = "degraded"
    except Exception as e:
        gemini_status = "unavailable"
        overall = "degraded"
        logger.warning("Health check: Gemini unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        gemini=gemini_status,
        active_sessions=session_store.count(),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
