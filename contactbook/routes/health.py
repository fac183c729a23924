"""
ContactBook Backend: Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer checks.
How:   Pings the document store with SELECT 1 and reports uptime.

Status levels:
    - healthy:   document store reachable
    - unhealthy: document store unreachable (API calls will answer 503)
"""

import logging
import time

from fastapi import APIRouter, Depends

from contactbook import __version__
from contactbook.dependencies import get_store
from contactbook.schemas.common import HealthResponse
from contactbook.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(store: DocumentStore = Depends(get_store)) -> HealthResponse:
    reachable = await store.ping()
    if not reachable:
        logger.warning("Health check: document store unreachable")

    return HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        store="connected" if reachable else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
