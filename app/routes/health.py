"""
LinguaHub Backend — Liveness & Health Routes
==============================================

What:  GET / (plain-text liveness) and GET /health (dependency status).
Who:   GET / is what the hosting platform pings; /health is for Docker
       health checks and monitoring.

Status levels:
    - healthy:   document store reachable (HTTP 200)
    - unhealthy: document store unreachable (HTTP 200, flagged in body)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from app import __version__
from app.database import DocumentStore, get_store
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_class=PlainTextResponse, summary="Liveness probe")
async def root() -> str:
    return "Backend is live!"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(store: DocumentStore = Depends(get_store)) -> HealthResponse:
    """
    Probe the document store with SELECT 1 and report uptime.
    """
    connected = await store.ping()
    if not connected:
        logger.warning("Health check: document store unreachable")

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
