# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# /health       process is up, with version and environment
# /health/live  liveness for container restarts
# /health/ready round trip to the configured store (SELECT 1 on SQL,
#               lock acquisition in memory)
# =============================================================================

import logging
import time

from fastapi import APIRouter
from pydantic import BaseModel

from app import __version__
from app.config import settings
from app.dependencies import StoreDep
from lib.utils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str


class StoreCheck(BaseModel):
    """Outcome of the store round trip."""
    backend: str
    status: str
    latency_ms: float | None = None
    error: str | None = None


class ReadinessResponse(BaseModel):
    status: str
    store: StoreCheck
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    timestamp: str


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health status for load balancers and monitoring."""
    return HealthResponse(
        status="healthy",
        timestamp=utcnow().isoformat(),
        environment=settings.ENVIRONMENT,
        version=__version__,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(store: StoreDep):
    """
    Readiness check.

    Pings the store backend. A failed ping reports "degraded" with the
    error message, truncated.
    """
    started = time.perf_counter()
    try:
        await store.ping()
    except Exception as e:
        logger.warning(f"Store ping failed ({store.name}): {e}")
        check = StoreCheck(backend=store.name, status="unhealthy", error=str(e)[:100])
    else:
        elapsed_ms = (time.perf_counter() - started) * 1000
        check = StoreCheck(backend=store.name, status="healthy", latency_ms=round(elapsed_ms, 2))

    return ReadinessResponse(
        status="ready" if check.status == "healthy" else "degraded",
        store=check,
        timestamp=utcnow().isoformat(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """Whether the process is alive. Used by Kubernetes/Docker for restart decisions."""
    return LivenessResponse(
        status="alive",
        timestamp=utcnow().isoformat(),
    )
