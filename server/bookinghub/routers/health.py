"""RPC-style liveness ping used by load balancers that only speak POST."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from ..core.observability import SERVICE_NAME, SERVICE_VERSION
from ..schemas.health import HealthResponse, HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/health", tags=["health"])


@router.post("/ping", response_model=HealthResponse)
async def health_ping() -> HealthResponse:
    """Report that the process is up; does not touch the database."""
    response = HealthResponse(
        status=HealthStatus.HEALTHY,
        service=SERVICE_NAME,
        timestamp=datetime.now(timezone.utc),
        version=SERVICE_VERSION,
    )
    logger.debug("Health ping", extra={"service": SERVICE_NAME})
    return response
