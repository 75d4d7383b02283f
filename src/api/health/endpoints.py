"""Health check endpoints."""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Request

from src.api.health.models import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthResponse,
    summary="Check service health",
    description=(
        "Returns the health status, version, uptime and reminder poller state of the "
        "API service. Always 200 so load balancers can probe during startup."
    ),
)
def health_check(request: Request) -> HealthResponse:
    """Check if the API service is healthy.

    :param request: The incoming request.
    :returns: Health status response.
    """
    logger.debug("Health check requested")
    services = getattr(request.app.state, "services", None)
    started_at: datetime = request.app.state.started_at
    uptime = (datetime.now(UTC) - started_at).total_seconds()
    return HealthResponse(
        status="healthy" if services is not None else "starting",
        version=request.app.version,
        uptime_seconds=round(max(uptime, 0.0), 3),
        reminder_poller=services is not None and services.poller.is_running,
    )
