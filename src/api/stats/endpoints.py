"""Service statistics endpoint."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from src.api.dependencies import get_services
from src.api.stats.models import PollerStatsResponse, ReminderStatsResponse, StatsResponse
from src.assistant.services import AssistantServices

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("", response_model=StatsResponse, summary="Get service statistics")
def get_stats(services: AssistantServices = Depends(get_services)) -> StatsResponse:
    """Get reminder counts, poller status and uptime."""
    stats = services.store.stats()
    uptime = (datetime.now(UTC) - services.started_at).total_seconds()
    return StatsResponse(
        reminders=ReminderStatsResponse(
            total=stats.total,
            active=stats.active,
            sent=stats.sent,
            recipient_count=stats.recipient_count,
        ),
        poller=PollerStatsResponse(
            running=services.poller.is_running,
            ticks=services.poller.ticks,
            last_tick_at=services.poller.last_tick_at,
        ),
        conversations=len(services.conversations),
        media_items=len(services.media_store),
        uptime_seconds=round(max(uptime, 0.0), 3),
    )
