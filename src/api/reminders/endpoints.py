"""API endpoints for managing user reminders."""

import logging
import time
from datetime import timedelta

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_services
from src.api.reminders.models import (
    CleanupResponse,
    CreateReminderRequest,
    ListRemindersResponse,
    ReminderResponse,
    TickResponse,
    UpdateReminderRequest,
)
from src.assistant.services import AssistantServices
from src.reminders.models import ReminderStatus, SortField
from src.reminders.store import DEFAULT_LIST_LIMIT, DEFAULT_UPCOMING_HOURS

logger = logging.getLogger(__name__)

MAX_RETENTION_DAYS = 3650

router = APIRouter(prefix="/reminders", tags=["Reminders"])


@router.post(
    "",
    response_model=ReminderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create reminder",
)
def create_reminder(
    request: CreateReminderRequest,
    services: AssistantServices = Depends(get_services),
) -> ReminderResponse:
    """Create a new reminder for a recipient.

    The due time may be an ISO datetime or a time expression ("in 2 hours",
    "tomorrow at 9am"), resolved in the request's timezone.
    """
    start = time.perf_counter()
    timezone = request.timezone or services.config.default_timezone

    logger.info(
        f"Create reminder: recipient={request.recipient}, text={request.text[:50]!r}, "
        f"due_at={request.due_at}, recurrence={request.recurrence}"
    )

    reminder = services.store.create(
        request.recipient,
        request.text,
        request.due_at,
        timezone=timezone,
        recurrence=request.recurrence,
        priority=request.priority,
    )

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Create reminder complete: id={reminder.short_id}, elapsed={elapsed_ms:.0f}ms")
    return ReminderResponse.from_reminder(reminder)


@router.post(
    "/tick",
    response_model=TickResponse,
    summary="Run one dispatcher tick",
    description="Delivers due reminders now. For deployments driven by an external scheduler.",
)
async def run_tick(services: AssistantServices = Depends(get_services)) -> TickResponse:
    """Run a single reminder dispatcher tick."""
    start = time.perf_counter()
    result = await services.dispatcher.run_tick()

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        f"Manual tick complete: delivered={result.delivered}, failed={result.failed}, "
        f"missed={result.missed}, skipped={result.skipped}, elapsed={elapsed_ms:.0f}ms"
    )
    return TickResponse(
        delivered=result.delivered,
        failed=result.failed,
        missed=result.missed,
        successors=result.successors,
        skipped=result.skipped,
        errors=result.errors,
    )


@router.post(
    "/cleanup",
    response_model=CleanupResponse,
    summary="Remove old reminders",
    description="Deletes finished reminders older than the retention window.",
)
def cleanup_reminders(
    retention_days: float | None = Query(
        None,
        gt=0,
        le=MAX_RETENTION_DAYS,
        description="Retention window in days (defaults to configured value)",
    ),
    services: AssistantServices = Depends(get_services),
) -> CleanupResponse:
    """Remove finished reminders older than the retention window."""
    retention = (
        timedelta(days=retention_days) if retention_days is not None else services.config.retention
    )
    removed = services.store.cleanup(retention)
    return CleanupResponse(removed=removed, retention_days=retention.total_seconds() / 86400)


@router.get(
    "/{recipient}",
    response_model=ListRemindersResponse,
    summary="List reminders",
)
def list_reminders(
    recipient: str,
    status_filter: ReminderStatus | None = Query(
        None, alias="status", description="Only return reminders with this status"
    ),
    limit: int = Query(DEFAULT_LIST_LIMIT, description="Maximum results, 0 for no limit"),
    sort: SortField = Query(SortField.DUE_AT, description="Field to sort ascending by"),
    services: AssistantServices = Depends(get_services),
) -> ListRemindersResponse:
    """List a recipient's reminders."""
    reminders = services.store.list(recipient, status=status_filter, limit=limit, sort_by=sort)
    logger.info(f"List reminders: recipient={recipient}, count={len(reminders)}")
    return ListRemindersResponse(
        reminders=[ReminderResponse.from_reminder(r) for r in reminders],
        total=len(reminders),
    )


@router.get(
    "/{recipient}/upcoming",
    response_model=ListRemindersResponse,
    summary="List upcoming reminders",
)
def list_upcoming_reminders(
    recipient: str,
    hours: int = Query(DEFAULT_UPCOMING_HOURS, ge=1, le=24 * 366, description="Look-ahead"),
    services: AssistantServices = Depends(get_services),
) -> ListRemindersResponse:
    """List active reminders due within the next few hours."""
    reminders = services.store.upcoming(recipient, hours=hours)
    return ListRemindersResponse(
        reminders=[ReminderResponse.from_reminder(r) for r in reminders],
        total=len(reminders),
    )


@router.get(
    "/{recipient}/{reminder_id}",
    response_model=ReminderResponse,
    summary="Get reminder",
)
def get_reminder(
    recipient: str,
    reminder_id: str,
    services: AssistantServices = Depends(get_services),
) -> ReminderResponse:
    """Get a reminder by full id or unique id prefix."""
    return ReminderResponse.from_reminder(services.store.get(recipient, reminder_id))


@router.patch(
    "/{recipient}/{reminder_id}",
    response_model=ReminderResponse,
    summary="Update reminder",
)
def update_reminder(
    recipient: str,
    reminder_id: str,
    request: UpdateReminderRequest,
    services: AssistantServices = Depends(get_services),
) -> ReminderResponse:
    """Update an active reminder. Omitted fields are left unchanged."""
    logger.info(f"Update reminder: recipient={recipient}, id={reminder_id}")
    reminder = services.store.update(
        recipient,
        reminder_id,
        text=request.text,
        due_at=request.due_at,
        recurrence=request.recurrence,
        priority=request.priority,
    )
    return ReminderResponse.from_reminder(reminder)


@router.delete(
    "/{recipient}/{reminder_id}",
    response_model=ReminderResponse,
    summary="Cancel reminder",
)
def cancel_reminder(
    recipient: str,
    reminder_id: str,
    services: AssistantServices = Depends(get_services),
) -> ReminderResponse:
    """Cancel an active reminder."""
    logger.info(f"Cancel reminder: recipient={recipient}, id={reminder_id}")
    reminder = services.store.cancel(recipient, reminder_id)
    return ReminderResponse.from_reminder(reminder)
