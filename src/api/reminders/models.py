"""Pydantic models for reminders API endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.reminders.models import Priority, Recurrence, Reminder, ReminderStatus


class ReminderResponse(BaseModel):
    """Response model for a reminder."""

    id: str = Field(..., description="Reminder ID")
    short_id: str = Field(..., description="Short ID prefix shown to users")
    recipient: str = Field(..., description="Recipient phone number")
    text: str = Field(..., description="Reminder message")
    due_at: datetime = Field(..., description="When the reminder is due")
    timezone: str = Field(..., description="Timezone used for display and naive times")
    recurrence: Recurrence = Field(..., description="Recurrence unit")
    priority: Priority = Field(..., description="Priority")
    status: ReminderStatus = Field(..., description="Current status")
    sent_at: datetime | None = Field(None, description="When the reminder was delivered")
    error: str | None = Field(None, description="Delivery error, if it failed")
    created_at: datetime = Field(..., description="When the reminder was created")
    updated_at: datetime | None = Field(None, description="When the reminder was last changed")

    @classmethod
    def from_reminder(cls, reminder: Reminder) -> "ReminderResponse":
        """Build a response from a stored reminder.

        :param reminder: The reminder snapshot.
        :returns: API response model.
        """
        return cls(
            id=reminder.id,
            short_id=reminder.short_id,
            recipient=reminder.recipient,
            text=reminder.text,
            due_at=reminder.due_at,
            timezone=reminder.timezone,
            recurrence=reminder.recurrence,
            priority=reminder.priority,
            status=reminder.status,
            sent_at=reminder.sent_at,
            error=reminder.error,
            created_at=reminder.created_at,
            updated_at=reminder.updated_at,
        )


class CreateReminderRequest(BaseModel):
    """Request model for creating a reminder."""

    recipient: str = Field(..., min_length=1, description="Recipient phone number")
    text: str = Field(..., min_length=1, max_length=500, description="Reminder message")
    due_at: datetime | str = Field(
        ...,
        union_mode="left_to_right",
        description="ISO datetime, or a time expression such as 'in 2 hours'",
    )
    timezone: str | None = Field(
        None, description="IANA timezone (defaults to the assistant's default timezone)"
    )
    recurrence: Recurrence = Field(Recurrence.NONE, description="Recurrence unit")
    priority: Priority = Field(Priority.NORMAL, description="Priority")


class UpdateReminderRequest(BaseModel):
    """Request model for updating a reminder. Omitted fields are unchanged."""

    text: str | None = Field(None, min_length=1, max_length=500, description="New message")
    due_at: datetime | str | None = Field(
        None,
        union_mode="left_to_right",
        description="New due time, ISO datetime or time expression",
    )
    recurrence: Recurrence | None = Field(None, description="New recurrence unit")
    priority: Priority | None = Field(None, description="New priority")


class ListRemindersResponse(BaseModel):
    """Response model for listing reminders."""

    reminders: list[ReminderResponse] = Field(..., description="Matching reminders")
    total: int = Field(..., description="Number of reminders returned")


class TickResponse(BaseModel):
    """Response model for a dispatcher tick."""

    delivered: int = Field(..., description="Reminders delivered")
    failed: int = Field(..., description="Reminders whose delivery failed")
    missed: int = Field(..., description="Reminders past the grace window")
    successors: int = Field(..., description="Recurring successors created")
    skipped: bool = Field(..., description="True if another tick was already running")
    errors: list[str] = Field(default_factory=list, description="Delivery errors")


class CleanupResponse(BaseModel):
    """Response model for a retention cleanup."""

    removed: int = Field(..., description="Reminders removed")
    retention_days: float = Field(..., description="Retention window applied")
