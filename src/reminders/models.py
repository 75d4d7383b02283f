"""Data models for in-memory reminders."""

import uuid as uuid_module
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from dateutil.relativedelta import relativedelta

# Maximum length of text to show in repr
REPR_TEXT_MAX_LENGTH = 50

# Length of the human-friendly id shown to users
SHORT_ID_LENGTH = 8


class ReminderStatus(StrEnum):
    """Status of a reminder."""

    ACTIVE = "active"  # Waiting to be delivered
    SENT = "sent"  # Delivered (one-time reminder)
    RECURRED = "recurred"  # Delivered, successor carries the series
    CANCELLED = "cancelled"  # Cancelled by the user
    FAILED = "failed"  # Delivery failed, not retried
    MISSED = "missed"  # Due time passed beyond the grace window


# Statuses that count as a completed delivery
DELIVERED_STATUSES = frozenset({ReminderStatus.SENT, ReminderStatus.RECURRED})


class Recurrence(StrEnum):
    """Recurrence unit of a reminder."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Priority(StrEnum):
    """Priority of a reminder."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class SortField(StrEnum):
    """Fields reminders can be sorted by when listed."""

    DUE_AT = "due_at"
    CREATED_AT = "created_at"


_RECURRENCE_OFFSETS: dict[Recurrence, relativedelta] = {
    Recurrence.DAILY: relativedelta(days=1),
    Recurrence.WEEKLY: relativedelta(weeks=1),
    Recurrence.MONTHLY: relativedelta(months=1),
}


def next_occurrence(due_at: datetime, recurrence: Recurrence) -> datetime:
    """Advance a due time by one recurrence unit.

    Monthly recurrence uses calendar months, clamping to the last day of
    shorter months (Jan 31 -> Feb 28/29).

    :param due_at: The previous due time.
    :param recurrence: The recurrence unit.
    :returns: The next due time.
    :raises ValueError: If the recurrence is NONE.
    """
    offset = _RECURRENCE_OFFSETS.get(recurrence)
    if offset is None:
        raise ValueError(f"Reminder does not recur: recurrence={recurrence}")
    return due_at + offset


def _new_id() -> str:
    return str(uuid_module.uuid4())


@dataclass
class Reminder:
    """A scheduled message for a single recipient.

    Records are owned by the ReminderStore; everything handed out by the store
    is a snapshot copy.
    """

    recipient: str
    text: str
    due_at: datetime
    timezone: str = "UTC"
    recurrence: Recurrence = Recurrence.NONE
    priority: Priority = Priority.NORMAL
    status: ReminderStatus = ReminderStatus.ACTIVE
    sent_flag: bool = False
    sent_at: datetime | None = None
    error: str | None = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = None

    @property
    def short_id(self) -> str:
        """Get the human-friendly id prefix."""
        return self.id[:SHORT_ID_LENGTH]

    @property
    def is_recurring(self) -> bool:
        """Check if this is a recurring reminder."""
        return self.recurrence != Recurrence.NONE

    @property
    def is_pending(self) -> bool:
        """Check if the reminder is active and not yet claimed for delivery."""
        return self.status == ReminderStatus.ACTIVE and not self.sent_flag

    def __repr__(self) -> str:
        """Return string representation of the reminder."""
        if len(self.text) > REPR_TEXT_MAX_LENGTH:
            text_preview = self.text[:REPR_TEXT_MAX_LENGTH] + "..."
        else:
            text_preview = self.text
        return (
            f"<Reminder(id={self.short_id}, text={text_preview!r}, "
            f"due_at={self.due_at.isoformat()}, status={self.status}, "
            f"recurrence={self.recurrence})>"
        )


@dataclass(frozen=True)
class ReminderStoreStats:
    """Aggregate counts across all recipients."""

    total: int
    active: int
    sent: int
    recipient_count: int


@dataclass
class ClaimResult:
    """Reminders resolved by a single due-scan."""

    due: list[Reminder] = field(default_factory=list)
    missed: list[Reminder] = field(default_factory=list)
    successors: list[Reminder] = field(default_factory=list)
