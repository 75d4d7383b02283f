"""In-memory reminders: parsing, storage and delivery."""

from src.reminders.dispatcher import DispatchResult, ReminderDispatcher, format_reminder_message
from src.reminders.exceptions import (
    InvalidTimeError,
    ReminderError,
    ReminderNotFoundError,
    UnparseableTimeError,
    UnrecognizedReminderFormatError,
)
from src.reminders.models import (
    Priority,
    Recurrence,
    Reminder,
    ReminderStatus,
    ReminderStoreStats,
    SortField,
    next_occurrence,
)
from src.reminders.parser import parse_time_expression
from src.reminders.poller import ReminderPoller
from src.reminders.store import ReminderStore

__all__ = [
    "DispatchResult",
    "InvalidTimeError",
    "Priority",
    "Recurrence",
    "Reminder",
    "ReminderDispatcher",
    "ReminderError",
    "ReminderNotFoundError",
    "ReminderPoller",
    "ReminderStatus",
    "ReminderStore",
    "ReminderStoreStats",
    "SortField",
    "UnparseableTimeError",
    "UnrecognizedReminderFormatError",
    "format_reminder_message",
    "next_occurrence",
    "parse_time_expression",
]
