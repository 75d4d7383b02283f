"""Delivery of due reminders.

A dispatcher tick claims every due reminder from the store, pushes it through
the notifier and records the outcome. Ticks are idempotent: a reminder is
claimed atomically before it is sent, so it can never be delivered twice.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from src.reminders.models import Reminder

if TYPE_CHECKING:
    from src.messaging.base import Notifier
    from src.reminders.store import ReminderStore

logger = logging.getLogger(__name__)

# Default maximum lateness for a reminder to still be delivered
DEFAULT_GRACE_WINDOW = timedelta(minutes=1)

REMINDER_MESSAGE_TEMPLATE = "🔔 *Reminder*\n\n{text}\n\n⏰ Scheduled for: {scheduled}"


def format_reminder_message(reminder: Reminder) -> str:
    """Format the text sent to the recipient when a reminder fires.

    :param reminder: The reminder being delivered.
    :returns: Message text with the due time shown in the reminder's timezone.
    """
    local_due = reminder.due_at.astimezone(ZoneInfo(reminder.timezone))
    return REMINDER_MESSAGE_TEMPLATE.format(
        text=reminder.text,
        scheduled=local_due.strftime("%Y-%m-%d %H:%M"),
    )


@dataclass
class DispatchResult:
    """Outcome of a single dispatcher tick."""

    delivered: int = 0
    failed: int = 0
    missed: int = 0
    successors: int = 0
    skipped: bool = False
    errors: list[str] = field(default_factory=list)


class ReminderDispatcher:
    """Sends due reminders through a notifier."""

    def __init__(
        self,
        store: ReminderStore,
        notifier: Notifier,
        grace_window: timedelta = DEFAULT_GRACE_WINDOW,
    ) -> None:
        """Initialise the dispatcher.

        :param store: Reminder store to claim reminders from.
        :param notifier: Channel used to deliver reminders.
        :param grace_window: Maximum lateness for a reminder to be delivered.
        """
        self._store = store
        self._notifier = notifier
        self._grace_window = grace_window
        self._tick_lock = asyncio.Lock()

    @property
    def grace_window(self) -> timedelta:
        """Get the configured grace window."""
        return self._grace_window

    async def run_tick(self, now: datetime | None = None) -> DispatchResult:
        """Deliver every reminder that is due.

        Never raises: a failure for one reminder is recorded against it and
        the tick carries on. A tick requested while another is still running
        is skipped.

        :param now: Current time (defaults to now).
        :returns: Counts of what happened during the tick.
        """
        if now is None:
            now = datetime.now(UTC)

        if self._tick_lock.locked():
            logger.warning("Reminder tick already running, skipping")
            return DispatchResult(skipped=True)

        async with self._tick_lock:
            return await self._run_tick(now)

    async def _run_tick(self, now: datetime) -> DispatchResult:
        result = DispatchResult()

        try:
            claim = self._store.claim_due(now, self._grace_window)
        except Exception as e:
            logger.exception(f"Failed to claim due reminders: {e}")
            result.errors.append(f"claim: {e}")
            return result

        result.missed = len(claim.missed)
        result.successors = len(claim.successors)

        for reminder in claim.due:
            await self._deliver(reminder, now, result)

        if claim.due or claim.missed:
            logger.info(
                f"Reminder tick complete: delivered={result.delivered}, "
                f"failed={result.failed}, missed={result.missed}, "
                f"successors={result.successors}"
            )
        return result

    async def _deliver(self, reminder: Reminder, now: datetime, result: DispatchResult) -> None:
        try:
            await self._notifier.send_message(reminder.recipient, format_reminder_message(reminder))
        except Exception as e:
            logger.exception(f"Failed to deliver reminder {reminder.short_id}: {e}")
            result.failed += 1
            result.errors.append(f"Reminder {reminder.short_id}: {e}")
            try:
                self._store.fail_delivery(reminder.id, str(e), now=now)
            except Exception as store_error:
                logger.exception(
                    f"Failed to record delivery failure for {reminder.short_id}: {store_error}"
                )
            return

        try:
            successor = self._store.complete_delivery(reminder.id, now=now)
        except Exception as e:
            logger.exception(f"Failed to record delivery of {reminder.short_id}: {e}")
            result.errors.append(f"Reminder {reminder.short_id}: {e}")
            return

        result.delivered += 1
        if successor is not None:
            result.successors += 1
        logger.info(f"Delivered reminder: id={reminder.short_id}, recipient={reminder.recipient}")
