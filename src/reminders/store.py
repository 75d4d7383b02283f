"""In-memory reminder store.

The store is the single owner of every reminder record. All mutations happen
under one re-entrant lock and every record handed out is a snapshot copy, so a
caller can never change a reminder behind the store's back.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.reminders.exceptions import InvalidTimeError, ReminderNotFoundError
from src.reminders.models import (
    DELIVERED_STATUSES,
    ClaimResult,
    Priority,
    Recurrence,
    Reminder,
    ReminderStatus,
    ReminderStoreStats,
    SortField,
    next_occurrence,
)
from src.reminders.parser import parse_time_expression

logger = logging.getLogger(__name__)

# Default number of reminders returned by list()
DEFAULT_LIST_LIMIT = 50

# Default look-ahead window for upcoming()
DEFAULT_UPCOMING_HOURS = 24

# Default age after which finished reminders are removed
DEFAULT_RETENTION = timedelta(days=30)


def _resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name!r}") from e


def resolve_due_at(due_at: datetime | str, timezone: str, now: datetime) -> datetime:
    """Turn user supplied due time into an aware datetime in the future.

    Strings go through the natural language parser (which falls back to
    dateutil for ISO and other absolute formats). Naive values are
    interpreted in ``timezone``.

    :param due_at: Datetime or time expression.
    :param timezone: IANA zone name for naive values.
    :param now: Reference time.
    :returns: Timezone-aware due time.
    :raises InvalidTimeError: If the time is unparseable or not after ``now``.
    :raises ValueError: If the timezone is unknown.
    """
    zone = _resolve_timezone(timezone)

    if isinstance(due_at, str):
        resolved = parse_time_expression(due_at, now.astimezone(zone))
    elif due_at.tzinfo is None:
        resolved = due_at.replace(tzinfo=zone)
    else:
        resolved = due_at

    if resolved <= now:
        raise InvalidTimeError(
            f"Reminder time must be in the future: due_at={resolved.isoformat()}"
        )
    return resolved


class ReminderStore:
    """Thread-safe, in-memory collection of reminders keyed by recipient."""

    def __init__(self) -> None:
        """Initialise an empty store."""
        self._lock = threading.RLock()
        self._by_recipient: dict[str, dict[str, Reminder]] = {}
        self._recipient_by_id: dict[str, str] = {}

    def create(  # noqa: PLR0913
        self,
        recipient: str,
        text: str,
        due_at: datetime | str,
        *,
        timezone: str = "UTC",
        recurrence: Recurrence = Recurrence.NONE,
        priority: Priority = Priority.NORMAL,
        now: datetime | None = None,
    ) -> Reminder:
        """Create a new active reminder.

        :param recipient: Recipient key.
        :param text: Reminder message, must not be blank.
        :param due_at: When to deliver, datetime or time expression.
        :param timezone: IANA zone for naive times and display.
        :param recurrence: Recurrence unit.
        :param priority: Priority of the reminder.
        :param now: Current time (defaults to now).
        :returns: Snapshot of the created reminder.
        :raises InvalidTimeError: If due_at is unparseable or not in the future.
        :raises ValueError: If text is blank or the timezone is unknown.
        """
        if now is None:
            now = datetime.now(UTC)

        text = text.strip()
        if not text:
            raise ValueError("Reminder text must not be empty")

        resolved = resolve_due_at(due_at, timezone, now)
        reminder = Reminder(
            recipient=recipient,
            text=text,
            due_at=resolved,
            timezone=timezone,
            recurrence=Recurrence(recurrence),
            priority=Priority(priority),
            created_at=now,
        )

        with self._lock:
            self._insert(reminder)

        logger.info(
            f"Created reminder: id={reminder.short_id}, recipient={recipient}, "
            f"due_at={resolved.isoformat()}, recurrence={reminder.recurrence}"
        )
        return replace(reminder)

    def list(
        self,
        recipient: str,
        *,
        status: ReminderStatus | None = None,
        limit: int = DEFAULT_LIST_LIMIT,
        sort_by: SortField = SortField.DUE_AT,
    ) -> list[Reminder]:
        """List a recipient's reminders.

        :param recipient: Recipient key.
        :param status: Only return reminders with this status (None for all).
        :param limit: Maximum number of reminders, 0 or less for no limit.
        :param sort_by: Field to sort ascending by.
        :returns: Snapshots of matching reminders.
        """
        with self._lock:
            reminders = [
                replace(reminder)
                for reminder in self._by_recipient.get(recipient, {}).values()
                if status is None or reminder.status == status
            ]

        reminders.sort(key=lambda r: getattr(r, SortField(sort_by).value))
        if limit > 0:
            reminders = reminders[:limit]
        return reminders

    def get(self, recipient: str, reminder_id: str) -> Reminder:
        """Get a single reminder of any status.

        :param recipient: Recipient key.
        :param reminder_id: Full id or unique id prefix.
        :returns: Snapshot of the reminder.
        :raises ReminderNotFoundError: If no unique match exists.
        """
        with self._lock:
            return replace(self._lookup(recipient, reminder_id, pending_only=False))

    def cancel(self, recipient: str, reminder_id: str, now: datetime | None = None) -> Reminder:
        """Cancel an active reminder.

        Reminders already claimed for delivery can no longer be cancelled.

        :param recipient: Recipient key.
        :param reminder_id: Full id or unambiguous id prefix.
        :param now: Current time (defaults to now).
        :returns: Snapshot of the cancelled reminder.
        :raises ReminderNotFoundError: If no active reminder matches.
        """
        if now is None:
            now = datetime.now(UTC)

        with self._lock:
            reminder = self._lookup(recipient, reminder_id, pending_only=True)
            reminder.status = ReminderStatus.CANCELLED
            reminder.updated_at = now
            snapshot = replace(reminder)

        logger.info(f"Cancelled reminder: id={snapshot.short_id}, recipient={recipient}")
        return snapshot

    def update(  # noqa: PLR0913
        self,
        recipient: str,
        reminder_id: str,
        *,
        text: str | None = None,
        due_at: datetime | str | None = None,
        recurrence: Recurrence | None = None,
        priority: Priority | None = None,
        now: datetime | None = None,
    ) -> Reminder:
        """Update fields of an active reminder.

        Only provided fields are changed. A new due time is validated the same
        way as on creation.

        :param recipient: Recipient key.
        :param reminder_id: Full id or unambiguous id prefix.
        :param text: New message.
        :param due_at: New due time, datetime or time expression.
        :param recurrence: New recurrence unit.
        :param priority: New priority.
        :param now: Current time (defaults to now).
        :returns: Snapshot of the updated reminder.
        :raises ReminderNotFoundError: If no active reminder matches.
        :raises InvalidTimeError: If the new due time is invalid.
        :raises ValueError: If the new text is blank.
        """
        if now is None:
            now = datetime.now(UTC)

        if text is not None:
            text = text.strip()
            if not text:
                raise ValueError("Reminder text must not be empty")

        with self._lock:
            reminder = self._lookup(recipient, reminder_id, pending_only=True)
            resolved = (
                resolve_due_at(due_at, reminder.timezone, now) if due_at is not None else None
            )

            if text is not None:
                reminder.text = text
            if resolved is not None:
                reminder.due_at = resolved
            if recurrence is not None:
                reminder.recurrence = Recurrence(recurrence)
            if priority is not None:
                reminder.priority = Priority(priority)
            reminder.updated_at = now
            snapshot = replace(reminder)

        logger.info(f"Updated reminder: id={snapshot.short_id}, recipient={recipient}")
        return snapshot

    def upcoming(
        self,
        recipient: str,
        hours: int = DEFAULT_UPCOMING_HOURS,
        now: datetime | None = None,
    ) -> list[Reminder]:
        """Get active reminders due within the next few hours.

        :param recipient: Recipient key.
        :param hours: Size of the look-ahead window.
        :param now: Current time (defaults to now).
        :returns: Snapshots sorted by due time.
        """
        if now is None:
            now = datetime.now(UTC)
        window_end = now + timedelta(hours=hours)

        with self._lock:
            reminders = [
                replace(reminder)
                for reminder in self._by_recipient.get(recipient, {}).values()
                if reminder.is_pending and now <= reminder.due_at <= window_end
            ]
        return sorted(reminders, key=lambda r: r.due_at)

    def stats(self) -> ReminderStoreStats:
        """Get aggregate counts across all recipients."""
        with self._lock:
            reminders = [r for records in self._by_recipient.values() for r in records.values()]
            recipient_count = len(self._by_recipient)

        return ReminderStoreStats(
            total=len(reminders),
            active=sum(1 for r in reminders if r.status == ReminderStatus.ACTIVE),
            sent=sum(1 for r in reminders if r.status in DELIVERED_STATUSES),
            recipient_count=recipient_count,
        )

    def cleanup(
        self,
        retention: timedelta = DEFAULT_RETENTION,
        now: datetime | None = None,
    ) -> int:
        """Remove finished reminders older than the retention window.

        Active reminders are never removed, however old.

        :param retention: How long finished reminders are kept.
        :param now: Current time (defaults to now).
        :returns: Number of reminders removed.
        """
        if now is None:
            now = datetime.now(UTC)
        cutoff = now - retention

        removed = 0
        with self._lock:
            for recipient in list(self._by_recipient):
                records = self._by_recipient[recipient]
                stale_ids = [
                    reminder_id
                    for reminder_id, reminder in records.items()
                    if reminder.status != ReminderStatus.ACTIVE and reminder.due_at < cutoff
                ]
                for reminder_id in stale_ids:
                    del records[reminder_id]
                    del self._recipient_by_id[reminder_id]
                removed += len(stale_ids)

                if not records:
                    del self._by_recipient[recipient]

        if removed:
            logger.info(f"Cleaned up {removed} old reminders (cutoff={cutoff.isoformat()})")
        return removed

    def claim_due(self, now: datetime, grace_window: timedelta) -> ClaimResult:
        """Claim every due reminder for delivery and resolve stale ones.

        Reminders due within the grace window are flagged as claimed so no other
        tick or user action can touch them. Reminders later than the grace window
        are marked missed; recurring ones get a successor at the first occurrence
        after ``now``.

        :param now: Current time.
        :param grace_window: Maximum lateness for delivery.
        :returns: Claimed, missed and successor reminders (snapshots).
        """
        result = ClaimResult()

        with self._lock:
            pending = [
                reminder
                for records in self._by_recipient.values()
                for reminder in records.values()
                if reminder.is_pending and reminder.due_at <= now
            ]

            for reminder in sorted(pending, key=lambda r: r.due_at):
                if now - reminder.due_at <= grace_window:
                    reminder.sent_flag = True
                    reminder.updated_at = now
                    result.due.append(replace(reminder))
                    continue

                reminder.status = ReminderStatus.MISSED
                reminder.updated_at = now
                result.missed.append(replace(reminder))
                logger.warning(
                    f"Reminder missed: id={reminder.short_id}, "
                    f"due_at={reminder.due_at.isoformat()}, now={now.isoformat()}"
                )

                if reminder.is_recurring:
                    due_at = next_occurrence(reminder.due_at, reminder.recurrence)
                    while due_at <= now:
                        due_at = next_occurrence(due_at, reminder.recurrence)
                    result.successors.append(self._spawn_successor(reminder, due_at, now))

        return result

    def complete_delivery(self, reminder_id: str, now: datetime | None = None) -> Reminder | None:
        """Record a successful delivery of a claimed reminder.

        One-time reminders become sent. Recurring reminders become recurred and
        exactly one successor is scheduled one unit after the delivered due time.

        :param reminder_id: Full id of the claimed reminder.
        :param now: Delivery time (defaults to now).
        :returns: Snapshot of the successor, or None for one-time reminders.
        :raises ReminderNotFoundError: If the reminder is not claimed.
        """
        if now is None:
            now = datetime.now(UTC)

        with self._lock:
            reminder = self._claimed(reminder_id)
            reminder.sent_at = now
            reminder.updated_at = now

            if not reminder.is_recurring:
                reminder.status = ReminderStatus.SENT
                return None

            reminder.status = ReminderStatus.RECURRED
            due_at = next_occurrence(reminder.due_at, reminder.recurrence)
            return self._spawn_successor(reminder, due_at, now)

    def fail_delivery(self, reminder_id: str, error: str, now: datetime | None = None) -> None:
        """Record a failed delivery of a claimed reminder.

        Failed reminders are not retried.

        :param reminder_id: Full id of the claimed reminder.
        :param error: Description of the failure.
        :param now: Failure time (defaults to now).
        :raises ReminderNotFoundError: If the reminder is not claimed.
        """
        if now is None:
            now = datetime.now(UTC)

        with self._lock:
            reminder = self._claimed(reminder_id)
            reminder.status = ReminderStatus.FAILED
            reminder.error = error
            reminder.updated_at = now

    def _insert(self, reminder: Reminder) -> None:
        self._by_recipient.setdefault(reminder.recipient, {})[reminder.id] = reminder
        self._recipient_by_id[reminder.id] = reminder.recipient

    def _spawn_successor(self, reminder: Reminder, due_at: datetime, now: datetime) -> Reminder:
        successor = Reminder(
            recipient=reminder.recipient,
            text=reminder.text,
            due_at=due_at,
            timezone=reminder.timezone,
            recurrence=reminder.recurrence,
            priority=reminder.priority,
            created_at=now,
        )
        self._insert(successor)
        logger.info(
            f"Scheduled next occurrence: id={successor.short_id}, "
            f"previous={reminder.short_id}, due_at={due_at.isoformat()}"
        )
        return replace(successor)

    def _lookup(self, recipient: str, reminder_id: str, *, pending_only: bool) -> Reminder:
        records = self._by_recipient.get(recipient, {})
        candidates = {
            rid: reminder
            for rid, reminder in records.items()
            if not pending_only or reminder.is_pending
        }

        reminder_id = reminder_id.strip().lower()
        if not reminder_id:
            raise ReminderNotFoundError(recipient, reminder_id)

        if reminder_id in candidates:
            return candidates[reminder_id]

        matches = [reminder for rid, reminder in candidates.items() if rid.startswith(reminder_id)]
        if not matches:
            raise ReminderNotFoundError(recipient, reminder_id)
        if len(matches) > 1:
            raise ReminderNotFoundError(recipient, reminder_id, reason="is ambiguous")
        return matches[0]

    def _claimed(self, reminder_id: str) -> Reminder:
        recipient = self._recipient_by_id.get(reminder_id)
        reminder = self._by_recipient.get(recipient, {}).get(reminder_id) if recipient else None
        if (
            reminder is None
            or reminder.status != ReminderStatus.ACTIVE
            or not reminder.sent_flag
        ):
            raise ReminderNotFoundError(
                recipient or "unknown", reminder_id, reason="is not claimed"
            )
        return reminder
