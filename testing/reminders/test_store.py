"""Tests for the in-memory reminder store."""

import unittest
from collections import Counter
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from src.reminders.exceptions import InvalidTimeError, ReminderNotFoundError
from src.reminders.models import Priority, Recurrence, ReminderStatus, SortField
from src.reminders.store import ReminderStore

NOW = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
GRACE = timedelta(minutes=1)
ALICE = "15550001111"
BOB = "15550002222"


class TestReminderStoreCreate(unittest.TestCase):
    """Tests for creating and listing reminders."""

    def setUp(self) -> None:
        """Set up an empty store."""
        self.store = ReminderStore()

    def test_create_then_list_contains_exactly_one(self) -> None:
        """Test a created reminder is listed once as active."""
        due_at = NOW + timedelta(hours=1)

        created = self.store.create(ALICE, "Call mom", due_at, now=NOW)
        active = self.store.list(ALICE, status=ReminderStatus.ACTIVE)

        self.assertEqual(len(active), 1)
        self.assertEqual(active[0].id, created.id)
        self.assertEqual(active[0].text, "Call mom")
        self.assertEqual(active[0].due_at, due_at)
        self.assertEqual(active[0].recipient, ALICE)
        self.assertEqual(active[0].status, ReminderStatus.ACTIVE)
        self.assertFalse(active[0].sent_flag)

    def test_create_in_past_raises(self) -> None:
        """Test a due time before now raises InvalidTimeError."""
        with self.assertRaises(InvalidTimeError):
            self.store.create(ALICE, "Too late", NOW - timedelta(seconds=1), now=NOW)

    def test_create_at_now_raises(self) -> None:
        """Test a due time equal to now raises InvalidTimeError."""
        with self.assertRaises(InvalidTimeError):
            self.store.create(ALICE, "Right now", NOW, now=NOW)

    def test_create_from_time_expression(self) -> None:
        """Test string due times are parsed relative to now."""
        reminder = self.store.create(ALICE, "Stretch", "in 5 minutes", now=NOW)

        self.assertEqual(reminder.due_at, NOW + timedelta(minutes=5))

    def test_create_with_unparseable_expression_raises(self) -> None:
        """Test unparseable expressions raise InvalidTimeError."""
        with self.assertRaises(InvalidTimeError):
            self.store.create(ALICE, "Stretch", "some day", now=NOW)

    def test_create_with_out_of_range_expression_raises(self) -> None:
        """Test relative times beyond the calendar raise InvalidTimeError."""
        with self.assertRaises(InvalidTimeError):
            self.store.create(ALICE, "Stretch", "in 99999999999 days", now=NOW)

        self.assertEqual(self.store.list(ALICE), [])

    def test_relative_hours_use_elapsed_time_in_reminder_timezone(self) -> None:
        """Test hours are counted in real time across a clock change."""
        now = datetime(2026, 10, 24, 23, 30, tzinfo=UTC)

        reminder = self.store.create(
            ALICE, "Stretch", "in 2 hours", timezone="Europe/London", now=now
        )

        self.assertEqual(reminder.due_at.astimezone(UTC), now + timedelta(hours=2))

    def test_naive_due_time_uses_reminder_timezone(self) -> None:
        """Test naive datetimes are interpreted in the given timezone."""
        zone = ZoneInfo("Europe/London")

        reminder = self.store.create(
            ALICE, "Tea", datetime(2024, 1, 1, 16, 0), timezone="Europe/London", now=NOW
        )

        self.assertEqual(reminder.due_at, datetime(2024, 1, 1, 16, 0, tzinfo=zone))
        self.assertEqual(reminder.timezone, "Europe/London")

    def test_unknown_timezone_raises_value_error(self) -> None:
        """Test an unknown zone name raises ValueError."""
        with self.assertRaises(ValueError):
            self.store.create(ALICE, "Tea", "in 1 hour", timezone="Mars/Olympus", now=NOW)

    def test_blank_text_raises_value_error(self) -> None:
        """Test blank reminder text is rejected."""
        with self.assertRaises(ValueError):
            self.store.create(ALICE, "   ", NOW + timedelta(hours=1), now=NOW)

    def test_options_are_stored(self) -> None:
        """Test recurrence and priority are kept."""
        reminder = self.store.create(
            ALICE,
            "Standup",
            NOW + timedelta(hours=1),
            recurrence=Recurrence.DAILY,
            priority=Priority.HIGH,
            now=NOW,
        )

        self.assertEqual(reminder.recurrence, Recurrence.DAILY)
        self.assertEqual(reminder.priority, Priority.HIGH)
        self.assertTrue(reminder.is_recurring)

    def test_list_is_partitioned_by_recipient(self) -> None:
        """Test recipients only see their own reminders."""
        self.store.create(ALICE, "A", NOW + timedelta(hours=1), now=NOW)
        self.store.create(BOB, "B", NOW + timedelta(hours=1), now=NOW)

        self.assertEqual([r.text for r in self.store.list(ALICE)], ["A"])
        self.assertEqual([r.text for r in self.store.list(BOB)], ["B"])
        self.assertEqual(self.store.list("nobody"), [])

    def test_list_sorts_by_due_at_by_default(self) -> None:
        """Test default ordering is ascending due time."""
        self.store.create(ALICE, "later", NOW + timedelta(hours=3), now=NOW)
        self.store.create(ALICE, "sooner", NOW + timedelta(hours=1), now=NOW + timedelta(seconds=1))

        self.assertEqual([r.text for r in self.store.list(ALICE)], ["sooner", "later"])

    def test_list_sorts_by_created_at(self) -> None:
        """Test ordering by creation time."""
        self.store.create(ALICE, "first", NOW + timedelta(hours=3), now=NOW)
        self.store.create(ALICE, "second", NOW + timedelta(hours=1), now=NOW + timedelta(seconds=1))

        reminders = self.store.list(ALICE, sort_by=SortField.CREATED_AT)

        self.assertEqual([r.text for r in reminders], ["first", "second"])

    def test_list_limit_truncates_tail(self) -> None:
        """Test limit keeps the head of the ordered list."""
        for hours in (3, 1, 2):
            self.store.create(ALICE, f"{hours}h", NOW + timedelta(hours=hours), now=NOW)

        self.assertEqual([r.text for r in self.store.list(ALICE, limit=2)], ["1h", "2h"])

    def test_list_non_positive_limit_means_unlimited(self) -> None:
        """Test limit of 0 or below returns everything."""
        for hours in range(1, 5):
            self.store.create(ALICE, f"{hours}h", NOW + timedelta(hours=hours), now=NOW)

        self.assertEqual(len(self.store.list(ALICE, limit=0)), 4)
        self.assertEqual(len(self.store.list(ALICE, limit=-1)), 4)

    def test_list_returns_snapshots(self) -> None:
        """Test mutating a listed reminder does not change the store."""
        self.store.create(ALICE, "Original", NOW + timedelta(hours=1), now=NOW)

        self.store.list(ALICE)[0].text = "Changed"

        self.assertEqual(self.store.list(ALICE)[0].text, "Original")

    def test_upcoming_only_includes_window(self) -> None:
        """Test upcoming returns active reminders within the window."""
        self.store.create(ALICE, "soon", NOW + timedelta(hours=2), now=NOW)
        self.store.create(ALICE, "next week", NOW + timedelta(days=7), now=NOW)

        upcoming = self.store.upcoming(ALICE, hours=24, now=NOW)

        self.assertEqual([r.text for r in upcoming], ["soon"])


class TestReminderStoreCancelAndUpdate(unittest.TestCase):
    """Tests for cancel and update."""

    def setUp(self) -> None:
        """Set up a store with one reminder."""
        self.store = ReminderStore()
        self.reminder = self.store.create(ALICE, "Call mom", NOW + timedelta(hours=1), now=NOW)

    def test_cancel_twice_raises_not_found(self) -> None:
        """Test the first cancel succeeds and the second raises NotFound."""
        cancelled = self.store.cancel(ALICE, self.reminder.id, now=NOW)
        self.assertEqual(cancelled.status, ReminderStatus.CANCELLED)

        with self.assertRaises(ReminderNotFoundError):
            self.store.cancel(ALICE, self.reminder.id, now=NOW)

    def test_cancel_by_short_id_prefix(self) -> None:
        """Test cancelling with the short id."""
        cancelled = self.store.cancel(ALICE, self.reminder.short_id.upper(), now=NOW)

        self.assertEqual(cancelled.id, self.reminder.id)

    def test_cancel_other_recipient_raises(self) -> None:
        """Test a recipient cannot cancel someone else's reminder."""
        with self.assertRaises(ReminderNotFoundError):
            self.store.cancel(BOB, self.reminder.id, now=NOW)

    def test_cancel_empty_id_raises(self) -> None:
        """Test an empty id never matches."""
        with self.assertRaises(ReminderNotFoundError):
            self.store.cancel(ALICE, "  ", now=NOW)

    def test_ambiguous_prefix_raises(self) -> None:
        """Test a prefix shared by several reminders is rejected."""
        for index in range(16):
            self.store.create(ALICE, f"r{index}", NOW + timedelta(hours=index + 2), now=NOW)
        first_chars = Counter(r.id[0] for r in self.store.list(ALICE, limit=0))
        shared, count = first_chars.most_common(1)[0]
        self.assertGreater(count, 1)

        with self.assertRaises(ReminderNotFoundError) as context:
            self.store.cancel(ALICE, shared, now=NOW)

        self.assertEqual(context.exception.reason, "is ambiguous")

    def test_update_changes_fields(self) -> None:
        """Test update changes only the provided fields."""
        new_due = NOW + timedelta(hours=5)

        updated = self.store.update(
            ALICE, self.reminder.short_id, text="Call dad", due_at=new_due, now=NOW
        )

        self.assertEqual(updated.text, "Call dad")
        self.assertEqual(updated.due_at, new_due)
        self.assertEqual(updated.recurrence, Recurrence.NONE)
        self.assertEqual(updated.updated_at, NOW)

    def test_update_revalidates_due_time(self) -> None:
        """Test a past due time is rejected on update."""
        with self.assertRaises(InvalidTimeError):
            self.store.update(ALICE, self.reminder.id, due_at=NOW - timedelta(minutes=1), now=NOW)

        self.assertEqual(self.store.get(ALICE, self.reminder.id).due_at, self.reminder.due_at)

    def test_update_cancelled_raises_not_found(self) -> None:
        """Test resolved reminders cannot be updated."""
        self.store.cancel(ALICE, self.reminder.id, now=NOW)

        with self.assertRaises(ReminderNotFoundError):
            self.store.update(ALICE, self.reminder.id, text="Again", now=NOW)

    def test_update_blank_text_raises(self) -> None:
        """Test blank text is rejected on update."""
        with self.assertRaises(ValueError):
            self.store.update(ALICE, self.reminder.id, text=" ", now=NOW)

    def test_get_returns_resolved_reminders(self) -> None:
        """Test get finds reminders of any status."""
        self.store.cancel(ALICE, self.reminder.id, now=NOW)

        self.assertEqual(
            self.store.get(ALICE, self.reminder.short_id).status, ReminderStatus.CANCELLED
        )


class TestReminderStoreDelivery(unittest.TestCase):
    """Tests for claiming and resolving due reminders."""

    def setUp(self) -> None:
        """Set up an empty store."""
        self.store = ReminderStore()

    def test_claim_due_within_grace_window(self) -> None:
        """Test due reminders are claimed and future ones are left alone."""
        due = self.store.create(ALICE, "due", NOW + timedelta(minutes=5), now=NOW)
        self.store.create(ALICE, "future", NOW + timedelta(hours=5), now=NOW)
        tick = NOW + timedelta(minutes=5, seconds=30)

        claim = self.store.claim_due(tick, GRACE)

        self.assertEqual([r.id for r in claim.due], [due.id])
        self.assertEqual(claim.missed, [])
        self.assertTrue(self.store.get(ALICE, due.id).sent_flag)

    def test_claimed_reminder_is_not_claimed_again(self) -> None:
        """Test a second scan does not return the same reminder."""
        self.store.create(ALICE, "due", NOW + timedelta(minutes=5), now=NOW)
        tick = NOW + timedelta(minutes=5)

        self.store.claim_due(tick, GRACE)

        self.assertEqual(self.store.claim_due(tick, GRACE).due, [])

    def test_claimed_reminder_cannot_be_cancelled(self) -> None:
        """Test a reminder being delivered is no longer cancellable."""
        reminder = self.store.create(ALICE, "due", NOW + timedelta(minutes=5), now=NOW)
        self.store.claim_due(NOW + timedelta(minutes=5), GRACE)

        with self.assertRaises(ReminderNotFoundError):
            self.store.cancel(ALICE, reminder.id, now=NOW + timedelta(minutes=5))

    def test_stale_reminder_is_missed(self) -> None:
        """Test reminders past the grace window are marked missed."""
        reminder = self.store.create(ALICE, "stale", NOW + timedelta(minutes=5), now=NOW)

        claim = self.store.claim_due(NOW + timedelta(hours=2), GRACE)

        self.assertEqual(claim.due, [])
        self.assertEqual([r.id for r in claim.missed], [reminder.id])
        self.assertEqual(claim.successors, [])
        self.assertEqual(self.store.get(ALICE, reminder.id).status, ReminderStatus.MISSED)

    def test_stale_recurring_reminder_catches_up(self) -> None:
        """Test a missed recurring reminder resumes at the first occurrence after now."""
        self.store.create(
            ALICE, "daily", NOW + timedelta(minutes=5), recurrence=Recurrence.DAILY, now=NOW
        )
        tick = NOW + timedelta(days=3)

        claim = self.store.claim_due(tick, GRACE)

        self.assertEqual(len(claim.successors), 1)
        self.assertEqual(claim.successors[0].due_at, NOW + timedelta(days=3, minutes=5))
        self.assertEqual(len(self.store.list(ALICE, status=ReminderStatus.ACTIVE)), 1)

    def test_complete_one_time_delivery(self) -> None:
        """Test a one-time reminder becomes sent."""
        reminder = self.store.create(ALICE, "once", NOW + timedelta(minutes=5), now=NOW)
        tick = NOW + timedelta(minutes=5)
        self.store.claim_due(tick, GRACE)

        successor = self.store.complete_delivery(reminder.id, now=tick)

        stored = self.store.get(ALICE, reminder.id)
        self.assertIsNone(successor)
        self.assertEqual(stored.status, ReminderStatus.SENT)
        self.assertEqual(stored.sent_at, tick)

    def test_complete_daily_delivery_spawns_one_successor(self) -> None:
        """Test the successor is one day after the prior due time, not after now."""
        due_at = NOW + timedelta(minutes=5)
        reminder = self.store.create(ALICE, "daily", due_at, recurrence=Recurrence.DAILY, now=NOW)
        tick = due_at + timedelta(seconds=40)
        self.store.claim_due(tick, GRACE)

        successor = self.store.complete_delivery(reminder.id, now=tick)

        self.assertIsNotNone(successor)
        self.assertEqual(successor.due_at, due_at + timedelta(days=1))
        self.assertEqual(successor.text, "daily")
        self.assertEqual(successor.recurrence, Recurrence.DAILY)
        self.assertNotEqual(successor.id, reminder.id)
        self.assertEqual(self.store.get(ALICE, reminder.id).status, ReminderStatus.RECURRED)
        active = self.store.list(ALICE, status=ReminderStatus.ACTIVE)
        self.assertEqual([r.id for r in active], [successor.id])

    def test_monthly_successor_clamps_to_month_end(self) -> None:
        """Test monthly recurrence from Jan 31 lands on Feb 29 in a leap year."""
        due_at = datetime(2024, 1, 31, 9, 0, tzinfo=UTC)
        reminder = self.store.create(
            ALICE, "rent", due_at, recurrence=Recurrence.MONTHLY, now=NOW
        )
        self.store.claim_due(due_at, GRACE)

        successor = self.store.complete_delivery(reminder.id, now=due_at)

        self.assertEqual(successor.due_at, datetime(2024, 2, 29, 9, 0, tzinfo=UTC))

    def test_fail_delivery_records_error(self) -> None:
        """Test failed deliveries are marked failed with the error."""
        reminder = self.store.create(ALICE, "once", NOW + timedelta(minutes=5), now=NOW)
        tick = NOW + timedelta(minutes=5)
        self.store.claim_due(tick, GRACE)

        self.store.fail_delivery(reminder.id, "network down", now=tick)

        stored = self.store.get(ALICE, reminder.id)
        self.assertEqual(stored.status, ReminderStatus.FAILED)
        self.assertEqual(stored.error, "network down")

    def test_complete_unclaimed_raises(self) -> None:
        """Test resolving a reminder that was never claimed raises NotFound."""
        reminder = self.store.create(ALICE, "once", NOW + timedelta(minutes=5), now=NOW)

        with self.assertRaises(ReminderNotFoundError):
            self.store.complete_delivery(reminder.id, now=NOW)


class TestReminderStoreMaintenance(unittest.TestCase):
    """Tests for stats and cleanup."""

    def setUp(self) -> None:
        """Set up an empty store."""
        self.store = ReminderStore()

    def test_stats_counts_across_recipients(self) -> None:
        """Test stats aggregates every recipient."""
        first = self.store.create(ALICE, "a", NOW + timedelta(minutes=1), now=NOW)
        self.store.create(ALICE, "b", NOW + timedelta(hours=1), now=NOW)
        self.store.create(BOB, "c", NOW + timedelta(hours=1), now=NOW)
        tick = NOW + timedelta(minutes=1)
        self.store.claim_due(tick, GRACE)
        self.store.complete_delivery(first.id, now=tick)

        stats = self.store.stats()

        self.assertEqual(stats.total, 3)
        self.assertEqual(stats.active, 2)
        self.assertEqual(stats.sent, 1)
        self.assertEqual(stats.recipient_count, 2)

    def test_cleanup_removes_old_finished_reminders(self) -> None:
        """Test cleanup removes resolved reminders older than retention."""
        old = self.store.create(ALICE, "old", NOW + timedelta(hours=1), now=NOW)
        self.store.cancel(ALICE, old.id, now=NOW)

        removed = self.store.cleanup(timedelta(days=30), now=NOW + timedelta(days=31))

        self.assertEqual(removed, 1)
        self.assertEqual(self.store.stats().recipient_count, 0)

    def test_cleanup_keeps_recent_finished_reminders(self) -> None:
        """Test resolved reminders inside the retention window are kept."""
        recent = self.store.create(ALICE, "recent", NOW + timedelta(hours=1), now=NOW)
        self.store.cancel(ALICE, recent.id, now=NOW)

        self.assertEqual(self.store.cleanup(timedelta(days=30), now=NOW + timedelta(days=2)), 0)

    def test_cleanup_never_removes_active_reminders(self) -> None:
        """Test active reminders survive cleanup regardless of age."""
        self.store.create(ALICE, "ancient", NOW + timedelta(hours=1), now=NOW)

        removed = self.store.cleanup(timedelta(days=1), now=NOW + timedelta(days=365))

        self.assertEqual(removed, 0)
        self.assertEqual(len(self.store.list(ALICE)), 1)


if __name__ == "__main__":
    unittest.main()
