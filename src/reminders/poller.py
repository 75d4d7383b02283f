"""Background loop driving the reminder dispatcher."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from src.reminders.store import DEFAULT_RETENTION

if TYPE_CHECKING:
    from src.reminders.dispatcher import ReminderDispatcher
    from src.reminders.store import ReminderStore

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = timedelta(seconds=60)
DEFAULT_CLEANUP_INTERVAL = timedelta(hours=1)


class ReminderPoller:
    """Async loop that runs a dispatcher tick on a fixed cadence.

    Every iteration:
    1. Runs one dispatcher tick
    2. Removes old finished reminders once the cleanup interval has passed
    3. Sleeps until the next tick or until stop() is called
    """

    def __init__(
        self,
        dispatcher: ReminderDispatcher,
        store: ReminderStore,
        interval: timedelta = DEFAULT_TICK_INTERVAL,
        cleanup_interval: timedelta = DEFAULT_CLEANUP_INTERVAL,
        retention: timedelta = DEFAULT_RETENTION,
        extra_cleanups: Sequence[Callable[[datetime], int]] = (),
    ) -> None:
        """Initialise the poller.

        :param dispatcher: Dispatcher to tick.
        :param store: Store to clean up.
        :param interval: Time between ticks.
        :param cleanup_interval: Time between retention cleanups.
        :param retention: Age after which finished reminders are removed.
        :param extra_cleanups: Other periodic cleanups run alongside, called with the current time.
        """
        self._dispatcher = dispatcher
        self._store = store
        self._interval = interval
        self._cleanup_interval = cleanup_interval
        self._retention = retention
        self._extra_cleanups = list(extra_cleanups)
        self._stop_event = asyncio.Event()
        self._running = False
        self._last_cleanup: datetime | None = None
        self.last_tick_at: datetime | None = None
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        """Check whether the loop is currently running."""
        return self._running

    async def run(self) -> None:
        """Run the loop until stop() is called or the task is cancelled."""
        self._running = True
        self._stop_event.clear()
        logger.info(
            f"Starting reminder poller: interval={self._interval.total_seconds():.0f}s, "
            f"cleanup_interval={self._cleanup_interval.total_seconds():.0f}s"
        )

        try:
            while not self._stop_event.is_set():
                await self.run_once()
                try:
                    await asyncio.wait_for(
                        self._stop_event.wait(),
                        timeout=self._interval.total_seconds(),
                    )
                except TimeoutError:
                    continue
        except asyncio.CancelledError:
            logger.info("Reminder poller cancelled")
            raise
        finally:
            self._running = False
            logger.info("Reminder poller stopped")

    def stop(self) -> None:
        """Signal the loop to stop after the current iteration."""
        logger.info("Stopping reminder poller...")
        self._stop_event.set()

    async def run_once(self, now: datetime | None = None) -> None:
        """Run a single iteration: one tick plus cleanup when due.

        Errors are logged and swallowed so the loop keeps going.

        :param now: Current time (defaults to now).
        """
        if now is None:
            now = datetime.now(UTC)

        try:
            await self._dispatcher.run_tick(now)
        except Exception as e:
            logger.exception(f"Reminder tick failed: {e}")
        self.last_tick_at = now
        self.ticks += 1

        if self._last_cleanup is None or now - self._last_cleanup >= self._cleanup_interval:
            try:
                self._store.cleanup(self._retention, now=now)
            except Exception as e:
                logger.exception(f"Reminder cleanup failed: {e}")
            for cleanup in self._extra_cleanups:
                try:
                    cleanup(now)
                except Exception as e:
                    logger.exception(f"Periodic cleanup failed: {e}")
            self._last_cleanup = now
