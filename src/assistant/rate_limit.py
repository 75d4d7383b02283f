"""In-memory rate limiting keyed by client identity and operation class."""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from src.exceptions import RateLimitedError

if TYPE_CHECKING:
    from src.assistant.utils.config import AssistantConfig

logger = logging.getLogger(__name__)

# Expired windows are pruned once this many keys are tracked
PRUNE_THRESHOLD = 10_000

SECONDS_PER_MINUTE = 60
SECONDS_PER_DAY = 24 * 60 * 60


class OperationClass(StrEnum):
    """Kinds of operation with separate limits."""

    API = "api"  # Any HTTP request, per client IP
    STRICT = "strict"  # Expensive admin requests, per client IP
    MESSAGE = "message"  # Inbound chat messages, per sender
    IMAGE = "image"  # Image generations, per sender


@dataclass(frozen=True)
class RateLimit:
    """Allowed number of operations per window."""

    points: int
    window_seconds: float


@dataclass
class _Window:
    started_at: float
    used: int = 0


@dataclass(frozen=True)
class RateLimitStatus:
    """Remaining allowance for a key."""

    remaining: int
    total: int
    reset_in_seconds: float


class RateGovernor:
    """Fixed-window counters per (operation class, key).

    Each window starts with the first consumption and allows ``points``
    operations until it has elapsed.
    """

    def __init__(
        self,
        limits: dict[OperationClass, RateLimit],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialise the governor.

        :param limits: Limit per operation class; classes without one are unlimited.
        :param clock: Monotonic clock in seconds.
        """
        self._limits = dict(limits)
        self._clock = clock
        self._windows: dict[tuple[OperationClass, str], _Window] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: AssistantConfig) -> RateGovernor:
        """Create a governor with the configured limits.

        :param config: Assistant settings.
        :returns: A new governor.
        """
        return cls(
            {
                OperationClass.API: RateLimit(config.api_rate_limit_per_minute, SECONDS_PER_MINUTE),
                OperationClass.STRICT: RateLimit(
                    config.strict_rate_limit_per_minute, SECONDS_PER_MINUTE
                ),
                OperationClass.MESSAGE: RateLimit(
                    config.message_rate_limit_per_minute, SECONDS_PER_MINUTE
                ),
                OperationClass.IMAGE: RateLimit(config.image_rate_limit_per_day, SECONDS_PER_DAY),
            }
        )

    def consume(self, key: str, operation: OperationClass) -> None:
        """Use one point of a key's allowance.

        :param key: Client identity (IP or phone number).
        :param operation: Operation class being performed.
        :raises RateLimitedError: If the allowance for the window is used up.
        """
        limit = self._limits.get(operation)
        if limit is None:
            return

        now = self._clock()
        with self._lock:
            window = self._current_window(operation, key, limit, now)
            if window.used >= limit.points:
                retry_after = window.started_at + limit.window_seconds - now
                logger.warning(
                    f"Rate limit exceeded: operation={operation}, key={key}, "
                    f"retry_after={retry_after:.0f}s"
                )
                raise RateLimitedError(key, operation.value, max(1, math.ceil(retry_after)))
            window.used += 1

            if len(self._windows) > PRUNE_THRESHOLD:
                self._prune(now)

    def status(self, key: str, operation: OperationClass) -> RateLimitStatus | None:
        """Get the remaining allowance of a key without consuming.

        :param key: Client identity.
        :param operation: Operation class.
        :returns: The status, or None if the class is unlimited.
        """
        limit = self._limits.get(operation)
        if limit is None:
            return None

        now = self._clock()
        with self._lock:
            window = self._windows.get((operation, key))
            if window is None or now - window.started_at >= limit.window_seconds:
                return RateLimitStatus(limit.points, limit.points, limit.window_seconds)
            return RateLimitStatus(
                remaining=max(0, limit.points - window.used),
                total=limit.points,
                reset_in_seconds=window.started_at + limit.window_seconds - now,
            )

    def reset(self) -> None:
        """Forget every counter."""
        with self._lock:
            self._windows.clear()

    def _current_window(
        self,
        operation: OperationClass,
        key: str,
        limit: RateLimit,
        now: float,
    ) -> _Window:
        window = self._windows.get((operation, key))
        if window is None or now - window.started_at >= limit.window_seconds:
            window = _Window(started_at=now)
            self._windows[(operation, key)] = window
        return window

    def _prune(self, now: float) -> None:
        expired = [
            window_key
            for window_key, window in self._windows.items()
            if now - window.started_at >= self._limits[window_key[0]].window_seconds
        ]
        for window_key in expired:
            del self._windows[window_key]
