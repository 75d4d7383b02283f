"""Per-recipient conversation history for chat replies."""

import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from src.ai.models import ChatRole, ChatTurn

logger = logging.getLogger(__name__)

DEFAULT_MAX_EXCHANGES = 10
DEFAULT_MAX_IDLE = timedelta(hours=24)


@dataclass
class _History:
    turns: list[ChatTurn] = field(default_factory=list)
    last_active: datetime = field(default_factory=lambda: datetime.now(UTC))


class ConversationMemory:
    """Capped chat history keyed by recipient.

    Only the most recent exchanges (one user turn plus one assistant turn each)
    are kept. Conversations idle for longer than ``max_idle`` are forgotten.
    """

    def __init__(
        self,
        max_exchanges: int = DEFAULT_MAX_EXCHANGES,
        max_idle: timedelta = DEFAULT_MAX_IDLE,
    ) -> None:
        """Initialise the memory.

        :param max_exchanges: Exchanges kept per recipient.
        :param max_idle: Idle time after which a history is dropped.
        """
        self._max_turns = max_exchanges * 2
        self._max_idle = max_idle
        self._histories: dict[str, _History] = {}
        self._lock = threading.RLock()

    def history(self, recipient: str, now: datetime | None = None) -> list[ChatTurn]:
        """Get a recipient's stored turns, oldest first.

        :param recipient: Recipient key.
        :param now: Current time (defaults to now).
        :returns: Copy of the stored turns.
        """
        if now is None:
            now = datetime.now(UTC)

        with self._lock:
            history = self._active_history(recipient, now)
            return list(history.turns) if history else []

    def build_turns(
        self,
        recipient: str,
        message: str,
        now: datetime | None = None,
    ) -> list[ChatTurn]:
        """Build the turns to send for a new user message.

        :param recipient: Recipient key.
        :param message: The new user message.
        :param now: Current time (defaults to now).
        :returns: Stored history followed by the new user turn.
        """
        return [*self.history(recipient, now), ChatTurn(role=ChatRole.USER, content=message)]

    def record_exchange(
        self,
        recipient: str,
        user_message: str,
        assistant_reply: str,
        now: datetime | None = None,
    ) -> None:
        """Append a completed exchange, dropping the oldest beyond the cap.

        :param recipient: Recipient key.
        :param user_message: What the user said.
        :param assistant_reply: What the assistant replied.
        :param now: Current time (defaults to now).
        """
        if now is None:
            now = datetime.now(UTC)

        with self._lock:
            history = self._active_history(recipient, now)
            if history is None:
                history = _History(last_active=now)
                self._histories[recipient] = history

            history.turns.append(ChatTurn(role=ChatRole.USER, content=user_message))
            history.turns.append(ChatTurn(role=ChatRole.ASSISTANT, content=assistant_reply))
            if len(history.turns) > self._max_turns:
                del history.turns[: len(history.turns) - self._max_turns]
            history.last_active = now

    def clear(self, recipient: str) -> bool:
        """Forget a recipient's conversation.

        :param recipient: Recipient key.
        :returns: True if there was a history to clear.
        """
        with self._lock:
            removed = self._histories.pop(recipient, None) is not None

        if removed:
            logger.info(f"Conversation history cleared for recipient {recipient}")
        return removed

    def cleanup(self, now: datetime | None = None) -> int:
        """Drop every conversation idle for longer than the limit.

        :param now: Current time (defaults to now).
        :returns: Number of conversations dropped.
        """
        if now is None:
            now = datetime.now(UTC)

        with self._lock:
            expired = [
                recipient
                for recipient, history in self._histories.items()
                if now - history.last_active > self._max_idle
            ]
            for recipient in expired:
                del self._histories[recipient]

        if expired:
            logger.info(f"Cleaned up {len(expired)} idle conversations")
        return len(expired)

    def __len__(self) -> int:
        """Return the number of recipients with a history."""
        with self._lock:
            return len(self._histories)

    def _active_history(self, recipient: str, now: datetime) -> _History | None:
        history = self._histories.get(recipient)
        if history is not None and now - history.last_active > self._max_idle:
            del self._histories[recipient]
            return None
        return history
