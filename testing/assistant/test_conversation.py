"""Tests for per-recipient conversation memory."""

import unittest
from datetime import UTC, datetime, timedelta

from src.ai.models import ChatRole, ChatTurn
from src.assistant.conversation import ConversationMemory

NOW = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)


class TestConversationMemory(unittest.TestCase):
    """Tests for ConversationMemory."""

    def setUp(self) -> None:
        """Set up memory with a small cap."""
        self.memory = ConversationMemory(max_exchanges=2, max_idle=timedelta(hours=1))

    def test_build_turns_appends_new_message(self) -> None:
        """Test the new user message follows the stored history."""
        self.memory.record_exchange("alice", "hi", "hello!", now=NOW)

        turns = self.memory.build_turns("alice", "how are you?", now=NOW)

        self.assertEqual(
            turns,
            [
                ChatTurn(role=ChatRole.USER, content="hi"),
                ChatTurn(role=ChatRole.ASSISTANT, content="hello!"),
                ChatTurn(role=ChatRole.USER, content="how are you?"),
            ],
        )

    def test_history_never_exceeds_cap(self) -> None:
        """Test the oldest exchanges are dropped beyond the cap."""
        for index in range(5):
            self.memory.record_exchange("alice", f"q{index}", f"a{index}", now=NOW)

        history = self.memory.history("alice", now=NOW)

        self.assertEqual(len(history), 4)
        self.assertEqual([turn.content for turn in history], ["q3", "a3", "q4", "a4"])

    def test_clear_only_affects_one_recipient(self) -> None:
        """Test clearing one history leaves others intact."""
        self.memory.record_exchange("alice", "hi", "hello", now=NOW)
        self.memory.record_exchange("bob", "yo", "hey", now=NOW)

        self.assertTrue(self.memory.clear("alice"))

        self.assertEqual(self.memory.history("alice", now=NOW), [])
        self.assertEqual(len(self.memory.history("bob", now=NOW)), 2)
        self.assertFalse(self.memory.clear("alice"))

    def test_idle_history_is_forgotten(self) -> None:
        """Test histories idle past the limit are not reused."""
        self.memory.record_exchange("alice", "hi", "hello", now=NOW)

        later = NOW + timedelta(hours=2)

        self.assertEqual(self.memory.history("alice", now=later), [])
        self.assertEqual(
            self.memory.build_turns("alice", "again", now=later),
            [ChatTurn(role=ChatRole.USER, content="again")],
        )

    def test_cleanup_drops_idle_histories(self) -> None:
        """Test cleanup removes idle conversations only."""
        self.memory.record_exchange("alice", "hi", "hello", now=NOW)
        self.memory.record_exchange("bob", "yo", "hey", now=NOW + timedelta(minutes=90))

        removed = self.memory.cleanup(now=NOW + timedelta(minutes=100))

        self.assertEqual(removed, 1)
        self.assertEqual(len(self.memory), 1)

    def test_history_returns_copy(self) -> None:
        """Test callers cannot mutate stored history."""
        self.memory.record_exchange("alice", "hi", "hello", now=NOW)

        self.memory.history("alice", now=NOW).clear()

        self.assertEqual(len(self.memory.history("alice", now=NOW)), 2)


if __name__ == "__main__":
    unittest.main()
