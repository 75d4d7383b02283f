"""Tests for command parsing and intent classification."""

import unittest
from datetime import UTC, datetime, timedelta

from src.assistant.intents import (
    Command,
    Intent,
    classify_intent,
    extract_image_prompt,
    extract_reminder,
    parse_command,
    parse_translate_args,
)
from src.reminders.exceptions import UnparseableTimeError, UnrecognizedReminderFormatError

NOW = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)


class TestParseCommand(unittest.TestCase):
    """Tests for parse_command."""

    def test_command_with_args(self) -> None:
        """Test a command and its arguments are split."""
        parsed = parse_command("/remind Buy groceries at 5pm")

        self.assertIsNotNone(parsed)
        self.assertEqual(parsed.command, Command.REMIND)
        self.assertEqual(parsed.name, "remind")
        self.assertEqual(parsed.args, "Buy groceries at 5pm")

    def test_command_without_args(self) -> None:
        """Test a bare command has no args."""
        parsed = parse_command("/help")

        self.assertEqual(parsed.command, Command.HELP)
        self.assertIsNone(parsed.args)

    def test_command_is_case_insensitive(self) -> None:
        """Test command names are lowercased."""
        self.assertEqual(parse_command("/HELP").command, Command.HELP)

    def test_multiline_args_are_kept(self) -> None:
        """Test arguments may span several lines."""
        parsed = parse_command("/summarize first line\nsecond line")

        self.assertEqual(parsed.args, "first line\nsecond line")

    def test_unknown_command(self) -> None:
        """Test unknown names parse without a Command."""
        parsed = parse_command("/dance now")

        self.assertIsNotNone(parsed)
        self.assertIsNone(parsed.command)
        self.assertEqual(parsed.name, "dance")

    def test_plain_text_is_not_a_command(self) -> None:
        """Test text without a leading slash returns None."""
        self.assertIsNone(parse_command("hello /help"))


class TestClassifyIntent(unittest.TestCase):
    """Tests for classify_intent."""

    def test_image_intent(self) -> None:
        """Test image cues."""
        self.assertEqual(classify_intent("generate image of a cat"), Intent.IMAGE)
        self.assertEqual(classify_intent("Can you draw a dragon"), Intent.IMAGE)

    def test_reminder_intent(self) -> None:
        """Test reminder cues."""
        self.assertEqual(classify_intent("remind me to call mom at 3pm"), Intent.REMINDER)
        self.assertEqual(classify_intent("schedule a call tomorrow"), Intent.REMINDER)
        self.assertEqual(classify_intent("please remind Bob to pay"), Intent.REMINDER)

    def test_question_intent(self) -> None:
        """Test interrogative openers and question marks."""
        self.assertEqual(classify_intent("what is AI?"), Intent.QUESTION)
        self.assertEqual(classify_intent("How does rain form"), Intent.QUESTION)
        self.assertEqual(classify_intent("Is this right?"), Intent.QUESTION)

    def test_greeting_intent(self) -> None:
        """Test greeting cues."""
        self.assertEqual(classify_intent("hello there"), Intent.GREETING)
        self.assertEqual(classify_intent("Good morning!"), Intent.GREETING)

    def test_greeting_needs_word_boundary(self) -> None:
        """Test greeting words inside other words do not count."""
        self.assertEqual(classify_intent("this is nice"), Intent.CHAT)

    def test_default_chat(self) -> None:
        """Test unmatched and empty text falls back to chat."""
        self.assertEqual(classify_intent("I like turtles"), Intent.CHAT)
        self.assertEqual(classify_intent(""), Intent.CHAT)

    def test_image_wins_over_question(self) -> None:
        """Test earlier rules take priority."""
        self.assertEqual(classify_intent("can you create image of a boat?"), Intent.IMAGE)


class TestExtractReminder(unittest.TestCase):
    """Tests for extract_reminder."""

    def test_split_on_at(self) -> None:
        """Test the trigger phrase is stripped and the time parsed."""
        request = extract_reminder("remind me to call mom at 3pm", NOW)

        self.assertEqual(request.text, "call mom")
        self.assertEqual(request.due_at, datetime(2024, 1, 1, 15, 0, tzinfo=UTC))

    def test_trigger_removed_only_as_whole_words(self) -> None:
        """Test words that merely contain a trigger phrase are kept."""
        request = extract_reminder("remind me to email the reminders team at 3pm", NOW)

        self.assertEqual(request.text, "email the reminders team")

    def test_only_first_trigger_removed(self) -> None:
        """Test a trigger phrase inside the message itself survives."""
        request = extract_reminder("remind me to read the reminder email at 3pm", NOW)

        self.assertEqual(request.text, "read the reminder email")

    def test_split_on_in(self) -> None:
        """Test relative times after 'in'."""
        request = extract_reminder("Meeting in 2 hours", NOW)

        self.assertEqual(request.text, "Meeting")
        self.assertEqual(request.due_at, NOW + timedelta(hours=2))

    def test_split_on_on(self) -> None:
        """Test calendar dates after 'on'."""
        request = extract_reminder("Pay rent on 02/01/2024", NOW)

        self.assertEqual(request.text, "Pay rent")
        self.assertEqual(request.due_at, datetime(2024, 2, 1, 0, 0, tzinfo=UTC))

    def test_trailing_day_moves_to_time(self) -> None:
        """Test 'tomorrow' before the separator belongs to the time."""
        request = extract_reminder("Call doctor tomorrow at 10am", NOW)

        self.assertEqual(request.text, "Call doctor")
        self.assertEqual(request.due_at, datetime(2024, 1, 2, 10, 0, tzinfo=UTC))

    def test_at_takes_priority_over_in(self) -> None:
        """Test ' at ' is preferred even when ' in ' appears first."""
        request = extract_reminder("Lunch in town at 1pm", NOW)

        self.assertEqual(request.text, "Lunch in town")
        self.assertEqual(request.due_at, datetime(2024, 1, 1, 13, 0, tzinfo=UTC))

    def test_no_separator_raises(self) -> None:
        """Test text without a separator is not guessed."""
        with self.assertRaises(UnrecognizedReminderFormatError):
            extract_reminder("remind me to call mom", NOW)

    def test_empty_message_raises(self) -> None:
        """Test a time without a message is rejected."""
        with self.assertRaises(UnrecognizedReminderFormatError):
            extract_reminder("remind me at 3pm", NOW)

    def test_bad_time_raises(self) -> None:
        """Test an unparseable time part raises."""
        with self.assertRaises(UnparseableTimeError):
            extract_reminder("water plants at teatime", NOW)


class TestExtractImagePrompt(unittest.TestCase):
    """Tests for extract_image_prompt."""

    def test_strips_request_phrasing(self) -> None:
        """Test the request words are removed."""
        self.assertEqual(extract_image_prompt("generate an image of a red fox"), "a red fox")
        self.assertEqual(extract_image_prompt("Please draw me a castle"), "castle")

    def test_request_without_description(self) -> None:
        """Test a bare request leaves an empty description."""
        self.assertEqual(extract_image_prompt("create image"), "")


class TestParseTranslateArgs(unittest.TestCase):
    """Tests for parse_translate_args."""

    def test_text_and_language(self) -> None:
        """Test the first ' to ' separates text from language."""
        self.assertEqual(parse_translate_args("Hello world to Spanish"), ("Hello world", "Spanish"))

    def test_missing_language(self) -> None:
        """Test text without ' to ' returns None."""
        self.assertIsNone(parse_translate_args("Hello world"))


if __name__ == "__main__":
    unittest.main()
