"""Pure text classification for inbound messages.

Nothing here performs I/O: commands are parsed, free text is classified into
an intent and reminder requests are split into message and time.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from src.reminders.exceptions import UnrecognizedReminderFormatError
from src.reminders.parser import parse_time_expression

# Any text starting with "/" is a command attempt
# Captures: group 1 = command name, group 2 = optional args (may be None)
COMMAND_PATTERN = re.compile(r"^/(\S*)(?:\s+(.*))?$", re.DOTALL)

IMAGE_PATTERN = re.compile(r"\b(?:generate image|create image|draw|picture|image of)\b")
REMINDER_PATTERN = re.compile(r"\b(?:remind me|reminder|schedule)\b|\bremind\b.*\bto\b")
QUESTION_START_PATTERN = re.compile(r"^(?:what|how|why|when|where|who|which)\b")
GREETING_PATTERN = re.compile(
    r"\b(?:hello|hi|hey|good morning|good afternoon|good evening)\b"
)

# Separators between reminder message and time, in priority order
REMINDER_SEPARATORS = ("at", "in", "on")

# Only the first trigger phrase is removed, and only as whole words
REMINDER_TRIGGER_PATTERN = re.compile(r"\b(?:remind me to|remind me|reminder)\b", re.IGNORECASE)

# A day word at the end of the message part belongs to the time ("call mom tomorrow at 3pm")
TRAILING_DAY_PATTERN = re.compile(r"\s*\b(today|tomorrow)$", re.IGNORECASE)

IMAGE_REQUEST_PREFIX = re.compile(
    r"^(?:please\s+)?"
    r"(?:(?:generate|create|make|draw)(?:\s+|$))?"
    r"(?:me\s+)?"
    r"(?:(?:an?|the)\s+)?"
    r"(?:(?:image|picture|drawing)(?:\s+|$))?"
    r"(?:of\s+)?",
    re.IGNORECASE,
)

TRANSLATE_PATTERN = re.compile(r"^(.+?)\s+to\s+(.+)$", re.IGNORECASE | re.DOTALL)


class Command(StrEnum):
    """Explicit slash commands."""

    HELP = "help"
    START = "start"
    IMAGE = "image"
    REMIND = "remind"
    REMINDERS = "reminders"
    CANCEL = "cancel"
    CHAT = "chat"
    TRANSLATE = "translate"
    SUMMARIZE = "summarize"
    JOKE = "joke"
    STORY = "story"
    CLEAR = "clear"
    STATS = "stats"


class Intent(StrEnum):
    """Purpose of a free-text message."""

    IMAGE = "image"
    REMINDER = "reminder"
    QUESTION = "question"
    GREETING = "greeting"
    CHAT = "chat"


@dataclass
class ParsedCommand:
    """Parsed slash command."""

    name: str
    args: str | None
    command: Command | None = None


@dataclass(frozen=True)
class ReminderRequest:
    """Reminder message and due time extracted from free text."""

    text: str
    due_at: datetime


def parse_command(text: str) -> ParsedCommand | None:
    """Parse a slash command from message text.

    Unknown command names still parse; ``command`` is None for them.

    :param text: The message text to parse.
    :returns: ParsedCommand if text starts with "/", None otherwise.
    """
    match = COMMAND_PATTERN.match(text.strip())
    if not match:
        return None

    name = match.group(1).lower()
    args = match.group(2).strip() if match.group(2) else None
    try:
        command = Command(name)
    except ValueError:
        command = None
    return ParsedCommand(name=name, args=args or None, command=command)


def classify_intent(text: str) -> Intent:
    """Classify free text into an intent.

    Rules are checked in priority order and the first match wins: image,
    reminder, question, greeting, then chat.

    :param text: Message text.
    :returns: The detected intent.
    """
    lowered = text.strip().lower()

    if IMAGE_PATTERN.search(lowered):
        return Intent.IMAGE
    if REMINDER_PATTERN.search(lowered):
        return Intent.REMINDER
    if QUESTION_START_PATTERN.match(lowered) or "?" in lowered:
        return Intent.QUESTION
    if GREETING_PATTERN.search(lowered):
        return Intent.GREETING
    return Intent.CHAT


def extract_reminder(text: str, now: datetime) -> ReminderRequest:
    """Split free text into a reminder message and due time.

    The text is split on the first " at ", else " in ", else " on ". The left
    side, with trigger phrases like "remind me to" removed, is the message; the
    separator and right side are parsed as the time.

    :param text: Free text such as "remind me to call mom at 3pm".
    :param now: Reference time for parsing.
    :returns: The extracted request.
    :raises UnrecognizedReminderFormatError: If no separator or message is found.
    :raises UnparseableTimeError: If the time part cannot be parsed.
    """
    for separator in REMINDER_SEPARATORS:
        match = re.search(rf"\s+{separator}\s+", text, re.IGNORECASE)
        if match:
            break
    else:
        raise UnrecognizedReminderFormatError(text)

    message = REMINDER_TRIGGER_PATTERN.sub("", text[: match.start()], count=1).strip()
    time_fragment = f"{separator} {text[match.end() :].strip()}"

    day_match = TRAILING_DAY_PATTERN.search(message)
    if day_match:
        time_fragment = f"{day_match.group(1).lower()} {time_fragment}"
        message = message[: day_match.start()].strip()

    if not message:
        raise UnrecognizedReminderFormatError(text)

    return ReminderRequest(text=message, due_at=parse_time_expression(time_fragment, now))


def extract_image_prompt(text: str) -> str:
    """Strip request phrasing from a natural language image request.

    :param text: Text such as "generate an image of a red fox".
    :returns: The description ("a red fox"), possibly empty.
    """
    return IMAGE_REQUEST_PREFIX.sub("", text.strip(), count=1).strip()


def parse_translate_args(args: str) -> tuple[str, str] | None:
    """Split "/translate" arguments into text and target language.

    :param args: Arguments such as "Hello world to Spanish".
    :returns: (text, language) or None if the format does not match.
    """
    match = TRANSLATE_PATTERN.match(args.strip())
    if not match:
        return None
    return match.group(1).strip(), match.group(2).strip()
