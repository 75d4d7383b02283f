"""Data models shared by the AI providers."""

from dataclasses import dataclass
from enum import StrEnum


class ChatRole(StrEnum):
    """Author of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatTurn:
    """A single message in a conversation."""

    role: ChatRole
    content: str
