"""WhatsApp assistant: command routing, intents, conversation memory and rate limits."""

from src.assistant.conversation import ConversationMemory
from src.assistant.intents import (
    Command,
    Intent,
    ParsedCommand,
    ReminderRequest,
    classify_intent,
    extract_image_prompt,
    extract_reminder,
    parse_command,
    parse_translate_args,
)
from src.assistant.rate_limit import OperationClass, RateGovernor, RateLimit
from src.assistant.router import CommandRouter
from src.assistant.services import AssistantServices, build_services
from src.assistant.utils.config import AssistantConfig, get_assistant_settings

__all__ = [
    "AssistantConfig",
    "AssistantServices",
    "Command",
    "CommandRouter",
    "ConversationMemory",
    "Intent",
    "OperationClass",
    "ParsedCommand",
    "RateGovernor",
    "RateLimit",
    "ReminderRequest",
    "build_services",
    "classify_intent",
    "extract_image_prompt",
    "extract_reminder",
    "get_assistant_settings",
    "parse_command",
    "parse_translate_args",
]
