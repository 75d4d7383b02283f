"""Assistant utilities."""

from src.assistant.utils.config import AssistantConfig, get_assistant_settings

__all__ = [
    "AssistantConfig",
    "get_assistant_settings",
]
