"""Configuration for the assistant using pydantic-settings."""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.ai.bedrock_client import VALID_MODEL_OPTIONS
from src.paths import ENV_FILE


class AssistantConfig(BaseSettings):
    """Configuration for message routing, reminders and rate limits.

    All settings are loaded from environment variables with the ASSISTANT_ prefix.

    :param chat_model: Bedrock model alias for text generation.
    :param public_base_url: Externally reachable URL of this service (for media links).
    :param default_timezone: IANA zone used for reminders set over chat.
    :param history_max_exchanges: Conversation exchanges kept per recipient.
    :param history_max_idle_hours: Idle hours after which a conversation is forgotten.
    :param reminder_poll_interval_seconds: Seconds between dispatcher ticks.
    :param reminder_grace_window_seconds: Maximum lateness for delivering a reminder.
    :param reminder_retention_days: Days finished reminders are kept.
    :param reminder_cleanup_interval_seconds: Seconds between retention cleanups.
    :param run_reminder_poller: Start the in-process poller with the API.
    :param api_rate_limit_per_minute: Requests per minute per client IP.
    :param strict_rate_limit_per_minute: Expensive admin requests per minute per IP.
    :param message_rate_limit_per_minute: Inbound messages per minute per sender.
    :param image_rate_limit_per_day: Generated images per day per sender.
    """

    model_config = SettingsConfigDict(
        env_prefix="ASSISTANT_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    chat_model: str = Field(default="haiku", description="Bedrock model alias")
    public_base_url: str = Field(
        default="http://localhost:8000",
        description="Externally reachable URL of this service",
    )
    default_timezone: str = Field(default="UTC", description="Timezone for chat reminders")
    history_max_exchanges: int = Field(default=10, ge=1, le=100)
    history_max_idle_hours: int = Field(default=24, ge=1, le=24 * 30)
    reminder_poll_interval_seconds: int = Field(default=60, ge=1, le=3600)
    reminder_grace_window_seconds: int = Field(default=60, ge=0, le=24 * 3600)
    reminder_retention_days: int = Field(default=30, ge=1, le=365)
    reminder_cleanup_interval_seconds: int = Field(default=3600, ge=60, le=24 * 3600)
    run_reminder_poller: bool = Field(default=True)
    api_rate_limit_per_minute: int = Field(default=100, ge=1)
    strict_rate_limit_per_minute: int = Field(default=10, ge=1)
    message_rate_limit_per_minute: int = Field(default=10, ge=1)
    image_rate_limit_per_day: int = Field(default=50, ge=1)

    @field_validator("chat_model")
    @classmethod
    def validate_chat_model(cls, v: str) -> str:
        """Validate that the chat model is a known alias.

        :param v: Model alias from environment.
        :returns: The lower-cased alias.
        :raises ValueError: If the alias is unknown.
        """
        if v.lower() not in VALID_MODEL_OPTIONS:
            valid_options = ", ".join(sorted(VALID_MODEL_OPTIONS))
            raise ValueError(f"Invalid chat model '{v}'. Must be one of: {valid_options}")
        return v.lower()

    @property
    def poll_interval(self) -> timedelta:
        """Get the dispatcher tick interval."""
        return timedelta(seconds=self.reminder_poll_interval_seconds)

    @property
    def grace_window(self) -> timedelta:
        """Get the reminder grace window."""
        return timedelta(seconds=self.reminder_grace_window_seconds)

    @property
    def retention(self) -> timedelta:
        """Get the retention window for finished reminders."""
        return timedelta(days=self.reminder_retention_days)

    @property
    def cleanup_interval(self) -> timedelta:
        """Get the retention cleanup interval."""
        return timedelta(seconds=self.reminder_cleanup_interval_seconds)

    @property
    def history_max_idle(self) -> timedelta:
        """Get the idle time after which a conversation is forgotten."""
        return timedelta(hours=self.history_max_idle_hours)


@lru_cache
def get_assistant_settings() -> AssistantConfig:
    """Get cached assistant settings.

    Settings are loaded once and cached for the lifetime of the process.

    :returns: Configured AssistantConfig instance.
    """
    return AssistantConfig()
