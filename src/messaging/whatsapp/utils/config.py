"""Configuration for WhatsApp (SendPulse) integration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.paths import ENV_FILE


class WhatsAppConfig(BaseSettings):
    """Configuration for the SendPulse WhatsApp API.

    All settings are loaded from environment variables with the SENDPULSE_ prefix.

    :param user_id: SendPulse API client id.
    :param secret: SendPulse API client secret.
    :param base_url: SendPulse API base URL.
    :param request_timeout: Timeout in seconds for each API request.
    :param token_refresh_margin: Seconds before expiry at which the access token is renewed.
    """

    model_config = SettingsConfigDict(
        env_prefix="SENDPULSE_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    user_id: str = Field(..., description="SendPulse API client id")
    secret: str = Field(..., description="SendPulse API client secret")
    base_url: str = Field(
        default="https://api.sendpulse.com",
        description="SendPulse API base URL",
    )
    request_timeout: int = Field(
        default=30,
        ge=1,
        le=120,
        description="Timeout in seconds for each API request",
    )
    token_refresh_margin: int = Field(
        default=60,
        ge=0,
        le=600,
        description="Seconds before expiry at which the access token is renewed",
    )


@lru_cache
def get_whatsapp_settings() -> WhatsAppConfig:
    """Get cached WhatsApp settings.

    Settings are loaded once and cached for the lifetime of the process.

    :returns: Configured WhatsAppConfig instance.
    """
    return WhatsAppConfig()  # type: ignore[call-arg]
