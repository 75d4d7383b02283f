"""Configuration for Stability AI integration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.paths import ENV_FILE


class StabilityConfig(BaseSettings):
    """Configuration for the Stability AI image API.

    All settings are loaded from environment variables with the STABILITY_ prefix.

    :param api_key: Stability AI API key.
    :param base_url: Stability AI API base URL.
    :param engine: Generation engine id.
    :param request_timeout: Timeout in seconds for a generation request.
    :param width: Image width in pixels.
    :param height: Image height in pixels.
    :param steps: Diffusion steps.
    :param cfg_scale: Prompt adherence.
    :param negative_prompt: Qualities to steer away from.
    """

    model_config = SettingsConfigDict(
        env_prefix="STABILITY_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_key: str = Field(..., description="Stability AI API key")
    base_url: str = Field(
        default="https://api.stability.ai",
        description="Stability AI API base URL",
    )
    engine: str = Field(
        default="stable-diffusion-xl-1024-v1-0",
        description="Generation engine id",
    )
    request_timeout: int = Field(
        default=120,
        ge=1,
        le=600,
        description="Timeout in seconds for a generation request",
    )
    width: int = Field(default=1024, ge=64, le=2048, description="Image width in pixels")
    height: int = Field(default=1024, ge=64, le=2048, description="Image height in pixels")
    steps: int = Field(default=30, ge=10, le=50, description="Diffusion steps")
    cfg_scale: float = Field(default=7, ge=0, le=35, description="Prompt adherence")
    negative_prompt: str = Field(
        default="blurry, bad quality, distorted, deformed",
        description="Qualities to steer away from",
    )


@lru_cache
def get_stability_settings() -> StabilityConfig:
    """Get cached Stability settings.

    Settings are loaded once and cached for the lifetime of the process.

    :returns: Configured StabilityConfig instance.
    """
    return StabilityConfig()  # type: ignore[call-arg]
