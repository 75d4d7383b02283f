"""AI provider utilities."""

from src.ai.utils.config import StabilityConfig, get_stability_settings

__all__ = [
    "StabilityConfig",
    "get_stability_settings",
]
