"""Service statistics endpoint."""

from src.api.stats.endpoints import router

__all__ = ["router"]
