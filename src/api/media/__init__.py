"""Public media endpoint."""

from src.api.media.endpoints import router

__all__ = ["router"]
