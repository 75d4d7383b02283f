"""Image generation endpoints."""

from src.api.images.endpoints import router

__all__ = ["router"]
