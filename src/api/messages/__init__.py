"""Outbound message endpoints."""

from src.api.messages.endpoints import router

__all__ = ["router"]
