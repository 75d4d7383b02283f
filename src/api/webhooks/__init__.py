"""Inbound webhook endpoints."""

from src.api.webhooks.router import router

__all__ = ["router"]
