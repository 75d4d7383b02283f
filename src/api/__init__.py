"""HTTP API for the WhatsApp AI assistant."""

from src.api.app import app, create_app

__all__ = ["app", "create_app"]
