"""SendPulse WhatsApp webhook."""

from src.api.webhooks.whatsapp.endpoints import router

__all__ = ["router"]
