"""WhatsApp utilities."""

from src.messaging.whatsapp.utils.config import WhatsAppConfig, get_whatsapp_settings

__all__ = [
    "WhatsAppConfig",
    "get_whatsapp_settings",
]
