"""WhatsApp integration via the SendPulse API."""

from src.messaging.whatsapp.client import WhatsAppClient, WhatsAppClientError, format_phone
from src.messaging.whatsapp.models import (
    InboundMessage,
    SendPulseContact,
    SendPulseMessage,
    SendPulseWebhookEvent,
    parse_webhook_payload,
)
from src.messaging.whatsapp.notifier import WhatsAppNotifier
from src.messaging.whatsapp.utils.config import WhatsAppConfig, get_whatsapp_settings

__all__ = [
    "InboundMessage",
    "SendPulseContact",
    "SendPulseMessage",
    "SendPulseWebhookEvent",
    "WhatsAppClient",
    "WhatsAppClientError",
    "WhatsAppConfig",
    "WhatsAppNotifier",
    "format_phone",
    "get_whatsapp_settings",
    "parse_webhook_payload",
]
