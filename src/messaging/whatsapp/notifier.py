"""Async notifier delivering messages through WhatsApp."""

import asyncio
import logging

from src.messaging.base import Notifier
from src.messaging.whatsapp.client import WhatsAppClient

logger = logging.getLogger(__name__)


class WhatsAppNotifier(Notifier):
    """Notifier backed by the synchronous SendPulse client.

    Each call runs in a worker thread so the event loop is never blocked by
    network I/O.
    """

    def __init__(self, client: WhatsAppClient) -> None:
        """Initialise the notifier.

        :param client: SendPulse WhatsApp client.
        """
        self._client = client

    async def send_message(self, recipient: str, text: str) -> None:
        """Send a text message via WhatsApp."""
        await asyncio.to_thread(self._client.send_message, recipient, text)

    async def send_media(self, recipient: str, media_url: str, caption: str = "") -> None:
        """Send an image via WhatsApp."""
        await asyncio.to_thread(self._client.send_image, recipient, media_url, caption)

    async def mark_as_read(self, message_id: str) -> None:
        """Mark an inbound WhatsApp message as read."""
        await asyncio.to_thread(self._client.mark_as_read, message_id)
