"""Base classes for messaging platforms.

Provides the abstract outbound interface used by the router and the reminder
dispatcher, so tests and other channels can stand in for WhatsApp without
changing call sites.
"""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Abstract base class for outbound message channels.

    Implementations raise a ProviderUnavailableError subclass when delivery
    fails; callers decide whether the failure is fatal.
    """

    @abstractmethod
    async def send_message(self, recipient: str, text: str) -> None:
        """Send a text message.

        :param recipient: Recipient key (phone number).
        :param text: Message text.
        """
        ...

    @abstractmethod
    async def send_media(self, recipient: str, media_url: str, caption: str = "") -> None:
        """Send an image by URL.

        :param recipient: Recipient key (phone number).
        :param media_url: Publicly reachable URL of the image.
        :param caption: Optional caption shown with the image.
        """
        ...

    async def mark_as_read(self, message_id: str) -> None:  # noqa: B027
        """Mark an inbound message as read.

        Optional for platforms without read receipts.

        :param message_id: Platform message id.
        """
