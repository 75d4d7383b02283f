"""Pydantic models for SendPulse WhatsApp webhooks."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from dateutil.parser import isoparse
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Timestamps above this are treated as epoch milliseconds
_EPOCH_MILLIS_THRESHOLD = 10**11

DEFAULT_CONTACT_NAME = "Unknown"


class SendPulseContact(BaseModel):
    """Contact information attached to a webhook event."""

    model_config = ConfigDict(extra="ignore")

    phone: str | None = None
    name: str | None = None


class SendPulseMessage(BaseModel):
    """Message body attached to a webhook event."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    text: str | None = None
    type: str = "text"


class SendPulseWebhookEvent(BaseModel):
    """A single inbound event from SendPulse.

    Fields may arrive either nested (``contact.phone``, ``message.text``) or flat
    (``from``, ``text``); nested values win.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    contact: SendPulseContact | None = None
    message: SendPulseMessage | None = None
    from_phone: str | None = Field(default=None, alias="from")
    text: str | None = None
    id: str | None = None
    timestamp: float | str | None = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _drop_unusable_timestamp(cls, value: Any) -> Any:
        """Treat timestamps of any other type as missing rather than rejecting the event."""
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            return None
        return value

    @property
    def sender(self) -> str | None:
        """Get the sender phone number."""
        if self.contact and self.contact.phone:
            return self.contact.phone
        return self.from_phone

    @property
    def message_text(self) -> str | None:
        """Get the message text."""
        if self.message and self.message.text is not None:
            return self.message.text
        return self.text

    @property
    def message_id(self) -> str | None:
        """Get the platform message id."""
        if self.message and self.message.id:
            return self.message.id
        return self.id

    def received_at(self, now: datetime) -> datetime:
        """Get the event time, falling back to ``now`` when absent or unreadable.

        Numeric timestamps are epoch seconds (or milliseconds), strings may also
        be ISO 8601.

        :param now: Time the webhook was received.
        :returns: Aware datetime of the event.
        """
        if self.timestamp is None:
            return now

        if isinstance(self.timestamp, str):
            try:
                seconds = float(self.timestamp)
            except ValueError:
                return _parse_iso_timestamp(self.timestamp, now)
        else:
            seconds = self.timestamp

        if seconds > _EPOCH_MILLIS_THRESHOLD:
            seconds /= 1000
        try:
            return datetime.fromtimestamp(seconds, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return now


def _parse_iso_timestamp(value: str, now: datetime) -> datetime:
    try:
        parsed = isoparse(value.strip())
    except (ValueError, OverflowError):
        logger.debug(f"Ignoring unreadable webhook timestamp: {value!r}")
        return now
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True)
class InboundMessage:
    """A text message received from a user, independent of the transport."""

    sender: str
    text: str
    message_id: str | None
    timestamp: datetime
    contact_name: str = DEFAULT_CONTACT_NAME


def parse_webhook_payload(payload: Any, now: datetime | None = None) -> list[InboundMessage]:
    """Extract text messages from a webhook payload.

    Accepts a single event object or a list of events. Events that fail
    validation, lack a sender or carry no text are skipped.

    :param payload: Decoded JSON body of the webhook.
    :param now: Time the webhook was received (defaults to now).
    :returns: Inbound messages in payload order.
    """
    if now is None:
        now = datetime.now(UTC)

    events = payload if isinstance(payload, list) else [payload]
    messages: list[InboundMessage] = []

    for raw_event in events:
        if not isinstance(raw_event, dict):
            logger.warning(f"Skipping non-object webhook event: type={type(raw_event).__name__}")
            continue

        try:
            event = SendPulseWebhookEvent.model_validate(raw_event)
        except ValidationError as e:
            logger.warning(f"Skipping malformed webhook event: {e.error_count()} errors")
            continue

        sender = event.sender
        text = event.message_text
        if not sender or not text or not text.strip():
            logger.info("Skipping webhook event without sender or text")
            continue

        contact_name = (event.contact.name if event.contact else None) or DEFAULT_CONTACT_NAME
        messages.append(
            InboundMessage(
                sender=sender,
                text=text.strip(),
                message_id=event.message_id,
                timestamp=event.received_at(now),
                contact_name=contact_name,
            )
        )

    return messages
