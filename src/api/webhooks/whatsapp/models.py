"""Pydantic models for the WhatsApp webhook."""

from enum import StrEnum

from pydantic import BaseModel, Field


class WebhookStatus(StrEnum):
    """Outcome of a webhook delivery."""

    SUCCESS = "success"
    IGNORED = "ignored"
    RATE_LIMITED = "rate_limited"


class WebhookResponse(BaseModel):
    """Acknowledgement returned to SendPulse.

    Always sent with a 200 so the transport does not retry.
    """

    status: WebhookStatus = Field(..., description="Outcome of the delivery")
    processed: int = Field(0, description="Number of messages queued for handling")
