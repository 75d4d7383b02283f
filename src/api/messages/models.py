"""Pydantic models for message endpoints."""

from pydantic import BaseModel, Field


class SendMessageRequest(BaseModel):
    """Request model for sending a text message."""

    recipient: str = Field(..., min_length=1, description="Recipient phone number")
    text: str = Field(..., min_length=1, max_length=4096, description="Message text")


class SendMessageResponse(BaseModel):
    """Response model for a sent message."""

    status: str = Field(..., description="Delivery status")
    recipient: str = Field(..., description="Recipient phone number")
