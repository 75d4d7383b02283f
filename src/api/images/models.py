"""Pydantic models for image generation endpoints."""

from pydantic import BaseModel, Field


class GenerateImageRequest(BaseModel):
    """Request model for generating an image."""

    prompt: str = Field(..., min_length=1, max_length=2000, description="Image description")
    recipient: str | None = Field(None, description="Phone number to send the image to")
    enhance: bool = Field(False, description="Rewrite the prompt with the text model first")


class GenerateImageResponse(BaseModel):
    """Response model for a generated image."""

    url: str = Field(..., description="Public URL of the generated image")
    prompt: str = Field(..., description="Prompt sent to the image model")
    sent: bool = Field(..., description="Whether the image was sent to the recipient")
