"""Pydantic models shared by all API endpoints."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every error response."""

    detail: str = Field(..., description="Error description")


class RateLimitedResponse(ErrorResponse):
    """Body of a 429 response. The same delay is sent in the Retry-After header."""

    retry_after_seconds: int = Field(..., description="Seconds until the request may be retried")
