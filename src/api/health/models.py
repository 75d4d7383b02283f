"""Pydantic models for health check endpoints."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., description="'healthy', or 'starting' before services are built")
    version: str = Field(..., description="Application version")
    uptime_seconds: float = Field(..., description="Seconds since the service started")
    reminder_poller: bool = Field(..., description="Whether the in-process poller is running")
