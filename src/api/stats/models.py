"""Pydantic models for the stats endpoint."""

from datetime import datetime

from pydantic import BaseModel, Field


class ReminderStatsResponse(BaseModel):
    """Reminder store counts."""

    total: int = Field(..., description="All stored reminders")
    active: int = Field(..., description="Reminders waiting to be delivered")
    sent: int = Field(..., description="Delivered reminders")
    recipient_count: int = Field(..., description="Recipients with at least one reminder")


class PollerStatsResponse(BaseModel):
    """Reminder poller status."""

    running: bool = Field(..., description="Whether the internal poller is running")
    ticks: int = Field(..., description="Ticks run since startup")
    last_tick_at: datetime | None = Field(None, description="Time of the last tick")


class StatsResponse(BaseModel):
    """Response model for service statistics."""

    reminders: ReminderStatsResponse
    poller: PollerStatsResponse
    conversations: int = Field(..., description="Recipients with conversation history")
    media_items: int = Field(..., description="Generated images held in memory")
    uptime_seconds: float = Field(..., description="Seconds since the service started")
