"""Shared DTOs for the Support Chat API."""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class BaseDTO(BaseModel):
    """Base DTO with common configuration."""

    class Config:
        from_attributes = True
        populate_by_name = True


class HealthCheckResponse(BaseDTO):
    """Health check response DTO."""
    status: str = Field(default="ok", description="Service status")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ErrorResponse(BaseDTO):
    """Error response DTO shared by every failing endpoint."""
    error: str = Field(description="Human readable error message")
    code: str = Field(description="Machine readable error code")
    stack: Optional[str] = Field(default=None, description="Traceback (development only)")
