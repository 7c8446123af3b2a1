"""
Schedule request/response schemas.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ScheduleConfigRequest(BaseModel):
    """Recurrence config submitted for validation."""

    config: Dict[str, Any]


class ScheduleValidationResponse(BaseModel):
    """Result of config-save time validation."""

    valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)


class WindowRequest(BaseModel):
    """Window preview request."""

    config: Dict[str, Any]
    now: Optional[datetime] = Field(None, description="Reference time; defaults to the server clock")
    anchor: Optional[datetime] = Field(None, description="Start of the cycle series")


class UpcomingWindowsRequest(WindowRequest):
    """Upcoming windows request."""

    count: int = Field(4, ge=1, le=52)


class SchedulePreset(BaseModel):
    """Preset recurrence config."""

    id: str
    name: str
    description: str
    config: Dict[str, Any]
