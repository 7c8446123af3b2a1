"""
Pydantic models for check-in schedules.

Schedule configs are coach-authored and deliberately permissive here:
structural rules are enforced by ScheduleValidator so that every problem
is reported as an InvalidScheduleConfig with per-field messages.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class OpenKind(str, Enum):
    SPECIFIC_DAY = "specific_day"
    NTH_DAY = "nth_day"
    LAST_DAY = "last_day"


class CloseKind(str, Enum):
    SPECIFIC_DAY = "specific_day"
    HOURS_AFTER_OPEN = "hours_after_open"


class CustomUnit(str, Enum):
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class OpenWindow(BaseModel):
    """When a cycle opens."""
    kind: Optional[str] = Field(None, validation_alias=AliasChoices("kind", "type"))
    day: Optional[str] = None
    nthDay: Optional[int] = None
    time: Optional[str] = Field(None, description="HH:MM, local to the schedule timezone")

    @field_validator("day")
    @classmethod
    def _lower_day(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value


class CloseWindow(BaseModel):
    """When a cycle closes."""
    kind: Optional[str] = Field(None, validation_alias=AliasChoices("kind", "type"))
    day: Optional[str] = None
    time: Optional[str] = None
    hoursAfterOpen: Optional[float] = None

    @field_validator("kind")
    @classmethod
    def _normalize_kind(cls, value: Optional[str]) -> Optional[str]:
        # Templates authored in the builder store "after_hours"
        if value == "after_hours":
            return CloseKind.HOURS_AFTER_OPEN.value
        return value

    @field_validator("day")
    @classmethod
    def _lower_day(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value


class CustomConfig(BaseModel):
    """Interval for custom frequencies."""
    value: Optional[int] = None
    unit: Optional[str] = None
    startDay: Optional[str] = None

    @field_validator("startDay")
    @classmethod
    def _lower_day(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value


class ScheduleConfig(BaseModel):
    """Recurrence config of a check-in template."""
    model_config = ConfigDict(populate_by_name=True)

    frequency: Optional[str] = None
    openWindow: Optional[OpenWindow] = None
    closeWindow: Optional[CloseWindow] = None
    customConfig: Optional[CustomConfig] = None
    timezone: Optional[str] = Field(None, description="IANA timezone name")
    startDate: Optional[datetime] = Field(None, description="Anchor of the first cycle")


class ScheduleWindow(BaseModel):
    """Concrete open/close instants of one cycle."""
    model_config = ConfigDict(frozen=True)

    openInstant: datetime
    closeInstant: datetime
    timezone: str

    def contains(self, instant: datetime) -> bool:
        return self.openInstant <= instant < self.closeInstant
