"""
Pydantic models for check-in instances.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.schedule.models import ScheduleWindow


class InstanceStatus(str, Enum):
    UPCOMING = "upcoming"
    OPEN = "open"
    SUBMITTED = "submitted"
    MISSED = "missed"
    REVIEWED = "reviewed"


class SubmissionRecord(BaseModel):
    """Supplied by the submission collaborator."""
    submittedAt: datetime
    submissionId: Optional[str] = None


class ReviewRecord(BaseModel):
    """Supplied by the review collaborator; never written here."""
    reviewedAt: datetime
    reviewerId: Optional[str] = None
    feedback: Optional[str] = None


class CheckInInstance(BaseModel):
    """A concrete check-in occurrence with its derived status."""
    model_config = ConfigDict(frozen=True)

    id: str
    templateId: str
    clientId: str
    window: ScheduleWindow
    status: InstanceStatus
    submittedAt: Optional[datetime] = None
    reviewedAt: Optional[datetime] = None
    late: bool = False
