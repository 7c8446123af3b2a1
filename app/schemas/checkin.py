"""
Check-in request/response schemas.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from app.submission.models import CheckInPayload
from app.tracking.models import CheckInInstance, ReviewRecord, SubmissionRecord


class InstanceStatusRequest(BaseModel):
    """Derive the current instance of a client's check-in template."""

    templateId: str
    clientId: str
    config: Dict[str, Any]
    anchor: Optional[datetime] = None
    now: Optional[datetime] = None
    submission: Optional[SubmissionRecord] = None
    review: Optional[ReviewRecord] = None


class InstanceStatusResponse(BaseModel):
    """Instance with derived status."""

    instance: CheckInInstance
    acceptsSubmission: bool


class LoadDraftRequest(BaseModel):
    """Server data used when no draft from today exists."""

    initialData: Optional[CheckInPayload] = None


class DraftResponse(BaseModel):
    """Editable payload plus the non-blocking unsaved indicator."""

    payload: CheckInPayload
    unsaved: bool = False


class SaveDraftRequest(BaseModel):
    """Draft autosave."""

    payload: CheckInPayload
    immediate: bool = Field(False, description="Write now instead of debouncing")


class SaveDraftResponse(BaseModel):
    """Autosave outcome."""

    saved: bool
    pending: bool
    unsaved: bool


class SubmitCheckInRequest(BaseModel):
    """Submit the current payload for the cycle containing `now`."""

    templateId: str
    clientId: str
    config: Dict[str, Any]
    payload: CheckInPayload
    anchor: Optional[datetime] = None


class SubmitCheckInResponse(BaseModel):
    """Submission outcome."""

    status: str
    late: bool = False
