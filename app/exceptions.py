"""
Check-in domain exceptions.

Built on the common APIException hierarchy so routers can let them
propagate straight to the client with a code and details.
"""

from typing import Any, Dict, List, Optional

from common.utils.exceptions import (
    BadGatewayException,
    ConflictException,
    InternalServerException,
    NotFoundException,
    ValidationException,
)


class InvalidScheduleConfig(ValidationException):
    """A recurrence config is structurally incomplete."""

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__(
            message="Schedule configuration is invalid",
            code="INVALID_SCHEDULE_CONFIG",
            details={"fields": self.field_errors},
            errors=list(self.field_errors.values()),
        )


class ScheduleComputationError(InternalServerException):
    """Window math produced a window that could not be corrected."""

    def __init__(self, message: str = "Could not compute a valid check-in window"):
        super().__init__(message=message, code="SCHEDULE_COMPUTATION_ERROR")


class FormValidationException(ValidationException):
    """Submission blocked by field errors; carries every group's errors."""

    def __init__(self, group_errors: Dict[str, Dict[str, List[str]]]):
        self.group_errors = group_errors
        messages = [
            message
            for group in group_errors.values()
            for item_messages in group.values()
            for message in item_messages
        ]
        super().__init__(
            message="Check-in has validation errors",
            code="CHECKIN_VALIDATION_FAILED",
            details={"groups": group_errors},
            errors=messages,
        )


class SubmissionException(BadGatewayException):
    """The submission collaborator failed; the draft is retained."""

    def __init__(self, message: str = "Check-in submission failed, please retry", details: Optional[Any] = None):
        super().__init__(message=message, code="SUBMISSION_FAILED", details=details)


class ItemNotFoundException(NotFoundException):
    """A collection edit referenced an unknown item id."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(message=f"Item not found: {item_id}", code="ITEM_NOT_FOUND")


class CheckInNotOpenException(ConflictException):
    """The check-in cannot accept a submission in its current status."""

    def __init__(self, status: str):
        self.status = status
        super().__init__(
            message=f"Check-in is not accepting submissions (status: {status})",
            code="CHECKIN_NOT_OPEN",
        )


class DraftPersistenceError(Exception):
    """A draft storage read or write failed."""
