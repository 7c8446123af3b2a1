"""
Check-in Submission

Form payload models, validation, reorderable progress lists, draft
autosave and the submit state machine.
"""

from app.submission.services.draft_store import DraftStore
from app.submission.services.form_session import CheckInFormSession, FormState
from app.submission.services.validation_engine import IncrementalValidator, ValidationEngine

__all__ = [
    "CheckInFormSession",
    "DraftStore",
    "FormState",
    "IncrementalValidator",
    "ValidationEngine",
]
