"""Check-in submission services."""

from app.submission.services.debouncer import Debouncer, LoopScheduler
from app.submission.services.draft_storage import InMemoryDraftStorage, MongoDraftStorage
from app.submission.services.draft_store import DraftStore
from app.submission.services.form_session import CheckInFormSession, FormState
from app.submission.services.submission_service import SubmissionService
from app.submission.services.validation_engine import IncrementalValidator, ValidationEngine

__all__ = [
    "CheckInFormSession",
    "Debouncer",
    "DraftStore",
    "FormState",
    "InMemoryDraftStorage",
    "IncrementalValidator",
    "LoopScheduler",
    "MongoDraftStorage",
    "SubmissionService",
    "ValidationEngine",
]
