"""
FastAPI dependencies for the check-in application.

Provides dependency injection for all services.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.config import Settings, settings as default_settings
from app.schedule.services.window_calculator import WindowCalculator
from app.submission.services.draft_storage import InMemoryDraftStorage, MongoDraftStorage
from app.submission.services.draft_store import DraftStore
from app.submission.services.submission_service import SubmissionService
from app.submission.services.validation_engine import ValidationEngine
from app.tracking.services.instance_tracker import CheckInInstanceTracker

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────
# Global service instances
# ─────────────────────────────────────────────────────────────────

_settings: Settings = default_settings

# Schedule
_window_calculator: Optional[WindowCalculator] = None

# Tracking
_instance_tracker: Optional[CheckInInstanceTracker] = None

# Submission
_validation_engine: Optional[ValidationEngine] = None
_draft_store: Optional[DraftStore] = None
_submission_service: Optional[SubmissionService] = None


# ─────────────────────────────────────────────────────────────────
# Initialization
# ─────────────────────────────────────────────────────────────────

def init_schedule_services(app_settings: Settings) -> None:
    """Initialize schedule and tracking services."""
    global _window_calculator, _instance_tracker

    _window_calculator = WindowCalculator(default_timezone=app_settings.SCHEDULE_DEFAULT_TIMEZONE)
    _instance_tracker = CheckInInstanceTracker()


def init_submission_services(db: AsyncIOMotorDatabase, app_settings: Settings) -> None:
    """Initialize validation, draft and submission services."""
    global _validation_engine, _draft_store, _submission_service

    _validation_engine = ValidationEngine(max_text_length=app_settings.MAX_TEXT_LENGTH)

    if app_settings.uses_memory_drafts():
        logger.info("Drafts are kept in process memory")
        storage = InMemoryDraftStorage()
    else:
        storage = MongoDraftStorage(db=db, collection_name=app_settings.DRAFTS_COLLECTION)

    if _draft_store is not None:
        _draft_store.close()
    _draft_store = DraftStore(
        storage=storage,
        timezone_name=app_settings.SCHEDULE_DEFAULT_TIMEZONE,
        autosave_delay_ms=app_settings.DRAFT_AUTOSAVE_DELAY_MS,
    )
    _submission_service = SubmissionService(
        db=db,
        collection_name=app_settings.SUBMISSIONS_COLLECTION,
    )


def init_all_services(db: AsyncIOMotorDatabase, app_settings: Optional[Settings] = None) -> None:
    """
    Initialize all services at application startup.

    Args:
        db: Main MongoDB database connection
        app_settings: Settings override; defaults to the environment settings
    """
    global _settings
    _settings = app_settings or default_settings

    init_schedule_services(_settings)
    init_submission_services(db, _settings)


def shutdown_services() -> None:
    """Cancel pending autosaves at application shutdown."""
    if _draft_store is not None:
        _draft_store.close()


# ─────────────────────────────────────────────────────────────────
# Getters
# ─────────────────────────────────────────────────────────────────

def get_settings() -> Settings:
    """Get application settings."""
    return _settings


def get_window_calculator() -> WindowCalculator:
    """Get window calculator instance."""
    if _window_calculator is None:
        raise RuntimeError("Schedule services not initialized.")
    return _window_calculator


def get_instance_tracker() -> CheckInInstanceTracker:
    """Get instance tracker instance."""
    if _instance_tracker is None:
        raise RuntimeError("Schedule services not initialized.")
    return _instance_tracker


def get_validation_engine() -> ValidationEngine:
    """Get validation engine instance."""
    if _validation_engine is None:
        raise RuntimeError("Submission services not initialized.")
    return _validation_engine


def get_draft_store() -> DraftStore:
    """Get draft store instance."""
    if _draft_store is None:
        raise RuntimeError("Submission services not initialized.")
    return _draft_store


def get_submission_service() -> SubmissionService:
    """Get submission service instance."""
    if _submission_service is None:
        raise RuntimeError("Submission services not initialized.")
    return _submission_service
