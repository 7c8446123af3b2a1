"""
Check-in application settings.

Extends the base settings with scheduling, draft and validation configuration.
"""

from common.config import BaseAppSettings


class Settings(BaseAppSettings):
    """Check-in specific settings."""

    # ==========================================================================
    # Scheduling
    # ==========================================================================
    # Used when a schedule config does not carry its own timezone
    SCHEDULE_DEFAULT_TIMEZONE: str = "UTC"

    # Accept submissions after the window closed (flagged late)
    ALLOW_LATE_SUBMISSIONS: bool = True

    # ==========================================================================
    # Drafts
    # ==========================================================================
    DRAFT_STORAGE: str = "mongodb"  # "mongodb" or "memory"
    DRAFTS_COLLECTION: str = "checkinDrafts"
    DRAFT_AUTOSAVE_DELAY_MS: int = 1000

    # ==========================================================================
    # Validation
    # ==========================================================================
    VALIDATION_DEBOUNCE_MS: int = 300
    MAX_TEXT_LENGTH: int = 500

    # ==========================================================================
    # Submissions
    # ==========================================================================
    SUBMISSIONS_COLLECTION: str = "checkinSubmissions"

    def uses_memory_drafts(self) -> bool:
        """Check if drafts are kept in process memory only."""
        return self.DRAFT_STORAGE.lower() == "memory"


# Global settings instance
settings = Settings()
