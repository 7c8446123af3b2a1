"""Check-in tracking services."""

from app.tracking.services.instance_tracker import CheckInInstanceTracker, derive_status

__all__ = [
    "CheckInInstanceTracker",
    "derive_status",
]
