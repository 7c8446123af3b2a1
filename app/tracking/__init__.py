"""
Check-in Tracking

Derives each check-in instance's lifecycle status (upcoming, open,
submitted, missed, reviewed) from its window and the records around it.
"""

from app.tracking.services.instance_tracker import CheckInInstanceTracker

__all__ = [
    "CheckInInstanceTracker",
]
