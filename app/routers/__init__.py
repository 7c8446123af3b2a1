"""
Check-in API Routers.

All routers are imported here for easy access.
"""

from app.routers.schedule import router as schedule_router
from app.routers.checkin import router as checkin_router

__all__ = [
    "schedule_router",
    "checkin_router",
]
