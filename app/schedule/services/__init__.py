"""Schedule services."""

from app.schedule.services.schedule_validator import ScheduleValidator
from app.schedule.services.window_calculator import WindowCalculator

__all__ = [
    "ScheduleValidator",
    "WindowCalculator",
]
