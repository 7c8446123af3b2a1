"""
Check-in Scheduling

Turns coach-authored recurrence specs (daily, weekly, fortnightly,
monthly, custom) into concrete open/close windows for each cycle.
"""

from app.schedule.services.schedule_validator import ScheduleValidator
from app.schedule.services.window_calculator import WindowCalculator

__all__ = [
    "ScheduleValidator",
    "WindowCalculator",
]
