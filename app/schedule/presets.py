"""
Schedule presets offered to coaches when creating a template.
"""

from typing import Dict

from app.schedule.models import ScheduleConfig


SCHEDULE_PRESETS: Dict[str, Dict[str, object]] = {
    "weekly": {
        "name": "Weekly Check-in",
        "description": "Opens Monday morning, stays open for a day",
        "config": {
            "frequency": "weekly",
            "openWindow": {"kind": "specific_day", "day": "monday", "time": "09:00"},
            "closeWindow": {"kind": "hours_after_open", "hoursAfterOpen": 24},
        },
    },
    "fortnightly": {
        "name": "Fortnightly Review",
        "description": "Every other Monday, open for two days",
        "config": {
            "frequency": "fortnightly",
            "openWindow": {"kind": "specific_day", "day": "monday", "time": "09:00"},
            "closeWindow": {"kind": "hours_after_open", "hoursAfterOpen": 48},
        },
    },
    "monthly": {
        "name": "Monthly Progress",
        "description": "First of the month, open for three days",
        "config": {
            "frequency": "monthly",
            "openWindow": {"kind": "nth_day", "nthDay": 1, "time": "09:00"},
            "closeWindow": {"kind": "hours_after_open", "hoursAfterOpen": 72},
        },
    },
}


def get_preset_config(name: str) -> ScheduleConfig:
    """
    Get a preset as a ScheduleConfig.

    Raises:
        KeyError: Unknown preset name
    """
    return ScheduleConfig.model_validate(SCHEDULE_PRESETS[name]["config"])
