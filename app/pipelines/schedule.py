"""
Schedule pipeline functions.

Stateless orchestration logic for schedule authoring and window previews.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.exceptions import InvalidScheduleConfig
from app.schedule.presets import SCHEDULE_PRESETS
from app.schedule.services.schedule_validator import ScheduleValidator
from app.schedule.services.window_calculator import WindowCalculator

logger = logging.getLogger(__name__)


def validate_schedule_pipeline(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a recurrence config at config-save time.

    Args:
        config: Raw schedule config from the coach

    Returns:
        dict with valid flag and per-field errors
    """
    try:
        ScheduleValidator.ensure_valid(config)
    except InvalidScheduleConfig as e:
        logger.info(f"Rejected schedule config: {e.field_errors}")
        return {"valid": False, "errors": e.field_errors}

    return {"valid": True, "errors": {}}


def compute_window_pipeline(
    window_calculator: WindowCalculator,
    config: Dict[str, Any],
    now: Optional[datetime] = None,
    anchor: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Compute the window of the cycle containing (or following) `now`.

    Args:
        window_calculator: For window math
        config: Schedule config
        now: Reference time; defaults to the current UTC time
        anchor: Optional cycle anchor

    Returns:
        Serialized ScheduleWindow
    """
    now = now or datetime.now(timezone.utc)
    window = window_calculator.compute_window(config, now, anchor)
    return window.model_dump(mode="json")


def upcoming_windows_pipeline(
    window_calculator: WindowCalculator,
    config: Dict[str, Any],
    count: int,
    now: Optional[datetime] = None,
    anchor: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    List consecutive windows starting with the current cycle.

    Returns:
        List of serialized ScheduleWindows
    """
    now = now or datetime.now(timezone.utc)
    windows = window_calculator.upcoming_windows(config, now, count=count, anchor=anchor)
    return [w.model_dump(mode="json") for w in windows]


def list_presets_pipeline() -> List[Dict[str, Any]]:
    """Get the schedule presets offered when creating a template."""
    return [
        {
            "id": preset_id,
            "name": preset["name"],
            "description": preset["description"],
            "config": preset["config"],
        }
        for preset_id, preset in SCHEDULE_PRESETS.items()
    ]
