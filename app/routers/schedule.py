"""
FastAPI router for check-in schedule endpoints.

Config-save time validation and window previews for coaches.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import success_response
from app.dependencies import get_window_calculator
from app.schedule.services.window_calculator import WindowCalculator
from app.schemas.schedule import (
    ScheduleConfigRequest,
    ScheduleValidationResponse,
    SchedulePreset,
    UpcomingWindowsRequest,
    WindowRequest,
)
from app.pipelines import schedule as pipelines

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedule", tags=["schedule"])


@router.post("/validate")
async def validate_schedule(body: ScheduleConfigRequest):
    """
    Validate a recurrence config before it is saved.

    Returns per-field errors instead of failing so the editor can show them.
    """
    result = pipelines.validate_schedule_pipeline(body.config)
    return success_response(ScheduleValidationResponse(**result).model_dump())


@router.post("/window")
async def preview_window(
    body: WindowRequest,
    window_calculator: Annotated[WindowCalculator, Depends(get_window_calculator)],
):
    """Compute the window of the cycle containing (or following) `now`."""
    result = pipelines.compute_window_pipeline(
        window_calculator=window_calculator,
        config=body.config,
        now=body.now,
        anchor=body.anchor,
    )
    return success_response(result)


@router.post("/upcoming")
async def upcoming_windows(
    body: UpcomingWindowsRequest,
    window_calculator: Annotated[WindowCalculator, Depends(get_window_calculator)],
):
    """List the next windows, starting with the current cycle."""
    windows = pipelines.upcoming_windows_pipeline(
        window_calculator=window_calculator,
        config=body.config,
        count=body.count,
        now=body.now,
        anchor=body.anchor,
    )
    return success_response({"windows": windows})


@router.get("/presets")
async def list_presets():
    """Get the schedule presets offered when creating a template."""
    presets = [SchedulePreset(**p).model_dump() for p in pipelines.list_presets_pipeline()]
    return success_response(presets)
