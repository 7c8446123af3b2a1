"""
FastAPI router for check-in endpoints.

Instance status, draft autosave and submission.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import success_response
from app.config import Settings
from app.dependencies import (
    get_draft_store,
    get_instance_tracker,
    get_settings,
    get_submission_service,
    get_validation_engine,
    get_window_calculator,
)
from app.schedule.services.window_calculator import WindowCalculator
from app.submission.services.draft_store import DraftStore
from app.submission.services.submission_service import SubmissionService
from app.submission.services.validation_engine import ValidationEngine
from app.tracking.services.instance_tracker import CheckInInstanceTracker
from app.schemas.checkin import (
    DraftResponse,
    InstanceStatusRequest,
    InstanceStatusResponse,
    LoadDraftRequest,
    SaveDraftRequest,
    SaveDraftResponse,
    SubmitCheckInRequest,
    SubmitCheckInResponse,
)
from app.pipelines import checkin as pipelines

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkin", tags=["checkin"])


@router.post("/instances/status")
async def get_instance_status(
    body: InstanceStatusRequest,
    app_settings: Annotated[Settings, Depends(get_settings)],
    window_calculator: Annotated[WindowCalculator, Depends(get_window_calculator)],
    tracker: Annotated[CheckInInstanceTracker, Depends(get_instance_tracker)],
    submission_service: Annotated[SubmissionService, Depends(get_submission_service)],
):
    """
    Derive the current check-in instance of a client.

    Status is recomputed on every request from the window, the clock and
    the submission/review records.
    """
    result = await pipelines.get_instance_status_pipeline(
        window_calculator=window_calculator,
        tracker=tracker,
        submission_service=submission_service,
        template_id=body.templateId,
        client_id=body.clientId,
        config=body.config,
        allow_late=app_settings.ALLOW_LATE_SUBMISSIONS,
        anchor=body.anchor,
        now=body.now,
        submission=body.submission,
        review=body.review,
    )
    return success_response(InstanceStatusResponse(**result).model_dump(mode="json"))


@router.post("/drafts/{owner_key}/load")
async def load_draft(
    owner_key: str,
    body: LoadDraftRequest,
    draft_store: Annotated[DraftStore, Depends(get_draft_store)],
):
    """
    Load today's draft, or seed the form from `initialData`.

    Drafts saved on an earlier local date are discarded.
    """
    result = await pipelines.load_draft_pipeline(
        draft_store=draft_store,
        owner_key=owner_key,
        initial_data=body.initialData,
    )
    return success_response(DraftResponse(**result).model_dump(mode="json"))


@router.put("/drafts/{owner_key}")
async def save_draft(
    owner_key: str,
    body: SaveDraftRequest,
    draft_store: Annotated[DraftStore, Depends(get_draft_store)],
):
    """Autosave a draft. Storage failures are reported via `unsaved`, never as errors."""
    result = await pipelines.save_draft_pipeline(
        draft_store=draft_store,
        owner_key=owner_key,
        payload=body.payload,
        immediate=body.immediate,
    )
    return success_response(SaveDraftResponse(**result).model_dump())


@router.delete("/drafts/{owner_key}")
async def clear_draft(
    owner_key: str,
    draft_store: Annotated[DraftStore, Depends(get_draft_store)],
):
    """Discard a draft."""
    await pipelines.clear_draft_pipeline(draft_store=draft_store, owner_key=owner_key)
    return success_response(message="Draft cleared")


@router.post("/drafts/{owner_key}/submit")
async def submit_checkin(
    owner_key: str,
    body: SubmitCheckInRequest,
    app_settings: Annotated[Settings, Depends(get_settings)],
    window_calculator: Annotated[WindowCalculator, Depends(get_window_calculator)],
    tracker: Annotated[CheckInInstanceTracker, Depends(get_instance_tracker)],
    draft_store: Annotated[DraftStore, Depends(get_draft_store)],
    submission_service: Annotated[SubmissionService, Depends(get_submission_service)],
    engine: Annotated[ValidationEngine, Depends(get_validation_engine)],
):
    """
    Submit a check-in.

    Validates every field group first; all errors are returned together.
    On a failed submission the draft is kept and the request can be retried.
    """
    result = await pipelines.submit_checkin_pipeline(
        window_calculator=window_calculator,
        tracker=tracker,
        draft_store=draft_store,
        submission_service=submission_service,
        engine=engine,
        owner_key=owner_key,
        template_id=body.templateId,
        client_id=body.clientId,
        config=body.config,
        payload=body.payload,
        allow_late=app_settings.ALLOW_LATE_SUBMISSIONS,
        anchor=body.anchor,
        validation_delay_ms=app_settings.VALIDATION_DEBOUNCE_MS,
    )
    return success_response(SubmitCheckInResponse(**result).model_dump())
