"""
Check-in pipeline functions.

Stateless orchestration logic for instance status, drafts and submission.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from common.utils.exceptions import ValidationException
from app.exceptions import CheckInNotOpenException
from app.schedule.models import ScheduleWindow
from app.schedule.services.window_calculator import WindowCalculator
from app.submission.models import CheckInPayload
from app.submission.services.debouncer import Scheduler
from app.submission.services.draft_store import DraftStore
from app.submission.services.form_session import CheckInFormSession
from app.submission.services.submission_service import SubmissionService
from app.submission.services.validation_engine import ValidationEngine
from app.tracking.models import CheckInInstance, ReviewRecord, SubmissionRecord
from app.tracking.services.instance_tracker import CheckInInstanceTracker

logger = logging.getLogger(__name__)


def make_owner_key(client_id: str, template_id: str) -> str:
    """Draft/submission key of one client + template pairing."""
    return f"{client_id}:{template_id}"


def resolve_current_window(
    window_calculator: WindowCalculator,
    config: Dict[str, Any],
    now: datetime,
    anchor: Optional[datetime] = None,
) -> ScheduleWindow:
    """The latest opened window, or the upcoming one if none has opened."""
    return (
        window_calculator.latest_window(config, now, anchor)
        or window_calculator.compute_window(config, now, anchor)
    )


async def _build_current_instance(
    window_calculator: WindowCalculator,
    tracker: CheckInInstanceTracker,
    submission_service: SubmissionService,
    template_id: str,
    client_id: str,
    config: Dict[str, Any],
    now: datetime,
    anchor: Optional[datetime] = None,
    submission: Optional[SubmissionRecord] = None,
    review: Optional[ReviewRecord] = None,
) -> CheckInInstance:
    window = resolve_current_window(window_calculator, config, now, anchor)

    if submission is None:
        submission = await submission_service.get_latest_submission(
            make_owner_key(client_id, template_id),
            since=window.openInstant,
        )

    return tracker.build_instance(
        template_id=template_id,
        client_id=client_id,
        window=window,
        submission=submission,
        review=review,
        now=now,
    )


async def get_instance_status_pipeline(
    window_calculator: WindowCalculator,
    tracker: CheckInInstanceTracker,
    submission_service: SubmissionService,
    template_id: str,
    client_id: str,
    config: Dict[str, Any],
    allow_late: bool,
    anchor: Optional[datetime] = None,
    now: Optional[datetime] = None,
    submission: Optional[SubmissionRecord] = None,
    review: Optional[ReviewRecord] = None,
) -> Dict[str, Any]:
    """
    Derive the current check-in instance of a client.

    Args:
        window_calculator: For window math
        tracker: For status derivation
        submission_service: Looks up the submission when none is supplied
        template_id: Check-in template
        client_id: Client filling the check-in
        config: Schedule config of the template
        allow_late: Whether closed windows still accept submissions
        anchor: Optional cycle anchor
        now: Reference time; defaults to the tracker clock
        submission: Submission record from the caller, if known
        review: Review record from the review collaborator

    Returns:
        dict with the instance and whether it accepts a submission
    """
    now = now or tracker.now()
    instance = await _build_current_instance(
        window_calculator, tracker, submission_service,
        template_id, client_id, config, now, anchor, submission, review,
    )

    return {
        "instance": instance,
        "acceptsSubmission": tracker.accepts_submission(instance, allow_late),
    }


async def load_draft_pipeline(
    draft_store: DraftStore,
    owner_key: str,
    initial_data: Optional[CheckInPayload] = None,
) -> Dict[str, Any]:
    """
    Load today's draft or seed from server data.

    Returns:
        dict with payload and unsaved flag
    """
    payload = await draft_store.load(owner_key, initial_data)
    return {
        "payload": payload,
        "unsaved": draft_store.is_unsaved(owner_key),
    }


async def save_draft_pipeline(
    draft_store: DraftStore,
    owner_key: str,
    payload: CheckInPayload,
    immediate: bool = False,
) -> Dict[str, Any]:
    """
    Autosave a draft, debounced unless `immediate`.

    Returns:
        dict with saved, pending and unsaved flags
    """
    saved = False
    if immediate:
        saved = await draft_store.save_now(owner_key, payload)
    else:
        draft_store.save(owner_key, payload)

    return {
        "saved": saved,
        "pending": draft_store.has_pending_save(owner_key),
        "unsaved": draft_store.is_unsaved(owner_key),
    }


async def clear_draft_pipeline(draft_store: DraftStore, owner_key: str) -> None:
    """Discard a draft."""
    await draft_store.clear(owner_key)


async def submit_checkin_pipeline(
    window_calculator: WindowCalculator,
    tracker: CheckInInstanceTracker,
    draft_store: DraftStore,
    submission_service: SubmissionService,
    engine: ValidationEngine,
    owner_key: str,
    template_id: str,
    client_id: str,
    config: Dict[str, Any],
    payload: CheckInPayload,
    allow_late: bool,
    anchor: Optional[datetime] = None,
    validation_delay_ms: int = 300,
    scheduler: Optional[Scheduler] = None,
) -> Dict[str, Any]:
    """
    Orchestrates the check-in submission flow.

    The payload is written as today's draft first, so a rejected or failed
    submission leaves it restorable.

    Args:
        window_calculator: For window math
        tracker: For status derivation
        draft_store: Draft persistence
        submission_service: Submission collaborator
        engine: Validation rules
        owner_key: Client + template pairing from the URL
        template_id: Check-in template
        client_id: Client filling the check-in
        config: Schedule config of the template
        payload: Current form payload
        allow_late: Whether closed windows still accept submissions
        anchor: Optional cycle anchor
        validation_delay_ms: Debounce of incremental validation
        scheduler: Timer source for the session's validation debouncing

    Returns:
        dict with status and late flag

    Raises:
        ValidationException: owner_key does not match the client/template
        CheckInNotOpenException: The current instance cannot take a submission
        FormValidationException: Payload has field errors
        SubmissionException: Submission collaborator failed
    """
    if owner_key != make_owner_key(client_id, template_id):
        raise ValidationException(
            message="Owner key does not match client and template",
            code="OWNER_KEY_MISMATCH",
        )

    now = tracker.now()
    instance = await _build_current_instance(
        window_calculator, tracker, submission_service,
        template_id, client_id, config, now, anchor,
    )
    if not tracker.accepts_submission(instance, allow_late):
        raise CheckInNotOpenException(instance.status.value)

    await draft_store.save_now(owner_key, payload)

    session = CheckInFormSession(
        owner_key=owner_key,
        draft_store=draft_store,
        submitter=submission_service,
        engine=engine,
        validation_delay_ms=validation_delay_ms,
        scheduler=scheduler,
    )
    try:
        await session.open(payload)
        await session.submit()
    finally:
        session.close()

    late = now > instance.window.closeInstant
    logger.info(f"Check-in {instance.id} submitted (late={late})")

    return {
        "status": session.state.value,
        "late": late,
    }
