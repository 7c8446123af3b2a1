"""
Check-in instance status tracking.

Status is a pure function of the window, the clock and the submission and
review records. It is recomputed on every read and never stored as
authoritative.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional

from app.schedule.models import ScheduleWindow
from app.tracking.models import (
    CheckInInstance,
    InstanceStatus,
    ReviewRecord,
    SubmissionRecord,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def derive_status(
    window: ScheduleWindow,
    now: datetime,
    submission: Optional[SubmissionRecord] = None,
    review: Optional[ReviewRecord] = None,
) -> InstanceStatus:
    """
    Derive the lifecycle status of one cycle.

    Args:
        window: The cycle's open/close instants
        now: Reference time
        submission: Submission record, if the client submitted
        review: Review record; only counts on top of a submission

    Returns:
        InstanceStatus
    """
    if submission is not None:
        return InstanceStatus.REVIEWED if review is not None else InstanceStatus.SUBMITTED

    now = _as_aware(now)
    if now < window.openInstant:
        return InstanceStatus.UPCOMING
    if now < window.closeInstant:
        return InstanceStatus.OPEN
    return InstanceStatus.MISSED


class CheckInInstanceTracker:
    """
    Builds check-in instances with derived status.
    Instances are frozen; call refresh() to re-derive against a newer clock.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize CheckInInstanceTracker.

        Args:
            clock: Returns the current time; defaults to the UTC system clock
        """
        self._clock = clock or _utcnow

    def now(self) -> datetime:
        return _as_aware(self._clock())

    def build_instance(
        self,
        template_id: str,
        client_id: str,
        window: ScheduleWindow,
        submission: Optional[SubmissionRecord] = None,
        review: Optional[ReviewRecord] = None,
        instance_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CheckInInstance:
        """
        Build an instance for one cycle.

        Args:
            template_id: Check-in template
            client_id: Client filling the check-in
            window: Computed window of the cycle
            submission: Optional submission record
            review: Optional review record
            instance_id: Defaults to "<template>:<client>:<open instant>"
            now: Reference time; defaults to the tracker clock

        Returns:
            Frozen CheckInInstance
        """
        now = _as_aware(now) if now is not None else self.now()

        if review is not None and submission is None:
            logger.warning(
                f"Ignoring review without submission for template {template_id}, client {client_id}"
            )
            review = None

        submitted_at = _as_aware(submission.submittedAt) if submission else None

        return CheckInInstance(
            id=instance_id or f"{template_id}:{client_id}:{window.openInstant.isoformat()}",
            templateId=template_id,
            clientId=client_id,
            window=window,
            status=derive_status(window, now, submission, review),
            submittedAt=submitted_at,
            reviewedAt=_as_aware(review.reviewedAt) if review else None,
            late=submitted_at is not None and submitted_at > window.closeInstant,
        )

    def refresh(
        self,
        instance: CheckInInstance,
        submission: Optional[SubmissionRecord] = None,
        review: Optional[ReviewRecord] = None,
        now: Optional[datetime] = None,
    ) -> CheckInInstance:
        """Re-derive an instance; records default to the ones it was built with."""
        if submission is None and instance.submittedAt is not None:
            submission = SubmissionRecord(submittedAt=instance.submittedAt)
        if review is None and instance.reviewedAt is not None:
            review = ReviewRecord(reviewedAt=instance.reviewedAt)

        return self.build_instance(
            template_id=instance.templateId,
            client_id=instance.clientId,
            window=instance.window,
            submission=submission,
            review=review,
            instance_id=instance.id,
            now=now,
        )

    @staticmethod
    def accepts_submission(instance: CheckInInstance, allow_late: bool = True) -> bool:
        """Check if the client may still submit this instance."""
        if instance.status == InstanceStatus.OPEN:
            return True
        return allow_late and instance.status == InstanceStatus.MISSED

    @staticmethod
    def due_instances(instances: Iterable[CheckInInstance]) -> List[CheckInInstance]:
        """Open instances, soonest closing first."""
        due = [i for i in instances if i.status == InstanceStatus.OPEN]
        return sorted(due, key=lambda i: i.window.closeInstant)

    def closing_soon(
        self,
        instances: Iterable[CheckInInstance],
        within: timedelta = timedelta(hours=24),
        now: Optional[datetime] = None,
    ) -> List[CheckInInstance]:
        """
        Open instances closing within `within` of now (reminder candidates).

        Args:
            instances: Instances to scan
            within: Look-ahead period
            now: Reference time; defaults to the tracker clock

        Returns:
            Matching instances, soonest closing first
        """
        now = _as_aware(now) if now is not None else self.now()
        deadline = now + within
        return [
            i for i in self.due_instances(instances)
            if now <= i.window.closeInstant <= deadline
        ]
