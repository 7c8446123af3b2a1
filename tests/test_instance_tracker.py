"""Tests for check-in instance status tracking."""

import logging
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from app.schedule.models import ScheduleWindow
from app.tracking.models import InstanceStatus, ReviewRecord, SubmissionRecord
from app.tracking.services.instance_tracker import CheckInInstanceTracker, derive_status


UTC = timezone.utc
OPEN = datetime(2024, 3, 18, 9, 0, tzinfo=UTC)
CLOSE = datetime(2024, 3, 19, 17, 0, tzinfo=UTC)


@pytest.fixture
def window():
    return ScheduleWindow(openInstant=OPEN, closeInstant=CLOSE, timezone="UTC")


@pytest.fixture
def tracker(clock):
    return CheckInInstanceTracker(clock=clock)


def _submission(at):
    return SubmissionRecord(submittedAt=at, submissionId="sub-1")


def _review(at):
    return ReviewRecord(reviewedAt=at, reviewerId="coach-1", feedback="Nice work")


# ─────────────────────────────────────────────────────────────────
# derive_status
# ─────────────────────────────────────────────────────────────────

class TestDeriveStatus:

    def test_upcoming_before_open(self, window):
        assert derive_status(window, OPEN - timedelta(seconds=1)) == InstanceStatus.UPCOMING

    def test_open_from_open_instant(self, window):
        assert derive_status(window, OPEN) == InstanceStatus.OPEN

    def test_missed_from_close_instant(self, window):
        assert derive_status(window, CLOSE) == InstanceStatus.MISSED

    def test_submitted_regardless_of_clock(self, window):
        submission = _submission(OPEN + timedelta(hours=1))

        assert derive_status(window, CLOSE + timedelta(days=3), submission) == InstanceStatus.SUBMITTED

    def test_reviewed_needs_submission(self, window):
        submission = _submission(OPEN + timedelta(hours=1))
        review = _review(OPEN + timedelta(hours=5))

        assert derive_status(window, CLOSE, submission, review) == InstanceStatus.REVIEWED

    def test_naive_now_is_read_as_utc(self, window):
        assert derive_status(window, datetime(2024, 3, 18, 12, 0)) == InstanceStatus.OPEN


# ─────────────────────────────────────────────────────────────────
# build_instance / refresh
# ─────────────────────────────────────────────────────────────────

class TestBuildInstance:

    def test_uses_tracker_clock(self, tracker, window, clock):
        clock.now = OPEN + timedelta(hours=2)

        instance = tracker.build_instance("tmpl-1", "client-1", window)

        assert instance.status == InstanceStatus.OPEN
        assert instance.id == f"tmpl-1:client-1:{OPEN.isoformat()}"
        assert instance.late is False

    def test_late_submission_is_flagged(self, tracker, window):
        instance = tracker.build_instance(
            "tmpl-1", "client-1", window,
            submission=_submission(CLOSE + timedelta(hours=2)),
            now=CLOSE + timedelta(hours=3),
        )

        assert instance.status == InstanceStatus.SUBMITTED
        assert instance.late is True

    def test_review_without_submission_is_ignored(self, tracker, window, caplog):
        with caplog.at_level(logging.WARNING):
            instance = tracker.build_instance(
                "tmpl-1", "client-1", window,
                review=_review(CLOSE),
                now=CLOSE + timedelta(hours=1),
            )

        assert instance.status == InstanceStatus.MISSED
        assert instance.reviewedAt is None
        assert "review without submission" in caplog.text

    def test_instances_are_frozen(self, tracker, window):
        instance = tracker.build_instance("tmpl-1", "client-1", window, now=OPEN)

        with pytest.raises(ValidationError):
            instance.status = InstanceStatus.MISSED

    def test_refresh_rederives_against_new_clock(self, tracker, window):
        instance = tracker.build_instance("tmpl-1", "client-1", window, now=OPEN - timedelta(hours=1))

        refreshed = tracker.refresh(instance, now=CLOSE + timedelta(minutes=1))

        assert instance.status == InstanceStatus.UPCOMING
        assert refreshed.status == InstanceStatus.MISSED
        assert refreshed.id == instance.id

    def test_refresh_keeps_existing_records(self, tracker, window):
        instance = tracker.build_instance(
            "tmpl-1", "client-1", window,
            submission=_submission(OPEN + timedelta(hours=1)),
            now=OPEN + timedelta(hours=1),
        )

        refreshed = tracker.refresh(instance, review=_review(CLOSE), now=CLOSE)

        assert refreshed.status == InstanceStatus.REVIEWED
        assert refreshed.submittedAt == OPEN + timedelta(hours=1)


# ─────────────────────────────────────────────────────────────────
# Submission gates and reminders
# ─────────────────────────────────────────────────────────────────

class TestSubmissionGates:

    def test_open_instance_accepts_submission(self, tracker, window):
        instance = tracker.build_instance("t", "c", window, now=OPEN)

        assert tracker.accepts_submission(instance) is True

    def test_missed_instance_depends_on_late_setting(self, tracker, window):
        instance = tracker.build_instance("t", "c", window, now=CLOSE)

        assert tracker.accepts_submission(instance, allow_late=True) is True
        assert tracker.accepts_submission(instance, allow_late=False) is False

    def test_submitted_and_upcoming_reject(self, tracker, window):
        submitted = tracker.build_instance("t", "c", window, submission=_submission(OPEN), now=CLOSE)
        upcoming = tracker.build_instance("t", "c", window, now=OPEN - timedelta(days=1))

        assert tracker.accepts_submission(submitted) is False
        assert tracker.accepts_submission(upcoming) is False


class TestReminders:

    def _instances(self, tracker, now):
        windows = [
            ScheduleWindow(openInstant=now - timedelta(hours=2), closeInstant=now + timedelta(hours=30), timezone="UTC"),
            ScheduleWindow(openInstant=now - timedelta(hours=1), closeInstant=now + timedelta(hours=3), timezone="UTC"),
            ScheduleWindow(openInstant=now + timedelta(hours=1), closeInstant=now + timedelta(hours=5), timezone="UTC"),
        ]
        return [tracker.build_instance("t", f"c{i}", w, now=now) for i, w in enumerate(windows)]

    def test_due_instances_sorted_by_close(self, tracker):
        instances = self._instances(tracker, OPEN)

        due = tracker.due_instances(instances)

        assert [i.clientId for i in due] == ["c1", "c0"]

    def test_closing_soon_within_period(self, tracker):
        instances = self._instances(tracker, OPEN)

        soon = tracker.closing_soon(instances, within=timedelta(hours=24), now=OPEN)

        assert [i.clientId for i in soon] == ["c1"]
