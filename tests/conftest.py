"""Shared test fixtures for the check-in backend tests."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from app.submission.models import (
    Achievement,
    Challenge,
    CheckInPayload,
    Goal,
    RatingQuestion,
    TextQuestion,
)
from app.submission.services.draft_storage import InMemoryDraftStorage
from app.submission.services.draft_store import DraftStore


class ManualTimer:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Virtual clock: timers only fire when advance() moves past them."""

    def __init__(self):
        self.now = 0.0
        self._timers = []

    def call_later(self, delay, callback):
        timer = ManualTimer(self.now + delay, callback)
        self._timers.append(timer)
        return timer

    @property
    def armed(self):
        return [t for t in self._timers if not t.cancelled]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = sorted(
                (t for t in self._timers if not t.cancelled and t.when <= target),
                key=lambda t: t.when,
            )
            if not due:
                break
            timer = due[0]
            self._timers.remove(timer)
            self.now = timer.when
            timer.callback()
        self.now = target


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, delta: timedelta):
        self.now = self.now + delta


class FailingDraftStorage(InMemoryDraftStorage):
    """In-memory storage whose writes can be switched to fail."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False
        self.fail_reads = False
        self.writes = []

    async def get(self, key):
        from app.exceptions import DraftPersistenceError
        if self.fail_reads:
            raise DraftPersistenceError("storage offline")
        return await super().get(key)

    async def put(self, key, record):
        from app.exceptions import DraftPersistenceError
        if self.fail_writes:
            raise DraftPersistenceError("quota exceeded")
        self.writes.append(record)
        await super().put(key, record)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 18, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    return FailingDraftStorage()


@pytest.fixture
def draft_store(storage, clock, scheduler):
    store = DraftStore(
        storage=storage,
        clock=clock,
        timezone_name="UTC",
        autosave_delay_ms=1000,
        scheduler=scheduler,
    )
    yield store
    store.close()


@pytest.fixture
def owner_key():
    return f"{ObjectId()}:{ObjectId()}"


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # replace_one etc. stay as AsyncMock.
    collection.find = MagicMock()
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture
def sample_payload():
    return CheckInPayload(
        metrics={"sleepHours": 7.5, "mood": 4, "weight": None},
        goals=[
            Goal(id="g1", name="Walk daily", status="in-progress", notes="Three walks so far"),
            Goal(id="g2", name="Cut sugar", status="not-started"),
        ],
        achievements=[Achievement(id="a1", title="Ran 5k", description="First time")],
        challenges=[Challenge(id="c1", description="Late meetings", plan="Block evenings")],
        questions=[
            RatingQuestion(id="q1", question="How was your week?", required=True, answer=4),
            TextQuestion(id="q2", question="Anything else?", answer=""),
        ],
        notes="Good week overall",
    )
