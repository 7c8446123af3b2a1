"""
Draft persistence for in-progress check-ins.

Keeps one draft per owner key (client + template pairing). Drafts are
only restored on the local calendar day they were saved; anything older
is discarded in favour of a payload seeded from server data. Storage
failures never block the client: the store falls back to memory and
raises an "unsaved" flag instead. A payload is only held in memory until
storage has accepted it.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Set, Union

import pytz
from pydantic import ValidationError

from app.exceptions import DraftPersistenceError
from app.submission.models import CheckInPayload, DraftRecord
from app.submission.services.debouncer import Debouncer, Scheduler
from app.submission.services.draft_storage import DraftStorage, InMemoryDraftStorage, draft_key

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DraftStore:
    """
    Loads, autosaves and clears check-in drafts.
    """

    DEFAULT_AUTOSAVE_DELAY_MS = 1000

    def __init__(
        self,
        storage: DraftStorage,
        clock: Optional[Callable[[], datetime]] = None,
        timezone_name: str = "UTC",
        autosave_delay_ms: int = DEFAULT_AUTOSAVE_DELAY_MS,
        scheduler: Optional[Scheduler] = None,
    ):
        """
        Initialize DraftStore.

        Args:
            storage: Persistent draft storage
            clock: Returns the current time; defaults to the UTC system clock
            timezone_name: Zone whose calendar day decides staleness
            autosave_delay_ms: Quiet period before a debounced save writes
            scheduler: Timer source for debounced saves
        """
        self._storage = storage
        self._fallback = InMemoryDraftStorage()
        self._clock = clock or _utcnow
        self._tz = pytz.timezone(timezone_name)
        self._autosave_delay_ms = autosave_delay_ms
        self._scheduler = scheduler

        self._live: Dict[str, CheckInPayload] = {}
        self._debouncers: Dict[str, Debouncer] = {}
        self._unsaved: Set[str] = set()

    # ─────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────

    def is_unsaved(self, owner_key: str) -> bool:
        """True when the latest state of `owner_key` only lives in memory."""
        return owner_key in self._unsaved

    def has_pending_save(self, owner_key: str) -> bool:
        debouncer = self._debouncers.get(owner_key)
        return debouncer is not None and debouncer.pending

    # ─────────────────────────────────────────────────────────────
    # Load
    # ─────────────────────────────────────────────────────────────

    async def load(
        self,
        owner_key: str,
        initial_data: Optional[Union[CheckInPayload, Dict[str, Any]]] = None,
    ) -> CheckInPayload:
        """
        Restore today's draft or seed a fresh payload.

        Args:
            owner_key: Client + template pairing
            initial_data: Server-provided data used when no usable draft exists

        Returns:
            Editable payload
        """
        key = draft_key(owner_key)
        record = await self._read(owner_key, key)

        payload = None
        if record is not None:
            payload = self._restore(owner_key, record)
            if payload is None:
                await self._discard(owner_key, key)

        if payload is None:
            payload = self._seed(initial_data)

        return payload

    async def _read(self, owner_key: str, key: str) -> Optional[Dict[str, Any]]:
        try:
            record = await self._storage.get(key)
        except DraftPersistenceError as e:
            logger.warning(f"Draft read failed for {owner_key}, using memory: {e}")
            self._unsaved.add(owner_key)
            return await self._fallback.get(key)

        # A newer in-memory copy exists while storage is failing
        memory_record = await self._fallback.get(key)
        return memory_record or record

    def _restore(self, owner_key: str, record: Dict[str, Any]) -> Optional[CheckInPayload]:
        try:
            draft = DraftRecord.model_validate(record)
        except ValidationError as e:
            logger.warning(f"Discarding malformed draft for {owner_key}: {e}")
            return None

        if not self._is_today(draft.lastSavedAt):
            logger.info(f"Discarding stale draft for {owner_key} saved at {draft.lastSavedAt.isoformat()}")
            return None

        try:
            return CheckInPayload.model_validate(draft.payload)
        except ValidationError as e:
            logger.warning(f"Discarding draft with invalid payload for {owner_key}: {e}")
            return None

    @staticmethod
    def _seed(initial_data: Optional[Union[CheckInPayload, Dict[str, Any]]]) -> CheckInPayload:
        if isinstance(initial_data, CheckInPayload):
            return initial_data.model_copy(deep=True)
        return CheckInPayload.model_validate(initial_data or {})

    def _is_today(self, saved_at: datetime) -> bool:
        now = self._local(self._clock())
        return self._local(saved_at).date() == now.date()

    def _local(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return self._tz.localize(value)
        return value.astimezone(self._tz)

    async def _discard(self, owner_key: str, key: str) -> None:
        await self._fallback.delete(key)
        try:
            await self._storage.delete(key)
        except DraftPersistenceError as e:
            logger.warning(f"Failed to delete discarded draft for {owner_key}: {e}")

    # ─────────────────────────────────────────────────────────────
    # Save
    # ─────────────────────────────────────────────────────────────

    def save(self, owner_key: str, payload: CheckInPayload) -> None:
        """
        Register `payload` as the live state and (re)arm the autosave timer.

        The write reads the live payload when the timer fires, so rapid
        edits collapse into one write of the latest state.
        """
        self._live[owner_key] = payload
        debouncer = self._debouncers.get(owner_key)
        if debouncer is None:
            debouncer = Debouncer(
                action=lambda: self._write(owner_key),
                delay_ms=self._autosave_delay_ms,
                scheduler=self._scheduler,
                name=f"draft-save:{owner_key}",
            )
            self._debouncers[owner_key] = debouncer
        debouncer.schedule()

    async def save_now(self, owner_key: str, payload: Optional[CheckInPayload] = None) -> bool:
        """
        Write immediately, cancelling any armed autosave.

        Returns:
            True if storage accepted the write, False if only memory has it
        """
        if payload is None:
            payload = self._live.get(owner_key)
        else:
            self._live[owner_key] = payload
        debouncer = self._debouncers.get(owner_key)
        if debouncer is not None:
            debouncer.cancel()
            await debouncer.wait()
        return await self._write(owner_key, payload)

    async def flush(self, owner_key: str) -> None:
        """Run an armed autosave now and wait for it."""
        debouncer = self._debouncers.get(owner_key)
        if debouncer is not None:
            await debouncer.flush()

    async def _write(self, owner_key: str, payload: Optional[CheckInPayload] = None) -> bool:
        if payload is None:
            payload = self._live.get(owner_key)
        if payload is None:
            return False

        key = draft_key(owner_key)
        record = {
            "payload": payload.model_dump(mode="json"),
            "lastSavedAt": self._local(self._clock()).isoformat(),
        }

        try:
            await self._storage.put(key, record)
        except DraftPersistenceError as e:
            logger.warning(f"Draft save failed for {owner_key}, keeping it in memory: {e}")
            await self._fallback.put(key, record)
            self._unsaved.add(owner_key)
            return False

        await self._fallback.delete(key)
        self._unsaved.discard(owner_key)
        self._release(owner_key, payload)
        logger.debug(f"Draft saved for {owner_key}")
        return True

    def _release(self, owner_key: str, written: CheckInPayload) -> None:
        # Storage holds the latest state once nothing newer is registered or armed
        debouncer = self._debouncers.get(owner_key)
        if debouncer is not None and debouncer.pending:
            return
        if self._live.get(owner_key) is not written:
            return
        self._debouncers.pop(owner_key, None)
        self._live.pop(owner_key, None)

    # ─────────────────────────────────────────────────────────────
    # Clear / teardown
    # ─────────────────────────────────────────────────────────────

    async def clear(self, owner_key: str) -> None:
        """Drop the draft of `owner_key` (after a confirmed submission)."""
        debouncer = self._debouncers.pop(owner_key, None)
        if debouncer is not None:
            debouncer.cancel()
            await debouncer.wait()

        key = draft_key(owner_key)
        self._live.pop(owner_key, None)
        await self._fallback.delete(key)
        try:
            await self._storage.delete(key)
            self._unsaved.discard(owner_key)
        except DraftPersistenceError as e:
            logger.warning(f"Failed to clear draft for {owner_key}: {e}")

        logger.info(f"Draft cleared for {owner_key}")

    def cancel(self, owner_key: str) -> None:
        """Disarm the autosave of one owner key."""
        debouncer = self._debouncers.get(owner_key)
        if debouncer is not None:
            debouncer.cancel()

    def close(self) -> None:
        """Cancel every armed autosave; nothing is written afterwards."""
        for debouncer in self._debouncers.values():
            debouncer.cancel()
        self._debouncers.clear()
