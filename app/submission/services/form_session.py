"""
Check-in form session.

Owns the editable payload of one client filling one check-in and drives
its lifecycle:

    loading -> editing -> submitting -> submitted
                  ^            |
                  +------------+  (blocked by validation or failed submit)

Every edit is applied to the payload synchronously, then re-arms the
incremental validation and autosave timers. Both timers read the live
payload when they fire.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional, Union

from common.utils.exceptions import ConflictException
from app.exceptions import FormValidationException, SubmissionException
from app.submission.models import (
    COLLECTION_GROUPS,
    ITEM_MODELS,
    CheckInPayload,
    FieldGroup,
)
from app.submission.services import collection_editor
from app.submission.services.debouncer import Scheduler
from app.submission.services.draft_store import DraftStore
from app.submission.services.submission_service import Submitter
from app.submission.services.validation_engine import (
    IncrementalValidator,
    ValidationEngine,
    ValidationResult,
)

logger = logging.getLogger(__name__)


class FormState(str, Enum):
    LOADING = "loading"
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class CheckInFormSession:
    """
    Edit, autosave, validate and submit one check-in.
    """

    def __init__(
        self,
        owner_key: str,
        draft_store: DraftStore,
        submitter: Submitter,
        engine: Optional[ValidationEngine] = None,
        validation_delay_ms: int = IncrementalValidator.DEFAULT_DELAY_MS,
        scheduler: Optional[Scheduler] = None,
    ):
        """
        Initialize CheckInFormSession.

        Args:
            owner_key: Client + template pairing the draft is stored under
            draft_store: Draft persistence
            submitter: Submission collaborator
            engine: Validation rules shared by both validation modes
            validation_delay_ms: Debounce of incremental validation
            scheduler: Timer source for validation debouncing
        """
        self.owner_key = owner_key
        self.state = FormState.LOADING
        self.payload: Optional[CheckInPayload] = None

        self._draft_store = draft_store
        self._submitter = submitter
        self._engine = engine or ValidationEngine()
        self._validator = IncrementalValidator(
            engine=self._engine,
            payload_getter=lambda: self.payload,
            delay_ms=validation_delay_ms,
            scheduler=scheduler,
        )

    # ─────────────────────────────────────────────────────────────
    # Status
    # ─────────────────────────────────────────────────────────────

    @property
    def errors(self) -> ValidationResult:
        return self._validator.errors

    @property
    def validator(self) -> IncrementalValidator:
        return self._validator

    @property
    def unsaved(self) -> bool:
        """Non-blocking indicator: the latest edits only live in memory."""
        return self._draft_store.is_unsaved(self.owner_key)

    def remaining_characters(self, text: Optional[str]) -> int:
        return self._engine.remaining_characters(text)

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def open(self, initial_data: Optional[Union[CheckInPayload, Dict[str, Any]]] = None) -> CheckInPayload:
        """
        Load today's draft or seed from `initial_data`.

        Returns:
            The editable payload
        """
        self.payload = await self._draft_store.load(self.owner_key, initial_data)
        self.state = FormState.EDITING
        return self.payload

    def close(self) -> None:
        """Cancel pending validation and autosave timers."""
        self._validator.cancel()
        self._draft_store.cancel(self.owner_key)

    async def submit(self) -> CheckInPayload:
        """
        Validate everything, submit, and clear the draft on success.

        Returns:
            The submitted payload

        Raises:
            FormValidationException: Any group has errors (all are reported)
            SubmissionException: Submission collaborator failed; draft kept
        """
        self._require_editable()

        result = self._engine.validate_all(self.payload)
        self._validator.replace(result)
        if self._engine.has_errors(result):
            logger.info(f"Submission blocked for {self.owner_key}")
            raise FormValidationException(result)

        self.state = FormState.SUBMITTING
        try:
            accepted = await self._submitter.submit(self.owner_key, self.payload)
        except Exception as e:
            logger.error(f"Submission failed for {self.owner_key}: {e}")
            await self._retain_draft()
            raise SubmissionException() from e

        if not accepted:
            logger.warning(f"Submission rejected for {self.owner_key}")
            await self._retain_draft()
            raise SubmissionException()

        await self._draft_store.clear(self.owner_key)
        self.state = FormState.SUBMITTED
        return self.payload

    # ─────────────────────────────────────────────────────────────
    # Field edits
    # ─────────────────────────────────────────────────────────────

    def set_metric(self, name: str, value: Optional[float]) -> None:
        self._require_editable()
        self.payload.metrics[name] = value
        self._edited(FieldGroup.METRICS)

    def set_notes(self, text: str) -> None:
        self._require_editable()
        self.payload.notes = text
        self._edited(FieldGroup.NOTES)

    def answer_question(self, question_id: str, answer: Any) -> None:
        self._require_editable()
        self.payload.questions = collection_editor.update_by_id(
            self.payload.questions, question_id, answer=answer
        )
        self._edited(FieldGroup.QUESTIONS)

    # ─────────────────────────────────────────────────────────────
    # Collection edits (goals / achievements / challenges)
    # ─────────────────────────────────────────────────────────────

    def add_item(self, group: Union[FieldGroup, str], item=None, index: Optional[int] = None, **fields: Any):
        """
        Insert an item; builds one from `fields` when `item` is omitted.

        Returns:
            The inserted item
        """
        group = self._collection_group(group)
        if item is None:
            item = ITEM_MODELS[group](**fields)
        self._set_items(group, collection_editor.insert(self._items(group), item, index))
        return item

    def remove_item(self, group: Union[FieldGroup, str], item_id: str) -> None:
        group = self._collection_group(group)
        self._set_items(group, collection_editor.remove_by_id(self._items(group), item_id))

    def update_item(self, group: Union[FieldGroup, str], item_id: str, **changes: Any) -> None:
        group = self._collection_group(group)
        self._set_items(group, collection_editor.update_by_id(self._items(group), item_id, **changes))

    def move_item(self, group: Union[FieldGroup, str], item_id: str, new_index: int) -> None:
        group = self._collection_group(group)
        self._set_items(group, collection_editor.move_to(self._items(group), item_id, new_index))

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def _collection_group(self, group: Union[FieldGroup, str]) -> FieldGroup:
        self._require_editable()
        group = FieldGroup(group)
        if group not in COLLECTION_GROUPS:
            raise ValueError(f"{group.value} is not a reorderable collection")
        return group

    def _items(self, group: FieldGroup):
        return getattr(self.payload, group.value)

    def _set_items(self, group: FieldGroup, items) -> None:
        setattr(self.payload, group.value, items)
        self._edited(group)

    def _edited(self, group: FieldGroup) -> None:
        self._validator.mark_dirty(group)
        self._draft_store.save(self.owner_key, self.payload)

    async def _retain_draft(self) -> None:
        self.state = FormState.EDITING
        await self._draft_store.save_now(self.owner_key, self.payload)

    def _require_editable(self) -> None:
        if self.state != FormState.EDITING:
            raise ConflictException(
                message=f"Check-in form is not editable (state: {self.state.value})",
                code="FORM_NOT_EDITABLE",
            )
