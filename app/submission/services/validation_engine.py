"""
Check-in form validation.

One rule set, two execution modes:

- aggregate: validate_all() runs every field group synchronously before
  submit;
- incremental: IncrementalValidator re-validates only the groups edited
  since its debounce timer was last armed and merges the results into an
  aggregate map.

Both call validate_group(), so for the same payload they produce the same
errors. Errors are keyed by item id (or metric / field name), never by
list position.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from app.submission.models import CheckInPayload, FieldGroup
from app.submission.services.debouncer import Debouncer, Scheduler
from app.submission.services.question_validators import validate_question

logger = logging.getLogger(__name__)

GroupErrors = Dict[str, List[str]]
ValidationResult = Dict[str, GroupErrors]
GroupKey = Union[FieldGroup, str]


class ValidationEngine:
    """
    Validates check-in payloads field group by field group.
    """

    METRIC_RANGES: Dict[str, Tuple[float, float]] = {
        "sleepHours": (0, 24),
        "mood": (1, 5),
        "energy": (1, 5),
        "stress": (1, 5),
        "hunger": (1, 5),
        "weight": (0, 500),
        "steps": (0, 100000),
    }

    MAX_TEXT_LENGTH = 500

    GROUPS = [group.value for group in FieldGroup]

    def __init__(
        self,
        metric_ranges: Optional[Dict[str, Tuple[float, float]]] = None,
        max_text_length: int = MAX_TEXT_LENGTH,
    ):
        """
        Initialize ValidationEngine.

        Args:
            metric_ranges: Inclusive (min, max) per metric name
            max_text_length: Character cap for every free-text field
        """
        self._metric_ranges = metric_ranges or self.METRIC_RANGES
        self._max_text_length = max_text_length
        self._group_validators: Dict[str, Callable[[CheckInPayload], GroupErrors]] = {
            FieldGroup.METRICS.value: self._validate_metrics,
            FieldGroup.GOALS.value: self._validate_goals,
            FieldGroup.ACHIEVEMENTS.value: self._validate_achievements,
            FieldGroup.CHALLENGES.value: self._validate_challenges,
            FieldGroup.QUESTIONS.value: self._validate_questions,
            FieldGroup.NOTES.value: self._validate_notes,
        }

    @property
    def max_text_length(self) -> int:
        return self._max_text_length

    # ─────────────────────────────────────────────────────────────
    # Entry points
    # ─────────────────────────────────────────────────────────────

    def validate_group(self, payload: CheckInPayload, group: GroupKey) -> GroupErrors:
        """
        Validate one field group.

        Args:
            payload: Form payload
            group: Field group name

        Returns:
            dict of item id / field name -> messages (only failing keys)
        """
        group = FieldGroup(group).value
        return self._group_validators[group](payload)

    def validate_all(self, payload: CheckInPayload) -> ValidationResult:
        """Validate every group; groups without errors map to {}."""
        return {group: self.validate_group(payload, group) for group in self.GROUPS}

    @staticmethod
    def has_errors(result: ValidationResult) -> bool:
        return any(group_errors for group_errors in result.values())

    @staticmethod
    def flatten_errors(result: ValidationResult) -> List[str]:
        """Every message of every group, in group order."""
        return [
            message
            for group_errors in result.values()
            for messages in group_errors.values()
            for message in messages
        ]

    def remaining_characters(self, text: Optional[str]) -> int:
        """Characters left before the free-text cap; negative when over."""
        return self._max_text_length - len(text or "")

    # ─────────────────────────────────────────────────────────────
    # Group rules
    # ─────────────────────────────────────────────────────────────

    def _text_errors(self, label: str, text: Optional[str]) -> List[str]:
        if text and len(text) > self._max_text_length:
            return [f"{label} must be {self._max_text_length} characters or fewer"]
        return []

    def _validate_metrics(self, payload: CheckInPayload) -> GroupErrors:
        errors: GroupErrors = {}
        for name, value in payload.metrics.items():
            if name not in self._metric_ranges:
                errors[name] = [f"Unknown metric: {name}"]
                continue
            if value is None:
                continue
            low, high = self._metric_ranges[name]
            if not low <= value <= high:
                errors[name] = [f"{name} must be between {low:g} and {high:g}"]
        return errors

    def _validate_goals(self, payload: CheckInPayload) -> GroupErrors:
        errors: GroupErrors = {}
        for goal in payload.goals:
            messages = []
            if not goal.name.strip():
                messages.append("Goal name is required")
            if goal.status == "in-progress" and not goal.notes.strip():
                messages.append("Goal needs progress notes")
            messages.extend(self._text_errors("Goal notes", goal.notes))
            if messages:
                errors[goal.id] = messages
        return errors

    def _validate_achievements(self, payload: CheckInPayload) -> GroupErrors:
        errors: GroupErrors = {}
        for achievement in payload.achievements:
            messages = []
            if not achievement.title.strip():
                messages.append("Achievement title is required")
            messages.extend(self._text_errors("Achievement description", achievement.description))
            if messages:
                errors[achievement.id] = messages
        return errors

    def _validate_challenges(self, payload: CheckInPayload) -> GroupErrors:
        errors: GroupErrors = {}
        for challenge in payload.challenges:
            messages = []
            if not challenge.description.strip():
                messages.append("Challenge description is required")
            messages.extend(self._text_errors("Challenge description", challenge.description))
            messages.extend(self._text_errors("Challenge plan", challenge.plan))
            if messages:
                errors[challenge.id] = messages
        return errors

    def _validate_questions(self, payload: CheckInPayload) -> GroupErrors:
        errors: GroupErrors = {}
        for question in payload.questions:
            messages = validate_question(question, self._max_text_length)
            if messages:
                errors[question.id] = messages
        return errors

    def _validate_notes(self, payload: CheckInPayload) -> GroupErrors:
        messages = self._text_errors("Notes", payload.notes)
        return {"notes": messages} if messages else {}


class IncrementalValidator:
    """
    Debounced per-group validation with a running aggregate error map.
    """

    DEFAULT_DELAY_MS = 300

    def __init__(
        self,
        engine: ValidationEngine,
        payload_getter: Callable[[], CheckInPayload],
        delay_ms: int = DEFAULT_DELAY_MS,
        scheduler: Optional[Scheduler] = None,
    ):
        """
        Initialize IncrementalValidator.

        Args:
            engine: Rule set shared with aggregate validation
            payload_getter: Returns the live payload when validation runs
            delay_ms: Debounce quiet period
            scheduler: Timer source
        """
        self._engine = engine
        self._payload_getter = payload_getter
        self._errors: ValidationResult = {group: {} for group in engine.GROUPS}
        self._dirty: List[str] = []
        self._debouncer = Debouncer(
            action=self._run,
            delay_ms=delay_ms,
            scheduler=scheduler,
            name="incremental-validation",
        )

    @property
    def errors(self) -> ValidationResult:
        """Aggregate error map as of the last run."""
        return {group: dict(group_errors) for group, group_errors in self._errors.items()}

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def group_errors(self, group: GroupKey) -> GroupErrors:
        return dict(self._errors[FieldGroup(group).value])

    def errors_for(self, group: GroupKey, key: str) -> List[str]:
        """Messages for one item id / field within a group."""
        return list(self._errors[FieldGroup(group).value].get(key, []))

    def mark_dirty(self, group: GroupKey) -> None:
        """Queue `group` for re-validation and re-arm the timer."""
        group = FieldGroup(group).value
        if group not in self._dirty:
            self._dirty.append(group)
        self._debouncer.schedule()

    def validate_groups(self, groups: Iterable[GroupKey]) -> ValidationResult:
        """Re-validate `groups` immediately and merge the results."""
        payload = self._payload_getter()
        for group in groups:
            group = FieldGroup(group).value
            self._errors[group] = self._engine.validate_group(payload, group)
            if group in self._dirty:
                self._dirty.remove(group)
        return self.errors

    def flush(self) -> ValidationResult:
        """Run pending groups now."""
        self._debouncer.cancel()
        self._run()
        return self.errors

    def cancel(self) -> None:
        self._debouncer.cancel()

    def replace(self, result: ValidationResult) -> None:
        """Adopt an aggregate result (after a pre-submit validation)."""
        self._debouncer.cancel()
        self._dirty.clear()
        self._errors = {group: dict(result.get(group, {})) for group in self._engine.GROUPS}

    def _run(self) -> None:
        if not self._dirty:
            return
        groups = list(self._dirty)
        logger.debug(f"Incremental validation of {groups}")
        self.validate_groups(groups)
