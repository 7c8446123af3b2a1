"""
Per-type validators for dynamic check-in questions.

Questions are a tagged union; each tag maps to one validator in
QUESTION_VALIDATORS. Unknown tags cannot reach this table because the
payload model rejects them.
"""

from typing import Callable, Dict, List

from app.submission.models import (
    MultipleChoiceQuestion,
    NumberQuestion,
    RatingQuestion,
    ScaleQuestion,
    TextQuestion,
    YesNoQuestion,
)

RATING_RANGE = (1, 5)
DEFAULT_MAX_TEXT_LENGTH = 500


def _label(question) -> str:
    return question.question.strip() or "This question"


def is_answered(question) -> bool:
    answer = question.answer
    if answer is None:
        return False
    if isinstance(answer, str):
        return bool(answer.strip())
    if isinstance(answer, list):
        return len(answer) > 0
    return True


def _required(question) -> List[str]:
    if question.required and not is_answered(question):
        return [f"{_label(question)} is required"]
    return []


def validate_number_question(question: NumberQuestion, max_text_length: int) -> List[str]:
    errors = _required(question)
    if question.answer is None:
        return errors
    if question.min is not None and question.answer < question.min:
        errors.append(f"{_label(question)} must be at least {question.min:g}")
    if question.max is not None and question.answer > question.max:
        errors.append(f"{_label(question)} must be at most {question.max:g}")
    return errors


def validate_rating_question(question: RatingQuestion, max_text_length: int) -> List[str]:
    errors = _required(question)
    low, high = RATING_RANGE
    if question.answer is not None and not low <= question.answer <= high:
        errors.append(f"{_label(question)} must be rated between {low} and {high}")
    return errors


def validate_scale_question(question: ScaleQuestion, max_text_length: int) -> List[str]:
    errors = _required(question)
    if question.answer is not None and not question.min <= question.answer <= question.max:
        errors.append(f"{_label(question)} must be between {question.min} and {question.max}")
    return errors


def validate_yes_no_question(question: YesNoQuestion, max_text_length: int) -> List[str]:
    return _required(question)


def validate_multiple_choice_question(question: MultipleChoiceQuestion, max_text_length: int) -> List[str]:
    errors = _required(question)
    invalid = [choice for choice in question.answer if choice not in question.options]
    if invalid:
        errors.append(f"{_label(question)} has invalid choices: {', '.join(invalid)}")
    if len(question.answer) > 1 and not question.allowMultiple:
        errors.append(f"{_label(question)} allows only one choice")
    return errors


def validate_text_question(question: TextQuestion, max_text_length: int) -> List[str]:
    errors = _required(question)
    if question.answer and len(question.answer) > max_text_length:
        errors.append(f"{_label(question)} must be {max_text_length} characters or fewer")
    return errors


QUESTION_VALIDATORS: Dict[str, Callable[..., List[str]]] = {
    "number": validate_number_question,
    "rating": validate_rating_question,
    "scale": validate_scale_question,
    "yes-no": validate_yes_no_question,
    "multiple-choice": validate_multiple_choice_question,
    "text": validate_text_question,
}


def validate_question(question, max_text_length: int = DEFAULT_MAX_TEXT_LENGTH) -> List[str]:
    """Run the validator registered for the question's type tag."""
    return QUESTION_VALIDATORS[question.type](question, max_text_length)
