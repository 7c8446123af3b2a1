"""
Pydantic models for the check-in form payload.

The payload is the client's in-progress form state: metrics, the
goal/achievement/challenge progress lists, dynamic questions and free
notes. Every list member carries a stable id that survives reordering.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field


def new_item_id() -> str:
    return uuid4().hex


class FieldGroup(str, Enum):
    METRICS = "metrics"
    GOALS = "goals"
    ACHIEVEMENTS = "achievements"
    CHALLENGES = "challenges"
    QUESTIONS = "questions"
    NOTES = "notes"


COLLECTION_GROUPS = (FieldGroup.GOALS, FieldGroup.ACHIEVEMENTS, FieldGroup.CHALLENGES)


# =============================================================================
# Progress lists
# =============================================================================

class Goal(BaseModel):
    id: str = Field(default_factory=new_item_id)
    name: str = ""
    status: Literal["not-started", "in-progress", "completed"] = "not-started"
    notes: str = ""


class Achievement(BaseModel):
    id: str = Field(default_factory=new_item_id)
    title: str = ""
    description: str = ""


class Challenge(BaseModel):
    id: str = Field(default_factory=new_item_id)
    description: str = ""
    plan: str = ""


# =============================================================================
# Dynamic questions (tagged by "type")
# =============================================================================

class _QuestionBase(BaseModel):
    id: str = Field(default_factory=new_item_id)
    question: str = ""
    required: bool = False


class NumberQuestion(_QuestionBase):
    type: Literal["number"] = "number"
    answer: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    unit: Optional[str] = None


class RatingQuestion(_QuestionBase):
    type: Literal["rating"] = "rating"
    answer: Optional[int] = None


class ScaleQuestion(_QuestionBase):
    type: Literal["scale"] = "scale"
    answer: Optional[int] = None
    min: int = 1
    max: int = 10


class YesNoQuestion(_QuestionBase):
    type: Literal["yes-no"] = "yes-no"
    answer: Optional[bool] = None


class MultipleChoiceQuestion(_QuestionBase):
    type: Literal["multiple-choice"] = "multiple-choice"
    options: List[str] = Field(default_factory=list)
    allowMultiple: bool = False
    answer: List[str] = Field(default_factory=list)


class TextQuestion(_QuestionBase):
    type: Literal["text"] = "text"
    answer: Optional[str] = None


Question = Annotated[
    Union[
        NumberQuestion,
        RatingQuestion,
        ScaleQuestion,
        YesNoQuestion,
        MultipleChoiceQuestion,
        TextQuestion,
    ],
    Field(discriminator="type"),
]


# =============================================================================
# Payload
# =============================================================================

class CheckInPayload(BaseModel):
    """Editable form state of one check-in."""
    metrics: Dict[str, Optional[float]] = Field(default_factory=dict)
    goals: List[Goal] = Field(default_factory=list)
    achievements: List[Achievement] = Field(default_factory=list)
    challenges: List[Challenge] = Field(default_factory=list)
    questions: List[Question] = Field(default_factory=list)
    notes: str = ""


ITEM_MODELS = {
    FieldGroup.GOALS: Goal,
    FieldGroup.ACHIEVEMENTS: Achievement,
    FieldGroup.CHALLENGES: Challenge,
}


class DraftRecord(BaseModel):
    """Persisted draft as stored under draft:{ownerKey}."""
    payload: dict
    lastSavedAt: datetime
