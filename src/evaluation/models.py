"""Pydantic models shared by the evaluation core.

Questions, categories and employees are catalog data owned by collaborators;
the core receives them as explicit arguments and never mutates them.
"""
# evaluation/models.py
import enum
from datetime import datetime, timezone
from typing import NamedTuple

from pydantic import BaseModel, Field, field_validator, model_validator

from src.evaluation.comment_tags import is_valid_category

DEFAULT_SCALE_OPTIONS = [
    "Totalmente en desacuerdo",
    "En desacuerdo",
    "De acuerdo",
    "Totalmente de acuerdo",
]

AnswerValue = float | str


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Section(str, enum.Enum):
    peer = "peer"
    internal = "internal"


class QuestionType(str, enum.Enum):
    scale = "scale"
    text = "text"


class Question(BaseModel):
    id: int
    text: str
    category: str
    section: Section = Section.peer
    question_type: QuestionType = QuestionType.scale
    options: list[str] = Field(default_factory=list)
    is_required: bool = True
    sort_order: int = 0

    class Config:
        from_attributes = True

    @model_validator(mode="after")
    def _default_scale_options(self):
        if self.question_type == QuestionType.scale:
            if not self.options:
                self.options = list(DEFAULT_SCALE_OPTIONS)
            if len(self.options) < 2:
                raise ValueError("scale questions need at least two options")
        return self

    @property
    def is_scale(self) -> bool:
        return self.question_type == QuestionType.scale

    @property
    def option_count(self) -> int:
        return len(self.options)


class Category(BaseModel):
    name: str
    section: Section = Section.peer
    description: str | None = None
    sort_order: int = 0

    class Config:
        from_attributes = True


class Employee(BaseModel):
    id: str
    name: str
    role: str = ""
    email: str | None = None
    campus: str | None = None

    class Config:
        from_attributes = True


class ResponseKey(NamedTuple):
    evaluator_id: str
    subject_id: str
    period_id: str


class EvaluationRecord(BaseModel):
    """One persisted response per (evaluator, subject, period)."""
    evaluator_id: str
    subject_id: str
    period_id: str
    answers: dict[int, AnswerValue] = Field(default_factory=dict)
    comments: str = ""
    is_anonymous: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    class Config:
        from_attributes = True

    @property
    def key(self) -> ResponseKey:
        return ResponseKey(self.evaluator_id, self.subject_id, self.period_id)

    @property
    def is_self_evaluation(self) -> bool:
        return self.evaluator_id == self.subject_id


class PartialSubmission(BaseModel):
    """Answers for one completed section/category plus a raw comment."""
    evaluator_id: str
    subject_id: str
    period_id: str
    section: Section
    category: str | None = None
    answers: dict[int, AnswerValue] = Field(default_factory=dict)
    raw_comment: str = ""
    anonymity_choice: bool | None = None

    @field_validator("category")
    @classmethod
    def _taggable_category(cls, value: str | None):
        if value is not None and not is_valid_category(value):
            raise ValueError("category cannot contain ']' or '|'")
        return value

    @model_validator(mode="after")
    def _internal_is_self(self):
        if self.section == Section.internal and self.subject_id != self.evaluator_id:
            raise ValueError("internal submissions must have subject_id == evaluator_id")
        return self

    @property
    def key(self) -> ResponseKey:
        return ResponseKey(self.evaluator_id, self.subject_id, self.period_id)
