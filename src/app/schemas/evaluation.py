"""Pydantic schemes for evaluation submissions and periods.
"""
# app/schemas/evaluation.py
from datetime import date, datetime
from pydantic import BaseModel, Field, field_validator, model_validator

from src.evaluation.comment_tags import is_valid_category
from src.evaluation.models import Section


class SubmissionIn(BaseModel):
    evaluator_id: str = Field(..., min_length=1)
    subject_id: str | None = Field(None, description="Evaluated colleague; defaults to the evaluator for internal surveys")
    period_id: str | None = Field(None, description="Must match the active period when given")
    section: Section
    category: str | None = Field(None, description="Internal category being submitted")
    answers: dict[int, int | str] = Field(default_factory=dict, description="Question id -> option index or text")
    comments: str = ""
    anonymity_choice: bool | None = None

    @field_validator("category")
    @classmethod
    def _taggable_category(cls, value: str | None):
        if value is not None and not is_valid_category(value):
            raise ValueError("category cannot contain ']' or '|'")
        return value

    @model_validator(mode="after")
    def _resolve_subject(self):
        if self.section == Section.internal:
            if self.subject_id not in (None, self.evaluator_id):
                raise ValueError("internal surveys are answered about the evaluator themself")
            self.subject_id = self.evaluator_id
        elif not self.subject_id:
            raise ValueError("peer evaluations need a subject_id")
        return self


class EvaluationOut(BaseModel):
    evaluator_id: str
    subject_id: str
    period_id: str
    answers: dict[int, float | str]
    comments: str
    is_anonymous: bool
    created_at: datetime

    class Config:
        from_attributes = True


class PeriodOut(BaseModel):
    id: str
    name: str
    academic_year: str
    period_number: int
    starts_at: date
    ends_at: date
    days_remaining: int
