"""Turning raw survey selections into stored answers.

Scale questions arrive as option indices and leave as normalized scores, or as
the option label for a "does not apply" option. Text questions arrive and
leave as trimmed strings.
"""
# evaluation/submission.py
import logging
from typing import Mapping, Sequence

from src.evaluation.errors import InvalidAnswer, MissingRequiredAnswer
from src.evaluation.models import AnswerValue, Question, Section
from src.evaluation.scale import NON_SCORING_OPTION_LABELS, question_score

logger = logging.getLogger(__name__)


def questions_for(questions: Sequence[Question], section: Section, category: str | None = None) -> list[Question]:
    """Questions a single submission covers: one section, or one internal category."""
    return [
        q for q in questions
        if q.section == section and (category is None or q.category == category)
    ]


def has_answer(question: Question, value: AnswerValue | None) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return question.is_scale


def score_selection(
    question: Question,
    value: int | str,
    non_scoring_labels: Sequence[str] = NON_SCORING_OPTION_LABELS,
) -> AnswerValue:
    if not question.is_scale:
        return str(value).strip()
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAnswer(question.id, "expected an option index")
    if not 0 <= value < question.option_count:
        raise InvalidAnswer(question.id, f"option {value} out of range 0..{question.option_count - 1}")
    score = question_score(question, value, non_scoring_labels)
    return question.options[value] if score is None else score


def score_selections(
    selections: Mapping[int, int | str],
    questions: Sequence[Question],
    section: Section,
    category: str | None = None,
    non_scoring_labels: Sequence[str] = NON_SCORING_OPTION_LABELS,
) -> dict[int, AnswerValue]:
    """Score a submission's selections against the question catalog.

    Args:
        selections: Question id to option index (scale) or text.
        questions: The active question catalog.
        section: Section being submitted.
        category: Internal category being submitted, if any.
        non_scoring_labels: Option labels stored as text instead of a score.

    Returns:
        dict: Question id to score or text, ready for the merge.

    Raises:
        InvalidAnswer: An option index is not valid for its question.
        MissingRequiredAnswer: A required question of the covered set is unanswered.
    """
    covered = {q.id: q for q in questions_for(questions, section, category)}
    answers: dict[int, AnswerValue] = {}
    for question_id, value in selections.items():
        question = covered.get(question_id)
        if question is None:
            logger.info("Ignoring answer for question %s outside %s/%s", question_id, section.value, category)
            continue
        scored = score_selection(question, value, non_scoring_labels)
        if isinstance(scored, str) and not scored:
            continue
        answers[question_id] = scored

    missing = sorted(
        q.id for q in covered.values() if q.is_required and not has_answer(q, answers.get(q.id))
    )
    if missing:
        raise MissingRequiredAnswer(missing)
    return answers
