# evaluation/catalog.py
from typing import Iterable, Mapping

from src.evaluation.models import AnswerValue, Category, Question, Section


def index_questions(questions: Iterable[Question], section: Section | None = None) -> dict[int, Question]:
    """Map question id to question, optionally restricted to one section."""
    return {q.id: q for q in questions if section is None or q.section == section}


def answered_categories(answers: Mapping[int, AnswerValue], question_map: Mapping[int, Question]) -> list[str]:
    """Distinct categories of the answered questions, in answer order."""
    seen: list[str] = []
    for question_id in answers:
        question = question_map.get(question_id)
        if question is not None and question.category not in seen:
            seen.append(question.category)
    return seen


def ordered_categories(
    questions: Iterable[Question],
    categories: Iterable[Category] = (),
    section: Section | None = None,
) -> list[str]:
    """Category names ordered by category metadata, then by first question.

    Categories with metadata come first by (sort_order, name); the rest keep the
    order of their first question in the catalog.
    """
    in_use: list[str] = []
    for question in sorted(questions, key=lambda q: (q.sort_order, q.id)):
        if section is not None and question.section != section:
            continue
        if question.category not in in_use:
            in_use.append(question.category)

    known = sorted(
        (c for c in categories if c.name in in_use and (section is None or c.section == section)),
        key=lambda c: (c.sort_order, c.name),
    )
    ordered = [c.name for c in known]
    ordered.extend(name for name in in_use if name not in ordered)
    return ordered
