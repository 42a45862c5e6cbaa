"""Per-category score averages and comment attribution over stored evaluations.

Everything here is a pure function of the records and the question catalog
passed in. Malformed historical data is skipped and logged; reporting never
fails because of one bad record.
"""
# evaluation/aggregation.py
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, NamedTuple, Sequence

from pydantic import BaseModel, Field

from src.evaluation.catalog import answered_categories, index_questions
from src.evaluation.comment_tags import (
    INTERNAL_TAG,
    decode_blocks,
    parse_any_tag,
    parse_block,
    split_blocks,
)
from src.evaluation.models import EvaluationRecord, Question, Section
from src.evaluation.scale import (
    NON_SCORING_OPTION_LABELS,
    is_non_scoring_answer,
    label_for_score,
    percentage_of,
    question_range,
)

logger = logging.getLogger(__name__)

GENERAL_CATEGORY = "General"
REPORT_DECIMALS = 2


class CategoryAverage(BaseModel):
    name: str
    average: float
    percent: int
    count: int


class AggregateResult(BaseModel):
    categories: list[CategoryAverage] = Field(default_factory=list)
    total_responses: int = 0

    def category(self, name: str) -> CategoryAverage | None:
        return next((c for c in self.categories if c.name == name), None)


class CategoryComment(BaseModel):
    category: str
    text: str


class CommentEntry(BaseModel):
    """A comment body traced back to the record it came from."""
    evaluator_id: str
    subject_id: str
    period_id: str
    text: str
    category: str | None = None


class QuestionStat(BaseModel):
    id: int
    text: str
    percent: int | None = None
    count: int = 0


class OptionCount(BaseModel):
    label: str
    count: int
    percent: int


class QuestionDistribution(BaseModel):
    question_id: int
    total: int
    options: list[OptionCount]


class _Score(NamedTuple):
    question: Question
    score: float


def round_for_report(value: float, decimals: int = REPORT_DECIMALS) -> float:
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _mean_percent(total: float, count: int) -> int:
    return int(round_for_report(total / count, 0))


def filter_by_period(records: Iterable[EvaluationRecord], period_id: str | None) -> list[EvaluationRecord]:
    if not period_id:
        return list(records)
    return [r for r in records if r.period_id == period_id]


def relevant_records(
    records: Iterable[EvaluationRecord],
    question_map: dict[int, Question],
    subject_id: str | None = None,
    evaluator_id: str | None = None,
) -> list[EvaluationRecord]:
    """Records with at least one answer for a question in `question_map`."""
    out = []
    for record in records:
        if subject_id is not None and record.subject_id != subject_id:
            continue
        if evaluator_id is not None and record.evaluator_id != evaluator_id:
            continue
        if any(question_id in question_map for question_id in record.answers):
            out.append(record)
    return out


def scored_answers(
    record: EvaluationRecord,
    question_map: dict[int, Question],
    non_scoring_labels: Sequence[str] = NON_SCORING_OPTION_LABELS,
) -> list[_Score]:
    """Numeric answers of `record` for scale questions in `question_map`."""
    scores = []
    for question_id, value in record.answers.items():
        question = question_map.get(question_id)
        if question is None or not question.is_scale:
            continue
        if is_non_scoring_answer(question, value, non_scoring_labels):
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.debug("Skipping non-numeric answer %r for question %s in %s", value, question_id, record.key)
            continue
        scores.append(_Score(question, float(value)))
    return scores


def aggregate(
    responses: Iterable[EvaluationRecord],
    questions: Iterable[Question],
    section: Section | None = None,
    subject_id: str | None = None,
    *,
    evaluator_id: str | None = None,
    decimals: int = REPORT_DECIMALS,
    non_scoring_labels: Sequence[str] = NON_SCORING_OPTION_LABELS,
) -> AggregateResult:
    """Average the scale answers of `responses` per question category.

    Args:
        responses: Stored evaluations.
        questions: The question catalog; categories are taken from here, not from
            the records.
        section: Restrict to questions of one section.
        subject_id: Restrict to evaluations of one subject.
        evaluator_id: Restrict to evaluations written by one evaluator.
        decimals: Rounding of the reported averages.
        non_scoring_labels: Option labels that carry no score.

    Returns:
        AggregateResult: Categories in catalog order and the number of distinct
        evaluations that contributed at least one answer to the question set.
    """
    question_map = index_questions(questions, section)
    relevant = relevant_records(responses, question_map, subject_id=subject_id, evaluator_id=evaluator_id)

    sums: dict[str, float] = {}
    counts: dict[str, int] = {}
    percents: dict[str, int] = {}
    for record in relevant:
        for question, score in scored_answers(record, question_map, non_scoring_labels):
            rng = question_range(question, non_scoring_labels)
            sums[question.category] = sums.get(question.category, 0.0) + score
            counts[question.category] = counts.get(question.category, 0) + 1
            percents[question.category] = percents.get(question.category, 0) + percentage_of(score, rng.min, rng.max)

    order = {}
    for question in sorted(question_map.values(), key=lambda q: (q.sort_order, q.id)):
        order.setdefault(question.category, len(order))

    categories = [
        CategoryAverage(
            name=name,
            average=round_for_report(sums[name] / counts[name], decimals),
            percent=_mean_percent(percents[name], counts[name]),
            count=counts[name],
        )
        for name in sorted(counts, key=lambda n: order.get(n, len(order)))
    ]
    return AggregateResult(categories=categories, total_responses=len(relevant))


def overall_percent(result: AggregateResult) -> int | None:
    """Answer-weighted percentage across all categories of `result`."""
    total = sum(c.count for c in result.categories)
    if total == 0:
        return None
    return _mean_percent(sum(c.percent * c.count for c in result.categories), total)


def _is_internal_tag(tag: str) -> bool:
    return tag == INTERNAL_TAG or tag.startswith(f"{INTERNAL_TAG}|")


def peer_comment_entries(
    responses: Iterable[EvaluationRecord],
    questions: Iterable[Question],
    subject_id: str,
) -> list[CommentEntry]:
    """Plain comments left by colleagues about `subject_id`.

    Blocks tagged for the internal survey are skipped; any other block, tagged
    or not, is kept verbatim.
    """
    question_map = index_questions(questions, Section.peer)
    entries = []
    for record in relevant_records(responses, question_map, subject_id=subject_id):
        for block in split_blocks(record.comments):
            tagged = parse_any_tag(block)
            if tagged is not None and _is_internal_tag(tagged[0]):
                continue
            entries.append(CommentEntry(
                evaluator_id=record.evaluator_id,
                subject_id=record.subject_id,
                period_id=record.period_id,
                text=block,
            ))
    return entries


def internal_comment_entries(
    responses: Iterable[EvaluationRecord],
    questions: Iterable[Question],
    evaluator_id: str | None = None,
    general_label: str = GENERAL_CATEGORY,
) -> list[CommentEntry]:
    """Category-attributed comments from internal surveys.

    Tagged blocks keep their category. Untagged text goes to the record's only
    answered category, or to `general_label` when there is not exactly one.
    """
    question_map = index_questions(questions, Section.internal)
    entries = []
    for record in relevant_records(responses, question_map, evaluator_id=evaluator_id):
        if not (record.comments or "").strip():
            continue
        categories = answered_categories(record.answers, question_map)
        fallback = categories[0] if len(categories) == 1 else general_label
        decoded = decode_blocks(record.comments)
        pairs = [(category, text) for category, text in decoded.by_category.items() if text]
        if decoded.uncategorized:
            pairs.append((fallback, decoded.uncategorized))
        for category, text in pairs:
            entries.append(CommentEntry(
                evaluator_id=record.evaluator_id,
                subject_id=record.subject_id,
                period_id=record.period_id,
                text=text,
                category=category,
            ))
    return entries


def peer_comments_for(subject_id: str, responses: Iterable[EvaluationRecord], questions: Iterable[Question]) -> list[str]:
    return [entry.text for entry in peer_comment_entries(responses, questions, subject_id)]


def internal_comments_for(
    evaluator_id: str,
    responses: Iterable[EvaluationRecord],
    questions: Iterable[Question],
    general_label: str = GENERAL_CATEGORY,
) -> list[CategoryComment]:
    return [
        CategoryComment(category=entry.category, text=entry.text)
        for entry in internal_comment_entries(responses, questions, evaluator_id, general_label)
    ]


def comments_for(
    person_id: str,
    section: Section,
    responses: Iterable[EvaluationRecord],
    questions: Iterable[Question],
    general_label: str = GENERAL_CATEGORY,
) -> list[str] | list[CategoryComment]:
    """Peer comments about `person_id`, or internal comments written by them."""
    if section == Section.peer:
        return peer_comments_for(person_id, responses, questions)
    return internal_comments_for(person_id, responses, questions, general_label)


def category_comment_entries(
    category: str,
    responses: Iterable[EvaluationRecord],
    questions: Iterable[Question],
    section: Section | None = None,
) -> list[CommentEntry]:
    """Comments attributable to one category (case-insensitive match).

    A tagged block counts when its tag names the category; an untagged block
    counts when the record only answered questions of that category.
    """
    question_map = index_questions(questions, section)
    category_ids = {q.id for q in question_map.values() if q.category == category}
    if not category_ids:
        return []
    wanted = category.lower()

    entries = []
    for record in responses:
        if not any(question_id in category_ids for question_id in record.answers):
            continue
        if not (record.comments or "").strip():
            continue
        categories = answered_categories(record.answers, question_map)
        single = categories[0] if len(categories) == 1 else ""
        for block in split_blocks(record.comments):
            parsed = parse_block(block)
            if parsed.tagged:
                owner = parsed.category or single
            else:
                owner = single
            if not parsed.body or owner.lower() != wanted:
                continue
            entries.append(CommentEntry(
                evaluator_id=record.evaluator_id,
                subject_id=record.subject_id,
                period_id=record.period_id,
                text=parsed.body,
                category=category,
            ))
    return entries


def question_stats(
    category: str,
    responses: Iterable[EvaluationRecord],
    questions: Iterable[Question],
    section: Section | None = None,
    non_scoring_labels: Sequence[str] = NON_SCORING_OPTION_LABELS,
) -> list[QuestionStat]:
    """Average percentage and answer count for each scale question of a category."""
    category_questions = [
        q for q in sorted(questions, key=lambda q: (q.sort_order, q.id))
        if q.category == category and q.is_scale and (section is None or q.section == section)
    ]
    question_map = {q.id: q for q in category_questions}
    totals: dict[int, list[int]] = {q.id: [] for q in category_questions}
    for record in responses:
        for question, score in scored_answers(record, question_map, non_scoring_labels):
            rng = question_range(question, non_scoring_labels)
            totals[question.id].append(percentage_of(score, rng.min, rng.max))

    return [
        QuestionStat(
            id=q.id,
            text=q.text,
            percent=_mean_percent(sum(totals[q.id]), len(totals[q.id])) if totals[q.id] else None,
            count=len(totals[q.id]),
        )
        for q in category_questions
    ]


def question_distribution(
    question: Question,
    responses: Iterable[EvaluationRecord],
    non_scoring_labels: Sequence[str] = NON_SCORING_OPTION_LABELS,
) -> QuestionDistribution:
    """How many evaluations picked each option of a question."""
    counts = {label: 0 for label in question.options}
    total = 0
    for record in responses:
        value = record.answers.get(question.id)
        if value is None:
            continue
        if isinstance(value, str):
            label = next((o for o in question.options if o.strip().lower() == value.strip().lower()), None)
        else:
            label = label_for_score(question, value, non_scoring_labels)
        if label is None:
            continue
        counts[label] += 1
        total += 1

    return QuestionDistribution(
        question_id=question.id,
        total=total,
        options=[
            OptionCount(label=label, count=count, percent=_mean_percent(count * 100, total) if total else 0)
            for label, count in counts.items()
        ],
    )
