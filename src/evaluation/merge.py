"""Folding partial survey submissions into the persisted evaluation record.

Internal (self/institutional) surveys are answered one category at a time and
merged into one record per (evaluator, subject, period); peer surveys cover the
whole evaluation in one submission and replace the record.
"""
# evaluation/merge.py
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Sequence

from src.evaluation.catalog import answered_categories, index_questions
from src.evaluation.comment_tags import (
    encode_block,
    has_internal_tags,
    is_valid_category,
    join_blocks,
    parse_block,
    split_blocks,
)
from src.evaluation.errors import MissingAnonymityChoice, PeriodMismatch, ResponseKeyMismatch
from src.evaluation.models import EvaluationRecord, PartialSubmission, Question, Section, utcnow

logger = logging.getLogger(__name__)


@dataclass
class MergeContext:
    """Collaborator data the merge needs besides the two records.

    Attributes:
        questions: The active question catalog.
        period_anonymity: The evaluator's internal-survey anonymity flag for the
            submission's period, if that record exists.
        now: Clock used for the creation timestamp of new records.
    """
    questions: Sequence[Question] = field(default_factory=list)
    period_anonymity: bool | None = None
    now: Callable[[], datetime] = utcnow


def check_key(existing: EvaluationRecord, incoming: PartialSubmission) -> None:
    if existing.period_id != incoming.period_id:
        raise PeriodMismatch(existing.period_id, incoming.period_id)
    if existing.evaluator_id != incoming.evaluator_id:
        raise ResponseKeyMismatch("evaluator_id", existing.evaluator_id, incoming.evaluator_id)
    if existing.subject_id != incoming.subject_id:
        raise ResponseKeyMismatch("subject_id", existing.subject_id, incoming.subject_id)


def resolve_anonymity(
    existing: EvaluationRecord | None,
    incoming: PartialSubmission,
    period_anonymity: bool | None = None,
) -> bool:
    """Explicit choice, then the record's flag, then the period-level flag.

    An internal survey without a prior record must state its choice up front.
    """
    if incoming.anonymity_choice is not None:
        return incoming.anonymity_choice
    if existing is not None:
        return existing.is_anonymous
    if incoming.section == Section.internal:
        raise MissingAnonymityChoice()
    if period_anonymity is not None:
        return period_anonymity
    return False


def legacy_comment_as_block(existing: EvaluationRecord, questions: Sequence[Question]) -> str:
    """Tag a comment written before tagging existed.

    The category is inferred only when the record's internal answers belong to
    exactly one category.
    """
    text = (existing.comments or "").strip()
    if not text or has_internal_tags(text):
        return text
    categories = answered_categories(existing.answers, index_questions(questions, Section.internal))
    single = categories[0] if len(categories) == 1 else None
    return encode_block(single if single and is_valid_category(single) else None, text)


def merge_comment_blocks(existing_comment: str, new_block: str) -> str:
    """Put `new_block` into the stored comment, replacing its category's block.

    Re-submitting a category therefore never duplicates its block. Blocks
    without a category are appended unless an identical one is already there.
    """
    blocks = split_blocks(existing_comment)
    if not new_block:
        return join_blocks(blocks)

    incoming = parse_block(new_block)
    merged: list[str] = []
    placed = False
    for block in blocks:
        current = parse_block(block)
        if incoming.category and current.category == incoming.category:
            if not placed:
                merged.append(incoming.raw)
                placed = True
            continue
        if not incoming.category and current.raw == incoming.raw:
            placed = True
        merged.append(block)
    if not placed:
        merged.append(incoming.raw)
    return join_blocks(merged)


def merge(
    existing: EvaluationRecord | None,
    incoming: PartialSubmission,
    context: MergeContext | None = None,
) -> EvaluationRecord:
    """Combine a partial submission with the stored record for the same key.

    Args:
        existing: The persisted record for `incoming.key`, or None.
        incoming: Answers and raw comment for the section/category just completed.
        context: Question catalog, period-level anonymity and clock.

    Returns:
        EvaluationRecord: The record to upsert. `existing` is not modified.

    Raises:
        PeriodMismatch: `existing` belongs to another period.
        ResponseKeyMismatch: `existing` belongs to another evaluator or subject.
        MissingAnonymityChoice: First internal submission without a choice.
    """
    context = context or MergeContext()
    if existing is not None:
        check_key(existing, incoming)

    is_anonymous = resolve_anonymity(existing, incoming, context.period_anonymity)
    should_merge = incoming.section == Section.internal and existing is not None

    if incoming.section == Section.internal:
        new_block = encode_block(incoming.category, incoming.raw_comment)
    else:
        new_block = (incoming.raw_comment or "").strip()

    if should_merge:
        answers = {**existing.answers, **incoming.answers}
        comments = merge_comment_blocks(legacy_comment_as_block(existing, context.questions), new_block)
        logger.debug(
            "Merged category %r into evaluation %s (%d answers)",
            incoming.category, incoming.key, len(answers),
        )
    else:
        answers = dict(incoming.answers)
        comments = new_block

    return EvaluationRecord(
        evaluator_id=incoming.evaluator_id,
        subject_id=incoming.subject_id,
        period_id=incoming.period_id,
        answers=answers,
        comments=comments,
        is_anonymous=is_anonymous,
        created_at=existing.created_at if existing is not None else context.now(),
    )
