"""Submitting an evaluation: score, merge with the stored record, upsert.

It contains `submit_evaluation`, the only write path for evaluations. Merge
errors are raised before anything is written.
"""
# app/services/evaluations.py
from datetime import date

from sqlalchemy.orm import Session

from src.app.schemas.evaluation import SubmissionIn
from src.app.core.config import settings
from src.app.core.logging import get_logs_writer_logger
from src.db.store import EvaluationStore, load_periods, load_questions
from src.evaluation.errors import PeriodMismatch
from src.evaluation.merge import MergeContext, merge
from src.evaluation.models import EvaluationRecord, PartialSubmission, ResponseKey, Section
from src.evaluation.periods import EvaluationPeriod, active_period
from src.evaluation.submission import score_selections

logger = get_logs_writer_logger()


def current_period(session: Session, today: date) -> EvaluationPeriod:
    return active_period(load_periods(session), today)


def submit_evaluation(session: Session, payload: SubmissionIn, today: date) -> EvaluationRecord:
    """Fold a submission into the evaluator's record for the active period.

    Args:
        session: The database session.
        payload: The submitted section/category.
        today: Date used to find the open period.

    Returns:
        EvaluationRecord: The record as stored.

    Raises:
        NoActivePeriod: No period is open today.
        PeriodMismatch: The payload names a period other than the open one.
        MissingAnonymityChoice, InvalidAnswer, MissingRequiredAnswer: see the merge
            and scoring rules.
    """
    period = current_period(session, today)
    if payload.period_id and payload.period_id != period.id:
        raise PeriodMismatch(period.id, payload.period_id)

    questions = load_questions(session)
    answers = score_selections(
        payload.answers, questions, payload.section, payload.category, settings.NON_SCORING_OPTION_LABELS,
    )
    submission = PartialSubmission(
        evaluator_id=payload.evaluator_id,
        subject_id=payload.subject_id,
        period_id=period.id,
        section=payload.section,
        category=payload.category,
        answers=answers,
        raw_comment=payload.comments,
        anonymity_choice=payload.anonymity_choice,
    )

    store = EvaluationStore(session)
    existing = store.get(submission.key)
    period_anonymity = None
    if payload.section == Section.peer:
        own = store.get(ResponseKey(payload.evaluator_id, payload.evaluator_id, period.id))
        period_anonymity = own.is_anonymous if own else None

    record = merge(existing, submission, MergeContext(questions=questions, period_anonymity=period_anonymity))
    saved = store.upsert(record)
    logger.info(
        "Saved %s evaluation %s (category=%r, answers=%d, merged=%s)",
        payload.section.value, submission.key, payload.category, len(saved.answers), existing is not None,
    )
    return saved
