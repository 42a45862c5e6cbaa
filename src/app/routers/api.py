"""REST API endpoints for evaluation periods and submissions.

Provides:
- the active period and the days left to answer;
- submitting a peer evaluation or one internal-survey category;
- reading back a stored evaluation and the comment of one internal category.
"""
# app/routers/api.py
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from src.app.core.dependencies import get_today
from src.app.core.errors import to_http_exception
from src.app.core.logging import get_logs_writer_logger
from src.app.schemas.evaluation import EvaluationOut, PeriodOut, SubmissionIn
from src.app.services.evaluations import current_period, submit_evaluation
from src.db.session import get_db
from src.db.store import EvaluationStore
from src.evaluation.comment_tags import comment_for_category
from src.evaluation.errors import EvaluationError
from src.evaluation.models import ResponseKey
from src.evaluation.periods import days_remaining

logger = get_logs_writer_logger()

router = APIRouter()


@router.get("/api/periods/active", response_model=PeriodOut)
async def get_active_period(db: Session = Depends(get_db), today: date = Depends(get_today)):
    """Get the period open for submissions today.

    Errors:
        409: No period is open.
    """
    try:
        period = current_period(db, today)
    except EvaluationError as e:
        raise to_http_exception(e)
    return PeriodOut(**period.model_dump(), days_remaining=days_remaining(period, today))


@router.post("/api/evaluations", response_model=EvaluationOut)
async def post_evaluation(
    payload: SubmissionIn,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Submit a peer evaluation or one category of the internal survey.

    Args:
        payload: Answers (option index or text per question), comment and anonymity choice.
        db: The DB session.
        today: Date used to find the open period.

    Returns:
        EvaluationOut: The stored evaluation after merging.

    Errors:
        409: No open period, or the payload names another period.
        422: Missing anonymity choice, invalid option or missing required answer.
    """
    try:
        record = submit_evaluation(db, payload, today)
    except EvaluationError as e:
        logger.warning("Rejected %s submission from %s: %s", payload.section.value, payload.evaluator_id, e.message)
        raise to_http_exception(e)
    return record


def _resolve_period_id(db: Session, period_id: str | None, today: date) -> str:
    if period_id:
        return period_id
    try:
        return current_period(db, today).id
    except EvaluationError as e:
        raise to_http_exception(e)


@router.get("/api/evaluations/{evaluator_id}/{subject_id}", response_model=EvaluationOut)
async def get_evaluation(
    evaluator_id: str,
    subject_id: str,
    period_id: str | None = Query(None),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Get the stored evaluation for a key; the active period is used by default.

    Errors:
        404: Nothing stored for this key.
    """
    key = ResponseKey(evaluator_id, subject_id, _resolve_period_id(db, period_id, today))
    record = EvaluationStore(db).get(key)
    if not record:
        raise HTTPException(status_code=404, detail="Evaluation not found")
    return record


@router.get("/api/evaluations/{evaluator_id}/internal/comment")
async def get_internal_category_comment(
    evaluator_id: str,
    category: str = Query(..., min_length=1),
    period_id: str | None = Query(None),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Get the comment previously written for one internal category.

    Returns:
        dict: {"category": str, "comment": str}; empty comment when nothing is stored.
    """
    key = ResponseKey(evaluator_id, evaluator_id, _resolve_period_id(db, period_id, today))
    record = EvaluationStore(db).get(key)
    comment = comment_for_category(record.comments, category) if record else ""
    return {"category": category, "comment": comment}
