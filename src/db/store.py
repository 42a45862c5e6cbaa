"""Evaluation record store and catalog readers over the SQLAlchemy session.

The store is the only place that touches persistence for evaluations:
`upsert` writes one record per (evaluator, subject, period) in a single
transaction and `list` gives filtered bulk reads for reporting.
"""
# db/store.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.db.models import Evaluation, EvaluationPeriodRow, Profile, QuestionCategory, QuestionRow
from src.evaluation.models import Category, Employee, EvaluationRecord, Question, ResponseKey
from src.evaluation.periods import EvaluationPeriod


def _to_record(row: Evaluation) -> EvaluationRecord:
    return EvaluationRecord(
        evaluator_id=row.evaluator_id,
        subject_id=row.subject_id,
        period_id=row.period_id,
        answers=row.answers or {},
        comments=row.comments or "",
        is_anonymous=row.is_anonymous,
        created_at=row.created_at,
    )


class EvaluationStore:
    def __init__(self, session: Session):
        self.session = session

    def _row(self, key: ResponseKey) -> Evaluation | None:
        return self.session.execute(
            select(Evaluation).where(
                Evaluation.evaluator_id == key.evaluator_id,
                Evaluation.subject_id == key.subject_id,
                Evaluation.period_id == key.period_id,
            )
        ).scalar_one_or_none()

    def get(self, key: ResponseKey) -> EvaluationRecord | None:
        row = self._row(key)
        return _to_record(row) if row else None

    def upsert(self, record: EvaluationRecord) -> EvaluationRecord:
        """Insert or replace the record stored under `record.key`.

        Errors from the database propagate after the transaction is rolled
        back; the caller decides whether to retry.
        """
        answers = {str(question_id): value for question_id, value in record.answers.items()}
        try:
            row = self._row(record.key)
            if row is None:
                row = Evaluation(
                    evaluator_id=record.evaluator_id,
                    subject_id=record.subject_id,
                    period_id=record.period_id,
                    created_at=record.created_at,
                )
                self.session.add(row)
            row.answers = answers
            row.comments = record.comments
            row.is_anonymous = record.is_anonymous
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(row)
        return _to_record(row)

    def list(
        self,
        period_id: str | None = None,
        evaluator_id: str | None = None,
        subject_id: str | None = None,
    ) -> list[EvaluationRecord]:
        q = select(Evaluation)
        if period_id:
            q = q.where(Evaluation.period_id == period_id)
        if evaluator_id:
            q = q.where(Evaluation.evaluator_id == evaluator_id)
        if subject_id:
            q = q.where(Evaluation.subject_id == subject_id)
        rows = self.session.execute(q.order_by(Evaluation.created_at)).scalars().all()
        return [_to_record(row) for row in rows]


def load_questions(session: Session, include_inactive: bool = False) -> list[Question]:
    q = select(QuestionRow).order_by(QuestionRow.sort_order, QuestionRow.id)
    if not include_inactive:
        q = q.where(QuestionRow.is_active.is_(True))
    return [
        Question(
            id=row.id,
            text=row.text,
            category=row.category,
            section=row.section,
            question_type=row.question_type,
            options=row.options or [],
            is_required=row.is_required,
            sort_order=row.sort_order,
        )
        for row in session.execute(q).scalars().all()
    ]


def load_categories(session: Session) -> list[Category]:
    rows = session.execute(select(QuestionCategory)).scalars().all()
    return [Category.model_validate(row) for row in rows]


def load_employees(session: Session) -> list[Employee]:
    rows = session.execute(select(Profile).order_by(Profile.name)).scalars().all()
    return [Employee.model_validate(row) for row in rows]


def load_periods(session: Session) -> list[EvaluationPeriod]:
    rows = session.execute(select(EvaluationPeriodRow).order_by(EvaluationPeriodRow.starts_at)).scalars().all()
    return [EvaluationPeriod.model_validate(row) for row in rows]
