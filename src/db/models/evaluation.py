# db/models/evaluation.py
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import JSON, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint, func
from src.db import Base
import uuid


class Evaluation(Base):
    __tablename__ = "evaluations"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    evaluator_id: Mapped[str] = mapped_column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    subject_id: Mapped[str] = mapped_column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    period_id: Mapped[str] = mapped_column(String, ForeignKey("evaluation_periods.id"), nullable=False, index=True)
    # question id (as string) -> score or text
    answers: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    comments: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), server_default=func.now())

    period = relationship("EvaluationPeriodRow", back_populates="evaluations")

    __table_args__ = (
        UniqueConstraint("evaluator_id", "subject_id", "period_id", name="uq_evaluation_key"),
    )
