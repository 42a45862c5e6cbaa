# db/models/period.py
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Integer, Date, DateTime, CheckConstraint, UniqueConstraint, func
from src.db import Base
import uuid


class EvaluationPeriodRow(Base):
    __tablename__ = "evaluation_periods"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String, nullable=False)
    academic_year: Mapped[str] = mapped_column(String, nullable=False)
    period_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    starts_at: Mapped["Date"] = mapped_column(Date, nullable=False)
    ends_at: Mapped["Date"] = mapped_column(Date, nullable=False)
    created_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), server_default=func.now())

    evaluations = relationship("Evaluation", back_populates="period")

    __table_args__ = (
        UniqueConstraint("academic_year", "period_number", name="uq_period_year_number"),
        CheckConstraint("starts_at <= ends_at", name="ck_period_dates"),
        CheckConstraint("period_number >= 1", name="ck_period_number"),
    )
