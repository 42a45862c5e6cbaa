# db/models/question.py
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import JSON, String, Text, Integer, Boolean, Enum, ForeignKey
from src.db import Base
from src.evaluation.models import QuestionType, Section


class QuestionCategory(Base):
    __tablename__ = "question_categories"

    name: Mapped[str] = mapped_column(String, primary_key=True)
    section: Mapped[Section] = mapped_column(Enum(Section), default=Section.peer, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    questions = relationship("QuestionRow", back_populates="category_row")


class QuestionRow(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String, ForeignKey("question_categories.name", onupdate="CASCADE"), nullable=False, index=True)
    section: Mapped[Section] = mapped_column(Enum(Section), default=Section.peer, nullable=False)
    question_type: Mapped[QuestionType] = mapped_column(Enum(QuestionType), default=QuestionType.scale, nullable=False)
    options: Mapped[list | None] = mapped_column(JSON, nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    category_row = relationship("QuestionCategory", back_populates="questions")
