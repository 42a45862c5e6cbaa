"""Shared fixtures: a small question catalog, record factories and an API client
backed by an in-memory SQLite database.
"""
import os
import tempfile
from datetime import date, datetime, timezone

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_PATH", tempfile.mkdtemp(prefix="peer-evaluations-logs-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.app.core.dependencies import get_today
from src.app.main import app
from src.app.routers.reports import get_llm_client
from src.db import Base
from src.db.models import EvaluationPeriodRow, Profile, QuestionCategory, QuestionRow
from src.db.session import get_db
from src.evaluation.models import Category, Employee, EvaluationRecord, Question, QuestionType, Section

TODAY = date(2026, 10, 18)
PERIOD_ID = "period-2026-2"
PAST_PERIOD_ID = "period-2026-1"

PLATFORM_OPTIONS = [
    "Totalmente en desacuerdo",
    "En desacuerdo",
    "De acuerdo",
    "Totalmente de acuerdo",
    "No uso la plataforma",
]


def make_questions() -> list[Question]:
    return [
        Question(id=1, text="Comparte información a tiempo.", category="Comunicación", section=Section.peer, sort_order=1),
        Question(id=2, text="Escucha con respeto.", category="Comunicación", section=Section.peer, sort_order=2),
        Question(id=3, text="Apoya a sus compañeros.", category="Trabajo en equipo", section=Section.peer, sort_order=3),
        Question(id=10, text="Las aulas están limpias.", category="Limpieza", section=Section.internal, sort_order=10),
        Question(
            id=11, text="La plataforma es fácil de usar.", category="Plataforma",
            section=Section.internal, options=PLATFORM_OPTIONS, sort_order=11,
        ),
        Question(
            id=12, text="¿Qué mejorarías?", category="Plataforma", section=Section.internal,
            question_type=QuestionType.text, is_required=False, sort_order=12,
        ),
        Question(id=13, text="La comida es buena.", category="Alimentación", section=Section.internal, sort_order=13),
    ]


def make_categories() -> list[Category]:
    return [
        Category(name="Trabajo en equipo", section=Section.peer, description="Colaboración.", sort_order=2),
        Category(name="Comunicación", section=Section.peer, description="Claridad al comunicar.", sort_order=1),
        Category(name="Limpieza", section=Section.internal, sort_order=1),
        Category(name="Plataforma", section=Section.internal, sort_order=2),
        Category(name="Alimentación", section=Section.internal, sort_order=3),
    ]


def make_employees() -> list[Employee]:
    return [
        Employee(id="ana", name="Ana Pérez", role="Docente"),
        Employee(id="bruno", name="Bruno Díaz", role="Coordinador"),
        Employee(id="carla", name="Carla Ruiz", role="Asistente"),
    ]


def make_record(
    evaluator_id: str = "ana",
    subject_id: str = "bruno",
    period_id: str = PERIOD_ID,
    answers: dict | None = None,
    comments: str = "",
    is_anonymous: bool = False,
) -> EvaluationRecord:
    return EvaluationRecord(
        evaluator_id=evaluator_id,
        subject_id=subject_id,
        period_id=period_id,
        answers=answers or {},
        comments=comments,
        is_anonymous=is_anonymous,
        created_at=datetime(2026, 10, 5, 9, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def questions():
    return make_questions()


@pytest.fixture
def categories():
    return make_categories()


@pytest.fixture
def employees():
    return make_employees()


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        message = type("Message", (), {"content": self.content})()
        choice = type("Choice", (), {"message": message})()
        return type("Completion", (), {"choices": [choice]})()


class FakeLLMClient:
    """Stands in for `AsyncOpenAI`: records requests and returns fixed content."""

    def __init__(self, content="Resumen ejecutivo."):
        self.completions = FakeCompletions(content)
        self.chat = type("Chat", (), {"completions": self.completions})()


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def seed_catalog(session):
    for employee in make_employees():
        session.add(Profile(id=employee.id, name=employee.name, role=employee.role))
    for category in make_categories():
        session.add(QuestionCategory(
            name=category.name, section=category.section,
            description=category.description, sort_order=category.sort_order,
        ))
    for question in make_questions():
        session.add(QuestionRow(
            id=question.id, text=question.text, category=question.category,
            section=question.section, question_type=question.question_type,
            options=question.options, is_required=question.is_required, sort_order=question.sort_order,
        ))
    session.add(EvaluationPeriodRow(
        id=PAST_PERIOD_ID, name="Primer periodo", academic_year="2026", period_number=1,
        starts_at=date(2026, 3, 1), ends_at=date(2026, 3, 31),
    ))
    session.add(EvaluationPeriodRow(
        id=PERIOD_ID, name="Segundo periodo", academic_year="2026", period_number=2,
        starts_at=date(2026, 10, 1), ends_at=date(2026, 10, 31),
    ))
    session.commit()


@pytest.fixture
def seeded_session(db_session):
    seed_catalog(db_session)
    return db_session


@pytest.fixture
def client(session_factory, fake_llm):
    seed = session_factory()
    try:
        seed_catalog(seed)
    finally:
        seed.close()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
