#!/usr/bin/env python
from datetime import date, timedelta

from src.db import Base
from src.db.models import EvaluationPeriodRow, Profile, QuestionCategory, QuestionRow
from src.db.session import LocalSession, engine
from src.evaluation.models import QuestionType, Section

CATEGORIES = [
    ("Comunicación", Section.peer, "Claridad y oportunidad al compartir información."),
    ("Trabajo en equipo", Section.peer, "Colaboración con colegas y otras áreas."),
    ("Limpieza", Section.internal, "Estado de aulas y espacios comunes."),
    ("Plataforma", Section.internal, "Uso de la plataforma institucional."),
]

QUESTIONS = [
    ("Comparte información relevante a tiempo.", "Comunicación", Section.peer, QuestionType.scale, None),
    ("Escucha y responde con respeto.", "Comunicación", Section.peer, QuestionType.scale, None),
    ("Apoya a sus compañeros cuando lo necesitan.", "Trabajo en equipo", Section.peer, QuestionType.scale, None),
    ("Las aulas se mantienen limpias.", "Limpieza", Section.internal, QuestionType.scale, None),
    ("La plataforma es fácil de usar.", "Plataforma", Section.internal, QuestionType.scale,
     ["Totalmente en desacuerdo", "En desacuerdo", "De acuerdo", "Totalmente de acuerdo", "No uso la plataforma"]),
    ("¿Qué mejorarías de la plataforma?", "Plataforma", Section.internal, QuestionType.text, []),
]


def get_or_create(db, model, filters: dict, **kwargs):
    obj = db.query(model).filter_by(**filters).first()
    if obj:
        return obj
    obj = model(**filters, **kwargs)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def main():
    Base.metadata.create_all(bind=engine)
    db = LocalSession()
    try:
        director = get_or_create(db, Profile, {"email": "direccion@example.com"}, name="Diana Directora", role="Dirección", is_admin=True)
        staff = get_or_create(db, Profile, {"email": "docente@example.com"}, name="Tomás Docente", role="Docente")
        assistant = get_or_create(db, Profile, {"email": "asistente@example.com"}, name="Ana Asistente", role="Asistente")

        for order, (name, section, description) in enumerate(CATEGORIES):
            get_or_create(db, QuestionCategory, {"name": name}, section=section, description=description, sort_order=order)
        for order, (text, category, section, question_type, options) in enumerate(QUESTIONS):
            get_or_create(
                db, QuestionRow, {"text": text},
                category=category, section=section, question_type=question_type,
                options=options, is_required=question_type == QuestionType.scale, sort_order=order,
            )

        today = date.today()
        period = get_or_create(
            db, EvaluationPeriodRow, {"academic_year": str(today.year), "period_number": 1},
            name="Primer periodo", starts_at=today, ends_at=today + timedelta(days=30),
        )

        print("Seeded profiles:")
        print(f"Director id:  {director.id}")
        print(f"Staff id:     {staff.id}")
        print(f"Assistant id: {assistant.id}")
        print(f"Period id:    {period.id} ({period.starts_at} .. {period.ends_at})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
