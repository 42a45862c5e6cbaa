"""Read-only report endpoints.

Reports are computed on request from the stored evaluations of one period
(the active one unless `period_id` is given; all periods when none is open).
"""
# app/routers/reports.py
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from src.app.core.config import settings, OPENAI_CLIENT
from src.app.core.dependencies import get_today
from src.app.core.logging import get_logs_writer_logger
from src.db.session import get_db
from src.db.store import EvaluationStore, load_categories, load_employees, load_periods, load_questions
from src.evaluation.errors import NoActivePeriod
from src.evaluation.models import Section
from src.evaluation.periods import active_period
from src.evaluation.reporting import CategoryReport, OverallReport, ReportingService, SubjectReport
from src.llm_agg.reports.jinja import render_subject_report
from src.llm_agg.summary import summarize_subject

logger = get_logs_writer_logger()

router = APIRouter(prefix="/api/reports")


def get_llm_client():
    return OPENAI_CLIENT


def _period_label(db: Session, period_id: str | None) -> str:
    for period in load_periods(db):
        if period.id == period_id:
            return f"{period.name} - {period.academic_year}"
    return ""


def _selected_period_id(db: Session, period_id: str | None, today: date) -> str | None:
    if period_id:
        return period_id
    try:
        return active_period(load_periods(db), today).id
    except NoActivePeriod:
        return None


async def _summary_or_502(client, subject_id: str, report: SubjectReport) -> str:
    try:
        return await summarize_subject(client, settings.MODEL_NAME, report)
    except Exception as e:
        logger.error("Analysis for %s failed: %s", subject_id, e)
        raise HTTPException(status_code=502, detail="No se pudo generar el análisis de IA en este momento.")


def get_reporting(
    period_id: str | None = Query(None),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
) -> ReportingService:
    selected = _selected_period_id(db, period_id, today)
    return ReportingService(
        EvaluationStore(db).list(period_id=selected),
        load_questions(db),
        load_employees(db),
        load_categories(db),
        general_label=settings.GENERAL_CATEGORY_LABEL,
        anonymous_label=settings.ANONYMOUS_LABEL,
        decimals=settings.REPORT_DECIMALS,
        non_scoring_labels=settings.NON_SCORING_OPTION_LABELS,
    )


@router.get("/overall", response_model=OverallReport)
async def overall(reporting: ReportingService = Depends(get_reporting)):
    """Organisation-wide category averages and the per-subject peer summary."""
    return reporting.overall_report()


@router.get("/subjects/{subject_id}", response_model=SubjectReport)
async def subject_report(subject_id: str, reporting: ReportingService = Depends(get_reporting)):
    """Peer results and internal survey of one employee.

    Errors:
        404: The employee is unknown and nothing was found for them.
    """
    report = reporting.per_subject_report(subject_id)
    if subject_id not in reporting.employees and report.peer.total_responses == 0 and report.internal.total_responses == 0:
        raise HTTPException(status_code=404, detail="Employee not found")
    return report


@router.get("/subjects/{subject_id}/html", response_class=HTMLResponse)
async def subject_report_html(
    subject_id: str,
    period_id: str | None = Query(None),
    db: Session = Depends(get_db),
    analysis: bool = Query(False, description="Add the LLM summary above the scores"),
    today: date = Depends(get_today),
    reporting: ReportingService = Depends(get_reporting),
    client=Depends(get_llm_client),
):
    """Printable HTML version of the subject report.

    Errors:
        502: `analysis` was requested and the model failed.
    """
    report = reporting.per_subject_report(subject_id)
    summary = await _summary_or_502(client, subject_id, report) if analysis else None
    html = render_subject_report(
        settings.JINJA2_TEMPLATES,
        "subject_report.html",
        report,
        summary=summary,
        period_name=_period_label(db, _selected_period_id(db, period_id, today)),
    )
    return HTMLResponse(html)


@router.post("/subjects/{subject_id}/analysis")
async def subject_analysis(
    subject_id: str,
    reporting: ReportingService = Depends(get_reporting),
    client=Depends(get_llm_client),
):
    """Generate a narrative summary of the subject's peer results with the LLM.

    Errors:
        502: The model returned nothing or the request failed.
    """
    report = reporting.per_subject_report(subject_id)
    summary = await _summary_or_502(client, subject_id, report)
    return {"subject_id": subject_id, "summary": summary}


@router.get("/categories/{category}", response_model=CategoryReport)
async def category_report(
    category: str,
    section: Section | None = Query(None),
    reporting: ReportingService = Depends(get_reporting),
):
    """Average, per-question breakdown, answer distribution and comments of a category.

    Errors:
        404: No question uses this category.
    """
    if not any(q.category == category for q in reporting.questions):
        raise HTTPException(status_code=404, detail="Category not found")
    return reporting.per_category_report(category, section)
