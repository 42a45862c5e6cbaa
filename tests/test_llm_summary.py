"""Tests for the LLM summary prompt and the HTML report rendering."""
import asyncio

import pytest

from conftest import FakeLLMClient, make_record
from src.app.core.config import settings
from src.evaluation.reporting import ReportingService
from src.llm_agg.prompts import BASE_PROMPT, NOT_ENOUGH_DATA
from src.llm_agg.reports.jinja import build_context, render_subject_report
from src.llm_agg.summary import build_summary_log, composite_comments, summarize_subject


@pytest.fixture
def report(questions, employees):
    responses = [
        make_record(evaluator_id="ana", answers={1: 1.0, 3: -1.0}, comments="Muy claro"),
        make_record(evaluator_id="carla", answers={1: 0.75, 3: -0.75}, comments="Puede mejorar", is_anonymous=True),
    ]
    return ReportingService(responses, questions, employees).per_subject_report("bruno")


class TestSummaryPrompt:
    def test_composite_comments(self):
        assert composite_comments(["a", "b"]) == "Comentario №1: a\nComentario №2: b\n"
        assert composite_comments([]) == "(sin comentarios)"

    def test_prompt_has_scores_and_comments_but_no_authors(self, report):
        log = build_summary_log(report)
        assert log[0] == {"role": "system", "content": BASE_PROMPT}
        prompt = log[1]["content"]
        assert "Bruno Díaz" in prompt
        assert "- Comunicación: 94% (2 respuestas)" in prompt
        assert prompt.index("Comunicación") < prompt.index("Trabajo en equipo")
        assert "Puede mejorar" in prompt
        assert "Carla Ruiz" not in prompt

    def test_without_system_prompt(self, report):
        assert [m["role"] for m in build_summary_log(report, SYSTEM_PROMPT=None)] == ["user"]


class TestSummarizeSubject:
    def test_calls_the_model(self, report):
        client = FakeLLMClient("Fortalezas: comunicación.")
        summary = asyncio.run(summarize_subject(client, "test-model", report))
        assert summary == "Fortalezas: comunicación."
        assert client.completions.calls[0]["model"] == "test-model"

    def test_no_peer_responses(self, questions):
        report = ReportingService([], questions).per_subject_report("bruno")
        client = FakeLLMClient()
        assert asyncio.run(summarize_subject(client, "test-model", report)) == NOT_ENOUGH_DATA
        assert client.completions.calls == []

    def test_empty_completion_raises(self, report):
        with pytest.raises(RuntimeError):
            asyncio.run(summarize_subject(FakeLLMClient(None), "test-model", report))


class TestHtmlReport:
    def test_context(self, report):
        context = build_context(report, summary="  Bien  ", period_name="Segundo periodo - 2026")
        assert context["employee_name"] == "Bruno Díaz"
        assert context["summary"] == "Bien"
        assert context["peer_total"] == 2

    def test_render(self, report):
        html = render_subject_report(settings.JINJA2_TEMPLATES, "subject_report.html", report, summary="<b>ok</b>")
        assert "Bruno Díaz" in html
        assert "Muy claro" in html
        assert "Anónimo" in html
        assert "&lt;b&gt;ok&lt;/b&gt;" in html
