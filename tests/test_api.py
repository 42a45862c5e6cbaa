"""HTTP tests for submissions and reports against an in-memory database."""
from conftest import PAST_PERIOD_ID, PERIOD_ID


def submit(client, **payload):
    return client.post("/api/evaluations", json=payload)


class TestHealthAndPeriods:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_active_period(self, client):
        response = client.get("/api/periods/active")
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == PERIOD_ID
        assert body["days_remaining"] == 14


class TestSubmitEvaluation:
    """POST /api/evaluations"""

    def test_internal_survey_in_two_steps(self, client):
        first = submit(
            client, evaluator_id="ana", section="internal", category="Limpieza",
            answers={"10": 3}, comments="todo limpio", anonymity_choice=True,
        )
        assert first.status_code == 200
        assert first.json()["comments"] == "[[internal|Limpieza]] todo limpio"

        second = submit(
            client, evaluator_id="ana", section="internal", category="Plataforma",
            answers={"11": 2, "12": "más rápida"}, comments="lenta",
        )
        assert second.status_code == 200
        body = second.json()
        assert body["subject_id"] == "ana"
        assert body["period_id"] == PERIOD_ID
        assert body["is_anonymous"] is True
        assert body["answers"] == {"10": 1.0, "11": 0.75, "12": "más rápida"}
        assert body["comments"] == "[[internal|Limpieza]] todo limpio\n\n[[internal|Plataforma]] lenta"

        stored = client.get("/api/evaluations/ana/ana").json()
        assert stored == body

    def test_resubmission_does_not_duplicate(self, client):
        payload = dict(
            evaluator_id="ana", section="internal", category="Limpieza",
            answers={"10": 3}, comments="todo limpio", anonymity_choice=False,
        )
        first = submit(client, **payload).json()
        second = submit(client, **payload).json()
        assert first == second

    def test_internal_survey_needs_anonymity_choice(self, client):
        response = submit(client, evaluator_id="ana", section="internal", category="Limpieza", answers={"10": 3})
        assert response.status_code == 422
        assert "anónima" in response.json()["detail"]

    def test_peer_evaluation_follows_internal_anonymity(self, client):
        submit(
            client, evaluator_id="carla", section="internal", category="Limpieza",
            answers={"10": 0}, anonymity_choice=True,
        )
        response = submit(
            client, evaluator_id="carla", subject_id="bruno", section="peer",
            answers={"1": 3, "2": 2, "3": 1}, comments="Gran apoyo",
        )
        assert response.status_code == 200
        assert response.json()["is_anonymous"] is True

    def test_peer_evaluation_replaces_previous_answers(self, client):
        submit(client, evaluator_id="ana", subject_id="bruno", section="peer",
               answers={"1": 0, "2": 0, "3": 0}, comments="antes")
        response = submit(client, evaluator_id="ana", subject_id="bruno", section="peer",
                          answers={"1": 3, "2": 3, "3": 3}, comments="después")
        assert response.json()["answers"] == {"1": 1.0, "2": 1.0, "3": 1.0}
        assert response.json()["comments"] == "después"

    def test_peer_evaluation_needs_subject(self, client):
        response = submit(client, evaluator_id="ana", section="peer", answers={"1": 3})
        assert response.status_code == 422

    def test_missing_required_answers(self, client):
        response = submit(client, evaluator_id="ana", subject_id="bruno", section="peer", answers={"1": 3})
        assert response.status_code == 422

    def test_invalid_option(self, client):
        response = submit(
            client, evaluator_id="ana", section="internal", category="Limpieza",
            answers={"10": 7}, anonymity_choice=True,
        )
        assert response.status_code == 422

    def test_category_with_tag_delimiters_is_rejected(self, client):
        response = submit(
            client, evaluator_id="ana", section="internal", category="Aulas|Baños",
            answers={"10": 3}, comments="x", anonymity_choice=True,
        )
        assert response.status_code == 422
        assert client.get("/api/evaluations/ana/ana").status_code == 404

    def test_other_period_is_rejected(self, client):
        response = submit(
            client, evaluator_id="ana", section="internal", category="Limpieza",
            answers={"10": 3}, anonymity_choice=True, period_id=PAST_PERIOD_ID,
        )
        assert response.status_code == 409

    def test_unknown_evaluation(self, client):
        assert client.get("/api/evaluations/ana/bruno").status_code == 404

    def test_internal_category_comment(self, client):
        submit(
            client, evaluator_id="ana", section="internal", category="Limpieza",
            answers={"10": 3}, comments="todo limpio", anonymity_choice=True,
        )
        response = client.get("/api/evaluations/ana/internal/comment", params={"category": "Limpieza"})
        assert response.json() == {"category": "Limpieza", "comment": "todo limpio"}
        response = client.get("/api/evaluations/ana/internal/comment", params={"category": "Plataforma"})
        assert response.json()["comment"] == ""


class TestReports:
    """GET/POST /api/reports/..."""

    def _fill(self, client):
        submit(client, evaluator_id="ana", section="internal", category="Limpieza",
               answers={"10": 3}, comments="todo limpio", anonymity_choice=True)
        submit(client, evaluator_id="ana", subject_id="bruno", section="peer",
               answers={"1": 3, "2": 3, "3": 2}, comments="Muy claro")
        submit(client, evaluator_id="carla", subject_id="bruno", section="peer",
               answers={"1": 0, "2": 1, "3": 3}, comments="Puede mejorar", anonymity_choice=False)

    def test_subject_report(self, client):
        self._fill(client)
        response = client.get("/api/reports/subjects/bruno")
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Bruno Díaz"
        assert body["peer"]["total_responses"] == 2
        assert {c["author"] for c in body["peer_comments"]} == {"Anónimo", "Carla Ruiz"}

    def test_unknown_subject(self, client):
        assert client.get("/api/reports/subjects/nadie").status_code == 404

    def test_past_period_is_empty(self, client):
        self._fill(client)
        body = client.get("/api/reports/subjects/bruno", params={"period_id": PAST_PERIOD_ID}).json()
        assert body["peer"]["total_responses"] == 0

    def test_subject_report_html(self, client):
        self._fill(client)
        response = client.get("/api/reports/subjects/bruno/html")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Bruno Díaz" in response.text
        assert "Segundo periodo" in response.text
        assert "Resumen ejecutivo." not in response.text

    def test_subject_report_html_with_analysis(self, client, fake_llm):
        self._fill(client)
        response = client.get("/api/reports/subjects/bruno/html", params={"analysis": True})
        assert response.status_code == 200
        assert "Resumen ejecutivo." in response.text
        assert len(fake_llm.completions.calls) == 1

    def test_subject_report_html_analysis_failure(self, client, fake_llm):
        self._fill(client)
        fake_llm.completions.content = None
        response = client.get("/api/reports/subjects/bruno/html", params={"analysis": True})
        assert response.status_code == 502

    def test_category_report(self, client):
        self._fill(client)
        body = client.get("/api/reports/categories/Comunicación").json()
        assert body["section"] == "peer"
        assert body["total_responses"] == 2
        assert [q["id"] for q in body["questions"]] == [1, 2]

    def test_unknown_category(self, client):
        assert client.get("/api/reports/categories/Nada").status_code == 404

    def test_overall_report(self, client):
        self._fill(client)
        body = client.get("/api/reports/overall").json()
        assert body["peer"]["total_responses"] == 2
        assert body["internal"]["total_responses"] == 1
        assert [s["subject_id"] for s in body["subjects"]] == ["bruno"]

    def test_analysis(self, client, fake_llm):
        self._fill(client)
        response = client.post("/api/reports/subjects/bruno/analysis")
        assert response.status_code == 200
        assert response.json() == {"subject_id": "bruno", "summary": "Resumen ejecutivo."}
        assert len(fake_llm.completions.calls) == 1

    def test_analysis_without_data_skips_the_model(self, client, fake_llm):
        response = client.post("/api/reports/subjects/bruno/analysis")
        assert response.json()["summary"] == "No hay suficientes datos para un análisis."
        assert fake_llm.completions.calls == []

    def test_analysis_failure(self, client, fake_llm):
        self._fill(client)
        fake_llm.completions.content = None
        assert client.post("/api/reports/subjects/bruno/analysis").status_code == 502
