"""
End-to-End Tests for the HTTP API

The interview service is swapped in through FastAPI dependency overrides,
with a manual scheduler so countdowns only move when a test advances them.
"""

import io

import docx
import pytest
from fastapi.testclient import TestClient

from conftest import FixedScorer
from interview_coach.main import app, get_interview_service, get_reference_generator
from interview_coach.services.interview_service import InterviewService
from interview_coach.services.reference_answer import ReferenceAnswerGenerator
from interview_coach.services.resume_extractor import DOCX_MIME_TYPE


CANDIDATE = {"name": "Jane Doe", "email": "jane.doe@example.com", "phone": "+1 555 123 4567"}


@pytest.fixture
def service(store, scheduler, questions):
    return InterviewService(
        store, FixedScorer(score=80), scheduler=scheduler, question_factory=lambda: list(questions)
    )


@pytest.fixture
def client(service):
    app.dependency_overrides[get_interview_service] = lambda: service
    app.dependency_overrides[get_reference_generator] = lambda: ReferenceAnswerGenerator(None)
    yield TestClient(app)
    app.dependency_overrides.clear()


def start(client, candidate=None):
    response = client.post("/api/start-interview", json={"candidate_info": candidate or CANDIDATE})
    assert response.status_code == 200, response.text
    return response.json()


def submit(client, session_id, question_id, answer="A thorough answer"):
    return client.post(
        "/api/submit-answer",
        json={"session_id": session_id, "question_id": question_id, "answer": answer},
    )


class TestInfoEndpoints:

    def test_root(self, client):
        assert client.get("/").json()["status"] == "operational"

    def test_metrics(self, client):
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "interview_sessions_started_total" in response.text


class TestStartInterview:
    """Test suite for /api/start-interview."""

    def test_start_returns_first_question(self, client, questions):
        body = start(client)

        assert body["session_id"]
        assert [q["id"] for q in body["questions"]] == [q.id for q in questions]
        assert body["current_question"]["id"] == questions[0].id
        assert body["time_remaining_seconds"] == 20

    def test_missing_field_rejected(self, client, service):
        response = client.post(
            "/api/start-interview",
            json={"candidate_info": {"name": "Jane Doe", "email": "jane@example.com"}},
        )

        assert response.status_code == 400
        assert "phone" in response.json()["detail"]
        assert service.engines == {}

    def test_invalid_email_rejected(self, client):
        response = client.post(
            "/api/start-interview",
            json={"candidate_info": {**CANDIDATE, "email": "not-an-email"}},
        )
        assert response.status_code == 400
        assert "email" in response.json()["detail"]


class TestSubmitAnswer:
    """Test suite for /api/submit-answer."""

    def test_submit_scores_and_advances(self, client, questions):
        session_id = start(client)["session_id"]

        response = submit(client, session_id, questions[0].id)

        assert response.status_code == 200
        body = response.json()
        assert body["score"] == 80
        assert body["scored_by"] == "llm"
        assert body["next_question"]["id"] == questions[1].id
        assert body["time_remaining_seconds"] == 20
        assert body["is_complete"] is False

    def test_empty_answer_is_bad_request(self, client, questions):
        session_id = start(client)["session_id"]
        assert submit(client, session_id, questions[0].id, answer="  ").status_code == 400

    def test_wrong_question_is_conflict(self, client, questions):
        session_id = start(client)["session_id"]
        assert submit(client, session_id, questions[2].id).status_code == 409

    def test_unknown_session_is_not_found(self, client, questions):
        assert submit(client, "missing", questions[0].id).status_code == 404

    def test_submission_after_timeout_is_conflict(self, client, scheduler, questions):
        session_id = start(client)["session_id"]
        scheduler.advance(questions[0].time_limit_seconds)

        assert submit(client, session_id, questions[0].id).status_code == 409
        assert submit(client, session_id, questions[0].id, answer="").status_code == 409

        state = client.get(f"/api/sessions/{session_id}").json()
        assert state["session"]["current_index"] == 1
        assert state["session"]["outcomes"][0]["source"] == "timeout"


class TestFullInterview:
    """A complete run through the API."""

    def test_third_question_times_out(self, client, scheduler, questions, service):
        session_id = start(client)["session_id"]

        last = None
        for index, question in enumerate(questions):
            if index == 2:
                scheduler.advance(question.time_limit_seconds)
                continue
            last = submit(client, session_id, question.id)
            assert last.status_code == 200

        body = last.json()
        assert body["is_complete"] is True
        assert body["next_question"] is None
        assert body["final_score"] == 67
        assert body["summary"].startswith("Jane Doe demonstrated")

        first = client.post("/api/complete-interview", json={"session_id": session_id})
        second = client.post("/api/complete-interview", json={"session_id": session_id})
        assert first.status_code == second.status_code == 200
        assert first.json() == second.json()
        assert first.json()["final_score"] == 67
        assert len(first.json()["outcomes"]) == 6
        assert len(service.ledger) == 1

        candidates = client.get("/api/candidates").json()
        assert candidates["total"] == 1
        assert candidates["candidates"][0]["final_score"] == 67

    def test_complete_unfinished_is_conflict(self, client):
        session_id = start(client)["session_id"]
        response = client.post("/api/complete-interview", json={"session_id": session_id})
        assert response.status_code == 409

    def test_session_snapshot_for_reload(self, client, scheduler):
        session_id = start(client)["session_id"]
        scheduler.advance(5)

        body = client.get(f"/api/sessions/{session_id}").json()

        assert body["engine_state"] == "waiting_for_answer"
        assert body["time_remaining_seconds"] == 15
        assert body["session"]["status"] == "in_progress"

    def test_abandon_stops_session(self, client, questions):
        session_id = start(client)["session_id"]

        assert client.post(f"/api/sessions/{session_id}/abandon").json()["abandoned"] is True
        assert submit(client, session_id, questions[0].id).status_code == 409
        assert client.post(f"/api/sessions/{session_id}/abandon").json()["abandoned"] is False


class TestCandidates:
    """Test suite for the ranked candidate list."""

    @pytest.fixture
    def populated(self, service, make_complete):
        service.ledger.append(make_complete("a", "Alice Smith", "alice@example.com", 90))
        service.ledger.append(make_complete("b", "Jane Doe", "jane@example.com", 40))
        service.ledger.append(make_complete("c", "Carol White", "carol@example.com", 70))
        service.ledger.append(make_complete("d", "Jane Doe", "JANE@example.com", 55))
        return service

    def test_sorted_descending_by_default(self, client, populated):
        body = client.get("/api/candidates").json()
        assert [c["final_score"] for c in body["candidates"]] == [90, 70, 55, 40]

    def test_sorted_ascending(self, client, populated):
        body = client.get("/api/candidates", params={"sort": "score_asc"}).json()
        assert [c["final_score"] for c in body["candidates"]] == [40, 55, 70, 90]

    def test_search(self, client, populated):
        body = client.get("/api/candidates", params={"search": "JANE"}).json()
        assert body["total"] == 2
        assert {c["session_id"] for c in body["candidates"]} == {"b", "d"}

    def test_invalid_sort_rejected(self, client, populated):
        assert client.get("/api/candidates", params={"sort": "name"}).status_code == 422

    def test_candidate_detail(self, client, populated):
        body = client.get("/api/candidates/c").json()
        assert body["candidate"]["name"] == "Carol White"
        assert len(body["outcomes"]) == 6

    def test_candidate_history(self, client, populated):
        body = client.get("/api/candidates/d/history").json()
        assert [c["session_id"] for c in body["candidates"]] == ["b"]

    def test_unknown_candidate(self, client, populated):
        assert client.get("/api/candidates/zzz").status_code == 404


class TestResumeAndReferenceAnswers:

    def test_upload_docx_resume(self, client):
        document = docx.Document()
        document.add_paragraph("Jane Doe")
        document.add_paragraph("jane.doe@example.com")
        buffer = io.BytesIO()
        document.save(buffer)

        response = client.post(
            "/api/upload-resume",
            files={"resume": ("resume.docx", buffer.getvalue(), DOCX_MIME_TYPE)},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["candidate_info"]["name"] == "Jane Doe"
        assert body["candidate_info"]["email"] == "jane.doe@example.com"
        assert body["missing_fields"] == ["phone"]

    def test_upload_unsupported_type(self, client):
        response = client.post(
            "/api/upload-resume",
            files={"resume": ("resume.txt", b"Jane Doe", "text/plain")},
        )
        assert response.status_code == 400

    def test_reference_answer_falls_back_to_sample(self, client, questions):
        response = client.post(
            "/api/generate-llm-answer",
            json={"question": questions[0].model_dump(mode="json")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["question_id"] == questions[0].id
        assert body["generated_by"] == "sample"
        assert body["answer"]
