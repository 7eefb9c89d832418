"""
End-to-End Tests for InterviewService

Full sessions driven through the service layer, including a simulated
server restart between questions.
"""

import pytest

from conftest import FailingScorer, FixedScorer
from interview_coach.core.engine import ResolutionState
from interview_coach.core.exceptions import (
    CandidateValidationError,
    InvalidSessionError,
    SessionNotFoundError,
)
from interview_coach.core.models import ExtractedCandidate, ScoredBy, SessionStatus, SortOrder
from interview_coach.services.interview_service import InterviewService
from interview_coach.services.session_store import JsonFileSessionStore


@pytest.fixture
def extracted():
    return ExtractedCandidate(name="Jane Doe", email="jane.doe@example.com", phone="+1 555 123 4567")


def make_service(store, scheduler, questions, scorer=None):
    return InterviewService(
        store, scorer or FixedScorer(score=80), scheduler=scheduler, question_factory=lambda: list(questions)
    )


class TestInterviewService:
    """Test suite for the session registry."""

    def test_start_requires_every_field(self, store, scheduler, questions):
        service = make_service(store, scheduler, questions)

        with pytest.raises(CandidateValidationError) as exc_info:
            service.start_session(ExtractedCandidate(name="Jane Doe", email=" ", phone=None))

        assert exc_info.value.missing_fields == ["email", "phone"]
        assert store.list_sessions() == []

    def test_start_persists_in_progress_session(self, store, scheduler, questions, extracted):
        service = make_service(store, scheduler, questions)

        engine = service.start_session(extracted)

        persisted = store.load_session(engine.session_id)
        assert persisted.status == SessionStatus.IN_PROGRESS
        assert len(persisted.questions) == 6
        assert engine.state == ResolutionState.WAITING_FOR_ANSWER

    def test_unknown_session(self, store, scheduler, questions):
        service = make_service(store, scheduler, questions)
        with pytest.raises(SessionNotFoundError):
            service.get_engine("missing")

    @pytest.mark.asyncio
    async def test_full_run_with_scoring_outage(self, store, scheduler, questions, extracted):
        scorer = FailingScorer()
        service = make_service(store, scheduler, questions, scorer=scorer)
        engine = service.start_session(extracted)

        for question in questions:
            outcome = await service.submit_answer(
                engine.session_id, question.id, f"{question.category} explained with an example"
            )
            assert outcome.scored_by == ScoredBy.HEURISTIC

        assert scorer.calls == 6
        result = service.complete_session(engine.session_id)
        assert result.status == SessionStatus.COMPLETE
        assert 0 <= result.final_score <= 100

    @pytest.mark.asyncio
    async def test_complete_is_idempotent(self, store, scheduler, questions, extracted):
        service = make_service(store, scheduler, questions)
        engine = service.start_session(extracted)

        with pytest.raises(InvalidSessionError):
            service.complete_session(engine.session_id)

        for question in questions:
            await service.submit_answer(engine.session_id, question.id, "answer")

        first = service.complete_session(engine.session_id)
        second = service.complete_session(engine.session_id)

        assert first == second
        assert len(service.ledger) == 1
        assert service.list_candidates(SortOrder.SCORE_DESC)[0].final_score == 80

    @pytest.mark.asyncio
    async def test_finished_engine_leaves_registry(self, store, scheduler, questions, extracted):
        service = make_service(store, scheduler, questions)
        engine = service.start_session(extracted)
        for question in questions[:-1]:
            await service.submit_answer(engine.session_id, question.id, "answer")
        assert engine.session_id in service.engines

        scheduler.advance(questions[-1].time_limit_seconds)

        assert engine.is_finished
        assert service.engines == {}
        assert service.complete_session(engine.session_id).final_score == 67
        assert service.get_engine(engine.session_id).is_finished
        assert service.engines == {}

    def test_abandoned_engine_stays_registered(self, store, scheduler, questions, extracted):
        service = make_service(store, scheduler, questions)
        engine = service.start_session(extracted)

        assert service.abandon(engine.session_id) is True

        assert service.engines[engine.session_id].state == ResolutionState.ABANDONED
        assert service.abandon(engine.session_id) is False


class TestRestart:
    """A new service over the same store picks up where the old one stopped."""

    @pytest.mark.asyncio
    async def test_resume_in_progress_session(self, tmp_path, scheduler, questions, extracted):
        store = JsonFileSessionStore(str(tmp_path))
        before = make_service(store, scheduler, questions)
        engine = before.start_session(extracted)
        await before.submit_answer(engine.session_id, questions[0].id, "first answer")
        scheduler.advance(questions[1].time_limit_seconds)
        before.shutdown()

        after = make_service(JsonFileSessionStore(str(tmp_path)), scheduler, questions)
        restored = after.get_engine(engine.session_id)

        assert restored.session.current_index == 2
        assert [o.source.value for o in restored.session.outcomes] == ["submitted", "timeout"]
        assert restored.current_question.id == questions[2].id
        assert restored.remaining_seconds == questions[2].time_limit_seconds

        for question in questions[2:]:
            await after.submit_answer(engine.session_id, question.id, "answer")

        assert after.complete_session(engine.session_id).final_score == 67

    @pytest.mark.asyncio
    async def test_ledger_rehydrated_from_store(self, tmp_path, scheduler, questions, extracted):
        store = JsonFileSessionStore(str(tmp_path))
        before = make_service(store, scheduler, questions)
        finished = before.start_session(extracted)
        for question in questions:
            await before.submit_answer(finished.session_id, question.id, "answer")
        before.start_session(extracted)

        after = make_service(JsonFileSessionStore(str(tmp_path)), scheduler, questions)

        assert after.rehydrate_ledger() == 1
        assert [s.session_id for s in after.list_candidates()] == [finished.session_id]
        assert after.rehydrate_ledger() == 0