"""
Shared fixtures: a manual scheduler for countdown tests and fake scorers.
"""

import asyncio
import random
from typing import Any, Callable, List, Optional

import pytest

from interview_coach.core.engine import AnswerResolutionEngine
from interview_coach.core.exceptions import ScoringUnavailableError
from interview_coach.core.ledger import CandidateLedger
from interview_coach.core.models import (
    AnswerFeedback,
    CandidateInfo,
    InterviewSession,
    Outcome,
    OutcomeSource,
    Question,
    ScoredBy,
    ScoreResult,
)
from interview_coach.core.sequencer import QuestionSequencer
from interview_coach.core.timer import CountdownTimer
from interview_coach.services.question_bank import generate_questions
from interview_coach.services.scoring import AnswerScorer
from interview_coach.services.session_store import InMemorySessionStore


class ManualHandle:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """call_later() that only fires when the test advances simulated time."""

    def __init__(self):
        self.now = 0.0
        self._pending: List[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualHandle:
        handle = ManualHandle(self.now + delay, callback, args)
        self._pending.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return len([h for h in self._pending if not h.cancelled])

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self._pending if not h.cancelled and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self._pending.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
        self.now = target
        self._pending = [h for h in self._pending if not h.cancelled]


class FixedScorer(AnswerScorer):
    """Gives every answer the same score, or a per-question override."""

    name = "llm"

    def __init__(self, score: int = 80, overrides: Optional[dict] = None):
        self.fixed_score = score
        self.overrides = overrides or {}
        self.calls: List[tuple] = []

    async def score(self, question: Question, answer_text: str) -> ScoreResult:
        self.calls.append((question.id, answer_text))
        value = self.overrides.get(question.id, self.fixed_score)
        return ScoreResult(score=value, feedback=AnswerFeedback(text=f"Scored {value}"))


class FailingScorer(AnswerScorer):
    name = "llm"

    def __init__(self):
        self.calls = 0

    async def score(self, question: Question, answer_text: str) -> ScoreResult:
        self.calls += 1
        raise ScoringUnavailableError("scoring backend is down")


class GatedScorer(FixedScorer):
    """Holds every scoring call until release() is called."""

    def __init__(self, score: int = 80):
        super().__init__(score)
        self.started = asyncio.Event()
        self.gate = asyncio.Event()

    def release(self) -> None:
        self.gate.set()

    async def score(self, question: Question, answer_text: str) -> ScoreResult:
        self.started.set()
        await self.gate.wait()
        return await super().score(question, answer_text)


class FlakyStore(InMemorySessionStore):
    """In-memory store whose next `failures` saves raise OSError."""

    def __init__(self, failures: int = 1):
        super().__init__()
        self.failures = failures

    def save_session(self, session: InterviewSession) -> None:
        if self.failures > 0:
            self.failures -= 1
            raise OSError("disk full")
        super().save_session(session)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def ledger():
    return CandidateLedger()


@pytest.fixture
def candidate():
    return CandidateInfo(name="Jane Doe", email="jane.doe@example.com", phone="+1 555 123 4567")


@pytest.fixture
def questions():
    return generate_questions(rng=random.Random(7))


@pytest.fixture
def make_engine(scheduler, store, ledger, candidate, questions):
    """Build a started session and its engine around the given scorer."""

    def _make(scorer: AnswerScorer, session_id: str = "session-1") -> AnswerResolutionEngine:
        session = InterviewSession(session_id=session_id, candidate=candidate)
        session.start(questions)
        store.save_session(session)
        timer = CountdownTimer(scheduler, name=f"timer-{session_id}")
        return AnswerResolutionEngine(
            session, QuestionSequencer(session.questions), timer, scorer, store, ledger
        )

    return _make


def build_complete_session(
    session_id: str,
    name: str,
    email: str,
    final_score: int,
    questions: List[Question],
) -> InterviewSession:
    """A finished session with every question scored final_score."""
    session = InterviewSession(
        session_id=session_id,
        candidate=CandidateInfo(name=name, email=email, phone="555-123-4567"),
    )
    session.start(questions)
    for question in questions:
        session.record_outcome(Outcome(
            question_id=question.id,
            answer_text="answer",
            score=final_score,
            feedback=AnswerFeedback(text="ok"),
            source=OutcomeSource.SUBMITTED,
            scored_by=ScoredBy.HEURISTIC,
        ))
    session.complete(final_score, f"{name} summary")
    return session


@pytest.fixture
def make_complete(questions):
    def _make(session_id: str, name: str, email: str, final_score: int) -> InterviewSession:
        return build_complete_session(session_id, name, email, final_score, questions)

    return _make
