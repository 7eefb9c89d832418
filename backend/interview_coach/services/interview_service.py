"""
Interview Service
Registry of per-session engines and the operations the HTTP layer calls.

Each in-progress session owns one AnswerResolutionEngine with its own
CountdownTimer and QuestionSequencer. Finished engines leave the registry
once their session is in the ledger; abandoned ones stay so later triggers
are still rejected. Sessions that are not in the registry
(after a restart, for instance) are restored from the session store on first
access.
"""

import asyncio
import logging
import uuid
from typing import Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from interview_coach.core.engine import AnswerResolutionEngine
from interview_coach.core.exceptions import (
    CandidateValidationError,
    InvalidSessionError,
    SessionNotFoundError,
)
from interview_coach.core.ledger import CandidateLedger
from interview_coach.core.models import (
    CandidateInfo,
    ExtractedCandidate,
    InterviewSession,
    Outcome,
    Question,
    SessionStatus,
    SortOrder,
)
from interview_coach.core.sequencer import QuestionSequencer
from interview_coach.core.timer import CountdownTimer, Scheduler
from interview_coach.services.question_bank import generate_questions
from interview_coach.services.scoring import AnswerScorer
from interview_coach.services.session_store import SessionStore
from interview_coach.utils.logging_config import log_session_event
from interview_coach.utils.metrics import record_session_started

logger = logging.getLogger(__name__)


class InterviewService:
    """Starts, drives, restores and completes interview sessions."""

    def __init__(
        self,
        store: SessionStore,
        scorer: AnswerScorer,
        ledger: Optional[CandidateLedger] = None,
        scheduler: Optional[Scheduler] = None,
        question_factory: Callable[[], List[Question]] = generate_questions,
        fallback_scorer: Optional[AnswerScorer] = None,
    ):
        self.store = store
        self.scorer = scorer
        self.ledger = ledger or CandidateLedger()
        self.question_factory = question_factory
        self.fallback_scorer = fallback_scorer
        self._scheduler = scheduler
        self.engines: Dict[str, AnswerResolutionEngine] = {}

    def _get_scheduler(self) -> Scheduler:
        # Timers tick on the running event loop unless a scheduler was injected
        return self._scheduler or asyncio.get_running_loop()

    def _create_timer(self, session_id: str) -> CountdownTimer:
        return CountdownTimer(self._get_scheduler(), name=f"timer-{session_id[:8]}")

    def rehydrate_ledger(self) -> int:
        """Load previously completed sessions into the ledger, in completion order."""
        sessions = self.store.list_sessions(status=SessionStatus.COMPLETE)
        sessions.sort(key=lambda s: s.completed_at or s.created_at)
        added = self.ledger.extend(sessions)
        logger.info(f"Rehydrated ledger with {added} completed sessions")
        return added

    @staticmethod
    def validate_candidate(candidate: Union[ExtractedCandidate, CandidateInfo]) -> CandidateInfo:
        """
        Raises:
            CandidateValidationError: If a field is missing or malformed
        """
        if isinstance(candidate, CandidateInfo):
            return candidate

        missing = [
            field for field in ("name", "email", "phone")
            if not (getattr(candidate, field) or "").strip()
        ]
        if missing:
            raise CandidateValidationError(
                f"Missing required fields: {', '.join(missing)}", missing_fields=missing
            )

        try:
            return CandidateInfo(**candidate.model_dump())
        except ValidationError as e:
            problems = "; ".join(f"{err['loc'][0]}: {err['msg']}" for err in e.errors())
            raise CandidateValidationError(f"Invalid candidate details: {problems}") from e

    def start_session(self, candidate: Union[ExtractedCandidate, CandidateInfo]) -> AnswerResolutionEngine:
        """Create a session, draw its questions and start the first countdown."""
        info = self.validate_candidate(candidate)

        session = InterviewSession(session_id=str(uuid.uuid4()), candidate=info)
        session.start(self.question_factory())
        self.store.save_session(session)

        engine = AnswerResolutionEngine(
            session,
            QuestionSequencer(session.questions),
            self._create_timer(session.session_id),
            self.scorer,
            self.store,
            self.ledger,
            fallback_scorer=self.fallback_scorer,
        )
        self.engines[session.session_id] = engine
        engine.add_finish_listener(self._release)
        engine.begin()

        record_session_started()
        log_session_event(
            logger, session.session_id, "started",
            candidate=info.name, questions=[q.id for q in session.questions],
        )
        return engine

    def get_engine(self, session_id: str) -> AnswerResolutionEngine:
        """
        Raises:
            SessionNotFoundError: If neither the registry, the ledger nor the store knows the session
        """
        engine = self.engines.get(session_id)
        if engine is not None:
            return engine

        session = self.ledger.get(session_id) or self.store.load_session(session_id)
        if session is None or session.status == SessionStatus.NOT_STARTED:
            raise SessionNotFoundError(f"Session {session_id} not found")

        engine = AnswerResolutionEngine.restore(
            session,
            self._create_timer(session_id),
            self.scorer,
            self.store,
            self.ledger,
            fallback_scorer=self.fallback_scorer,
        )
        if engine.is_finished:
            return engine
        self.engines[session_id] = engine
        engine.add_finish_listener(self._release)
        return engine

    def _release(self, engine: AnswerResolutionEngine) -> None:
        self.engines.pop(engine.session_id, None)

    async def submit_answer(self, session_id: str, question_id: str, answer_text: str) -> Optional[Outcome]:
        """None when the submission was ignored (question already resolved or not current)."""
        engine = self.get_engine(session_id)
        return await engine.submit(question_id, answer_text)

    def abandon(self, session_id: str) -> bool:
        return self.get_engine(session_id).abandon()

    def complete_session(self, session_id: str) -> InterviewSession:
        """
        Return the frozen result of a finished session.

        Safe to call any number of times: the ledger entry is written once,
        when the engine resolves the last question.

        Raises:
            SessionNotFoundError: If the session does not exist
            InvalidSessionError: If the session still has unresolved questions
        """
        entry = self.ledger.get(session_id)
        if entry is not None:
            return entry

        engine = self.get_engine(session_id)
        session = engine.session
        if session.status != SessionStatus.COMPLETE:
            remaining = len(session.questions) - session.current_index
            raise InvalidSessionError(
                f"Session {session_id} is {session.status.value} with {remaining} questions left"
            )

        return self.ledger.append(session)

    def list_candidates(
        self,
        sort_order: SortOrder = SortOrder.SCORE_DESC,
        search_text: Optional[str] = None,
    ) -> List[InterviewSession]:
        return self.ledger.list(sort_order=sort_order, search_text=search_text)

    def get_candidate(self, session_id: str) -> InterviewSession:
        entry = self.ledger.get(session_id)
        if entry is None:
            raise SessionNotFoundError(f"No completed session {session_id}")
        return entry

    def history(self, session_id: str) -> List[InterviewSession]:
        """Other completed attempts made with the same email, oldest first."""
        entry = self.get_candidate(session_id)
        return [
            attempt for attempt in self.ledger.history(entry.candidate.email)
            if attempt.session_id != session_id
        ]

    def shutdown(self) -> None:
        for engine in self.engines.values():
            engine.timer.stop()
        logger.info(f"Stopped {len(self.engines)} session timers")
        self.engines.clear()
