"""
Answer Resolution Engine
Per-session state machine that turns each question into exactly one scored outcome.

A question is resolved by whichever trigger gets there first: an explicit
non-empty submission, or the timer's expiry signal. The first trigger closes
the question's latch synchronously, so the loser is ignored. Timeouts never
reach the scorer; they are recorded locally with score 0.

    IDLE -> WAITING_FOR_ANSWER -> RESOLVING -> RESOLVED -> WAITING_FOR_ANSWER ...
    RESOLVED -> FINISHED (after the last question)
    any state before FINISHED -> ABANDONED
"""

import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence

from interview_coach.core.exceptions import CandidateValidationError, InterviewError
from interview_coach.core.ledger import CandidateLedger
from interview_coach.core.models import (
    CandidateInfo,
    InterviewSession,
    Outcome,
    OutcomeSource,
    Question,
    ScoredBy,
    ScoreResult,
    SessionStatus,
)
from interview_coach.core.sequencer import QuestionSequencer
from interview_coach.core.timer import CountdownTimer
from interview_coach.services.feedback import timeout_feedback
from interview_coach.services.scoring import AnswerScorer, HeuristicAnswerScorer
from interview_coach.services.session_store import SessionStore
from interview_coach.services.summary import compute_final_score, summarize
from interview_coach.utils.logging_config import log_resolution, log_session_event
from interview_coach.utils.metrics import (
    active_sessions,
    record_ignored_trigger,
    record_resolution,
    record_session_abandoned,
    record_session_completed,
    scoring_fallbacks_total,
    session_store_errors_total,
)

logger = logging.getLogger(__name__)

Summarizer = Callable[[CandidateInfo, Sequence[Question], Sequence[Outcome]], str]


class ResolutionState(str, Enum):
    IDLE = "idle"
    WAITING_FOR_ANSWER = "waiting_for_answer"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    FINISHED = "finished"
    ABANDONED = "abandoned"


class AnswerResolutionEngine:
    """
    Drives one in-progress session through its questions.

    The engine is the only writer of session.outcomes and
    session.current_index. Every outcome is recorded before the sequencer
    moves past its question and saved before the next countdown starts.
    """

    def __init__(
        self,
        session: InterviewSession,
        sequencer: QuestionSequencer,
        timer: CountdownTimer,
        scorer: AnswerScorer,
        store: SessionStore,
        ledger: CandidateLedger,
        fallback_scorer: Optional[AnswerScorer] = None,
        summarizer: Summarizer = summarize,
    ):
        if sequencer.index != session.current_index:
            raise InterviewError(
                f"Sequencer at {sequencer.index} but session {session.session_id} "
                f"is at question {session.current_index}"
            )
        self.session = session
        self.sequencer = sequencer
        self.timer = timer
        self.scorer = scorer
        self.fallback_scorer = fallback_scorer or HeuristicAnswerScorer()
        self.store = store
        self.ledger = ledger
        self.summarizer = summarizer
        self.state = ResolutionState.IDLE
        self._counted_active = False
        self._finish_listeners: List[Callable[["AnswerResolutionEngine"], None]] = []

        self.timer.add_expiry_listener(self._on_expire)

    @classmethod
    def restore(
        cls,
        session: InterviewSession,
        timer: CountdownTimer,
        scorer: AnswerScorer,
        store: SessionStore,
        ledger: CandidateLedger,
        **kwargs,
    ) -> "AnswerResolutionEngine":
        """
        Rebuild an engine from a persisted snapshot.

        An in-progress session resumes at its current question with that
        question's full time limit. A complete session comes back FINISHED.
        """
        sequencer = QuestionSequencer(session.questions, start_index=session.current_index)
        engine = cls(session, sequencer, timer, scorer, store, ledger, **kwargs)
        if session.status == SessionStatus.COMPLETE:
            engine.state = ResolutionState.FINISHED
        elif session.status == SessionStatus.IN_PROGRESS:
            engine.begin()
        else:
            raise InterviewError(f"Session {session.session_id} has not started")
        log_session_event(
            logger, session.session_id, "restored",
            current_index=session.current_index, engine_state=engine.state.value,
        )
        return engine

    @property
    def session_id(self) -> str:
        return self.session.session_id

    @property
    def current_question(self) -> Optional[Question]:
        return self.sequencer.current()

    @property
    def remaining_seconds(self) -> int:
        return self.timer.remaining_seconds

    @property
    def is_finished(self) -> bool:
        return self.state == ResolutionState.FINISHED

    def add_finish_listener(self, callback: Callable[["AnswerResolutionEngine"], None]) -> None:
        """Called once, after the session is completed and added to the ledger."""
        self._finish_listeners.append(callback)

    def begin(self) -> None:
        """Start the countdown for the current question."""
        if self.state != ResolutionState.IDLE:
            raise InterviewError(f"Engine for {self.session_id} already {self.state.value}")
        if self.session.status != SessionStatus.IN_PROGRESS:
            raise InterviewError(f"Session {self.session_id} is {self.session.status.value}")

        question = self.sequencer.current()
        if question is None:
            # Every outcome was recorded but completion never ran
            self._complete()
            return

        self.state = ResolutionState.WAITING_FOR_ANSWER
        self.timer.start(question.time_limit_seconds)
        self._set_active(True)
        logger.info(f"[{self.session_id}] Waiting for answer to {question.id} ({question.time_limit_seconds}s)")

    async def submit(self, question_id: str, answer_text: str) -> Optional[Outcome]:
        """
        Resolve the current question with the candidate's answer.

        Returns:
            The recorded outcome, or None when the submission lost to an
            expiry, named a question other than the current one, or the
            session was abandoned while scoring.

        Raises:
            CandidateValidationError: If the answer to the current question is empty
        """
        question = self.sequencer.current()
        if self.state != ResolutionState.WAITING_FOR_ANSWER or question is None or question.id != question_id:
            record_ignored_trigger("submission")
            logger.info(
                f"[{self.session_id}] Ignored submission for {question_id} "
                f"(state={self.state.value}, current={question.id if question else None})"
            )
            return None

        if not answer_text or not answer_text.strip():
            raise CandidateValidationError("Answer must not be empty")

        # Close the latch and stop the countdown before the first await
        self.state = ResolutionState.RESOLVING
        self.timer.stop()

        result, scored_by = await self._score(question, answer_text)

        if self.state == ResolutionState.ABANDONED:
            logger.info(f"[{self.session_id}] Discarding score for {question.id}, session was abandoned")
            return None

        outcome = Outcome(
            question_id=question.id,
            answer_text=answer_text,
            score=result.score,
            feedback=result.feedback,
            source=OutcomeSource.SUBMITTED,
            scored_by=scored_by,
        )
        self._resolve(question, outcome)
        return outcome

    def abandon(self) -> bool:
        """Stop the countdown for good. Returns False if the session had already ended."""
        if self.state in (ResolutionState.FINISHED, ResolutionState.ABANDONED):
            return False
        was_active = self.state != ResolutionState.IDLE
        self.timer.stop()
        self.state = ResolutionState.ABANDONED
        if was_active:
            record_session_abandoned()
        self._set_active(False)
        log_session_event(logger, self.session_id, "abandoned", current_index=self.session.current_index)
        return True

    async def _score(self, question: Question, answer_text: str) -> tuple[ScoreResult, ScoredBy]:
        try:
            result = await self.scorer.score(question, answer_text)
            return result, ScoredBy(self.scorer.name)
        except Exception as e:
            logger.warning(f"[{self.session_id}] Scorer failed for {question.id}, using heuristic: {e}")
            scoring_fallbacks_total.inc()
            result = await self.fallback_scorer.score(question, answer_text)
            return result, ScoredBy.HEURISTIC

    def _on_expire(self) -> None:
        question = self.sequencer.current()
        if self.state != ResolutionState.WAITING_FOR_ANSWER or question is None:
            record_ignored_trigger("expiry")
            logger.debug(f"[{self.session_id}] Ignored expiry in state {self.state.value}")
            return

        self.state = ResolutionState.RESOLVING
        outcome = Outcome(
            question_id=question.id,
            answer_text="",
            score=0,
            feedback=timeout_feedback(question),
            source=OutcomeSource.TIMEOUT,
            scored_by=ScoredBy.TIMEOUT,
        )
        self._resolve(question, outcome)

    def _resolve(self, question: Question, outcome: Outcome) -> None:
        self.session.record_outcome(outcome)
        self.sequencer.advance()
        self.state = ResolutionState.RESOLVED
        self._persist()

        record_resolution(outcome.source.value, question.difficulty.value)
        log_resolution(
            logger,
            self.session_id,
            question.id,
            source=outcome.source.value,
            score=outcome.score,
            scored_by=outcome.scored_by.value,
        )

        next_question = self.sequencer.current()
        if next_question is None:
            self._complete()
            return

        self.state = ResolutionState.WAITING_FOR_ANSWER
        self.timer.start(next_question.time_limit_seconds)

    def _complete(self) -> None:
        final_score = compute_final_score(self.session.scores)
        summary = self.summarizer(self.session.candidate, self.session.questions, self.session.outcomes)

        self.session.complete(final_score, summary)
        self.state = ResolutionState.FINISHED
        self.timer.stop()
        self._persist()
        self.ledger.append(self.session)

        record_session_completed(final_score)
        self._set_active(False)
        log_session_event(logger, self.session_id, "completed", final_score=final_score)

        for callback in self._finish_listeners:
            callback(self)

    def _persist(self) -> None:
        # The in-memory session stays authoritative; the next successful save catches the store up
        try:
            self.store.save_session(self.session)
        except Exception as e:
            session_store_errors_total.inc()
            logger.error(
                f"[{self.session_id}] Failed to save session at question {self.session.current_index}: {e}",
                exc_info=True,
            )

    def _set_active(self, active: bool) -> None:
        if active == self._counted_active:
            return
        self._counted_active = active
        if active:
            active_sessions.inc()
        else:
            active_sessions.dec()
