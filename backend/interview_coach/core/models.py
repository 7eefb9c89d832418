"""
Data Models Module
Pydantic models for interview session state and API request/response schemas.
"""

import re
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from interview_coach.core.constants import MAX_SCORE, MIN_SCORE, TIME_LIMIT_SECONDS


NAME_PATTERN = re.compile(r"^[a-zA-Z\s\.]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\+]?[\d\s\-\(\)]{10,}$")


class Difficulty(str, Enum):
    """Question difficulty levels."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def time_limit_seconds(self) -> int:
        return TIME_LIMIT_SECONDS[self.value]


class SessionStatus(str, Enum):
    """Lifecycle of a candidate's attempt."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class OutcomeSource(str, Enum):
    """Which trigger resolved a question."""
    SUBMITTED = "submitted"
    TIMEOUT = "timeout"


class ScoredBy(str, Enum):
    """Which backend produced an outcome's score."""
    LLM = "llm"
    HEURISTIC = "heuristic"
    TIMEOUT = "timeout"


class SortOrder(str, Enum):
    """Ledger ordering by final score."""
    SCORE_DESC = "score_desc"
    SCORE_ASC = "score_asc"


# ==================== Domain Models ====================

class Question(BaseModel):
    """A single interview question. Immutable once generated."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable id, e.g. easy_1")
    text: str = Field(..., description="Question text shown to the candidate")
    category: str = Field(..., description="Topic the question belongs to")
    difficulty: Difficulty
    time_limit_seconds: int = Field(..., gt=0, description="Seconds allowed to answer")

    @model_validator(mode="after")
    def _time_limit_matches_difficulty(self) -> "Question":
        if self.time_limit_seconds != self.difficulty.time_limit_seconds:
            raise ValueError(
                f"time_limit_seconds for {self.difficulty.value} questions must be "
                f"{self.difficulty.time_limit_seconds}, got {self.time_limit_seconds}"
            )
        return self


class CandidateInfo(BaseModel):
    """Candidate identity. All fields are required before a session may start."""
    name: str
    email: str
    phone: str

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2 or not NAME_PATTERN.match(v):
            raise ValueError("name must be at least 2 characters of letters, spaces or dots")
        return v

    @field_validator("email")
    @classmethod
    def _validate_email(cls, v: str) -> str:
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("email must look like name@domain.tld")
        return v

    @field_validator("phone")
    @classmethod
    def _validate_phone(cls, v: str) -> str:
        v = v.strip()
        if not PHONE_PATTERN.match(v):
            raise ValueError("phone must contain at least 10 digits")
        return v


class ExtractedCandidate(BaseModel):
    """Best-effort fields scraped from a resume. Any field may be missing."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def missing_fields(self) -> List[str]:
        return [field for field in ("name", "email", "phone") if not getattr(self, field)]


class AnswerFeedback(BaseModel):
    """Narrative feedback attached to an outcome."""
    text: str
    suggestions: List[str] = Field(default_factory=list)
    sample_answer: str = ""


class ScoreResult(BaseModel):
    """What a scorer returns for one answer."""
    score: int = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    feedback: AnswerFeedback


class Outcome(BaseModel):
    """The finalized (answer, score, feedback) triple for one question."""
    question_id: str
    answer_text: str
    score: int = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    feedback: AnswerFeedback
    source: OutcomeSource
    scored_by: ScoredBy
    resolved_at: datetime = Field(default_factory=datetime.now)


class InterviewSession(BaseModel):
    """
    One candidate's attempt.

    Invariants:
    - 0 <= current_index <= len(questions)
    - len(outcomes) == current_index
    - final_score and summary are set iff status == complete
    """
    session_id: str
    candidate: CandidateInfo
    questions: List[Question] = Field(default_factory=list)
    current_index: int = 0
    outcomes: List[Outcome] = Field(default_factory=list)
    status: SessionStatus = SessionStatus.NOT_STARTED
    final_score: Optional[int] = None
    summary: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "InterviewSession":
        if not 0 <= self.current_index <= len(self.questions):
            raise ValueError(
                f"current_index {self.current_index} outside 0..{len(self.questions)}"
            )
        if len(self.outcomes) != self.current_index:
            raise ValueError(
                f"{len(self.outcomes)} outcomes recorded but current_index is {self.current_index}"
            )
        is_complete = self.status == SessionStatus.COMPLETE
        if is_complete != (self.final_score is not None and self.summary is not None):
            raise ValueError("final_score and summary must be present iff the session is complete")
        if self.status == SessionStatus.NOT_STARTED and self.questions:
            raise ValueError("a session that has not started cannot hold questions")
        return self

    @property
    def current_question(self) -> Optional[Question]:
        if self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def scores(self) -> List[int]:
        return [outcome.score for outcome in self.outcomes]

    def start(self, questions: List[Question]) -> None:
        """NotStarted -> InProgress with the fixed question list."""
        if self.status != SessionStatus.NOT_STARTED:
            raise ValueError(f"Session {self.session_id} already {self.status.value}")
        if not questions:
            raise ValueError("A session needs at least one question")
        self.questions = list(questions)
        self.current_index = 0
        self.outcomes = []
        self.status = SessionStatus.IN_PROGRESS
        self.started_at = datetime.now()

    def record_outcome(self, outcome: Outcome) -> None:
        """Append the current question's outcome and move past it in one step."""
        if self.status != SessionStatus.IN_PROGRESS:
            raise ValueError(f"Session {self.session_id} is not in progress")
        question = self.current_question
        if question is None:
            raise ValueError(f"Session {self.session_id} has no question left to resolve")
        if outcome.question_id != question.id:
            raise ValueError(
                f"Outcome for {outcome.question_id} does not match current question {question.id}"
            )
        self.outcomes.append(outcome)
        self.current_index += 1

    def complete(self, final_score: int, summary: str) -> None:
        """InProgress -> Complete. final_score and summary are frozen from here on."""
        if self.status != SessionStatus.IN_PROGRESS:
            raise ValueError(f"Session {self.session_id} is not in progress")
        if self.current_index != len(self.questions):
            raise ValueError(
                f"Session {self.session_id} still has {len(self.questions) - self.current_index} questions"
            )
        self.final_score = final_score
        self.summary = summary
        self.status = SessionStatus.COMPLETE
        self.completed_at = datetime.now()

    def snapshot(self) -> str:
        """Serialize to the JSON snapshot used by session stores."""
        return self.model_dump_json()

    @classmethod
    def from_snapshot(cls, data: str) -> "InterviewSession":
        return cls.model_validate_json(data)


# ==================== API Models ====================

class UploadResumeResponse(BaseModel):
    """Response model for resume upload."""
    candidate_info: ExtractedCandidate
    missing_fields: List[str]
    message: str


class StartInterviewRequest(BaseModel):
    """Request model for starting an interview. Fields are validated by the service."""
    candidate_info: ExtractedCandidate


class StartInterviewResponse(BaseModel):
    """Response model for starting an interview."""
    session_id: str
    questions: List[Question]
    current_question: Question
    time_remaining_seconds: int
    message: str


class SubmitAnswerRequest(BaseModel):
    """Request model for submitting an answer."""
    session_id: str
    question_id: str
    answer: str


class SubmitAnswerResponse(BaseModel):
    """Response model for submitting an answer."""
    session_id: str
    question_id: str
    score: int
    feedback: AnswerFeedback
    scored_by: ScoredBy
    next_question: Optional[Question] = None
    time_remaining_seconds: Optional[int] = None
    is_complete: bool = False
    final_score: Optional[int] = None
    summary: Optional[str] = None


class SessionStatusResponse(BaseModel):
    """Response model for a session snapshot (used to restore after a reload)."""
    session: InterviewSession
    engine_state: str
    time_remaining_seconds: Optional[int] = None


class CompleteInterviewRequest(BaseModel):
    """Request model for completing an interview."""
    session_id: str


class CompleteInterviewResponse(BaseModel):
    """Response model for a completed interview."""
    session_id: str
    final_score: int
    summary: str
    outcomes: List[Outcome]


class CandidateSummary(BaseModel):
    """One row of the candidate dashboard."""
    session_id: str
    name: str
    email: str
    phone: str
    final_score: int
    summary: str
    completed_at: Optional[datetime] = None


class CandidateListResponse(BaseModel):
    """Response model for the ranked candidate list."""
    candidates: List[CandidateSummary]
    total: int


class ReferenceAnswerRequest(BaseModel):
    """Request model for generating a reference answer."""
    question: Question


class ReferenceAnswerResponse(BaseModel):
    """Response model for a generated reference answer."""
    question_id: str
    answer: str
    generated_by: str


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
    detail: Optional[str] = None
