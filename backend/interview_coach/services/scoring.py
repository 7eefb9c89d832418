"""
Answer Scoring
Scores a candidate's answer with Gemini, or with a deterministic local heuristic.

The LLM scorer never degrades silently: every failure surfaces as
ScoringUnavailableError and the caller decides how to fall back.
"""

import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Optional

from langchain_google_genai import ChatGoogleGenerativeAI

from interview_coach.config import Settings
from interview_coach.core.constants import MAX_SCORE, MIN_SCORE
from interview_coach.core.exceptions import ScoringUnavailableError
from interview_coach.core.models import Difficulty, Question, ScoreResult
from interview_coach.prompts.schemas import AnswerAssessment
from interview_coach.prompts.scoring import create_answer_scoring_prompt
from interview_coach.services.feedback import build_feedback
from interview_coach.utils.llm_retry import async_retry_llm_call, call_llm_with_timeout
from interview_coach.utils.logging_config import log_llm_call
from interview_coach.utils.metrics import track_scoring

logger = logging.getLogger(__name__)


def create_chat_model(settings: Settings) -> Optional[ChatGoogleGenerativeAI]:
    """Gemini chat model from settings, or None when no API key is configured."""
    if not settings.llm_scoring_enabled:
        return None
    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        temperature=settings.gemini_temperature,
        max_output_tokens=settings.gemini_max_output_tokens,
        google_api_key=settings.gemini_api_key,
    )


class AnswerScorer(ABC):
    """Abstract base class for answer scorers."""

    name: str = "scorer"

    @abstractmethod
    async def score(self, question: Question, answer_text: str) -> ScoreResult:
        """Score one answer in 0..100 and attach feedback."""
        pass


class HeuristicAnswerScorer(AnswerScorer):
    """
    Deterministic length- and keyword-based scorer.

    Half of the score rewards length relative to a per-difficulty target,
    half rewards coverage of the keywords in the question text and category.
    Harder questions need longer answers and broader coverage for full marks.
    """

    name = "heuristic"

    TARGET_LENGTH = {
        Difficulty.EASY: 150,
        Difficulty.MEDIUM: 300,
        Difficulty.HARD: 500,
    }
    KEYWORD_SATURATION = {
        Difficulty.EASY: 0.5,
        Difficulty.MEDIUM: 0.6,
        Difficulty.HARD: 0.75,
    }
    LENGTH_WEIGHT = 50
    KEYWORD_WEIGHT = 50

    STOPWORDS = frozenset({
        "what", "which", "when", "where", "why", "how", "who", "the", "and", "for", "are",
        "you", "your", "its", "their", "this", "that", "with", "between", "difference",
        "explain", "main", "use", "does", "into", "from", "about", "concept", "implement",
        "handle", "create", "purpose", "them", "they", "there", "have", "has",
    })
    _WORD = re.compile(r"[a-zA-Z][a-zA-Z0-9+#.]*[a-zA-Z0-9+#]|[a-zA-Z]")

    @classmethod
    def keywords(cls, question: Question) -> set[str]:
        words = cls._WORD.findall(f"{question.text} {question.category}".lower())
        return {w for w in words if len(w) >= 3 and w not in cls.STOPWORDS}

    @classmethod
    def compute_score(cls, question: Question, answer_text: str) -> int:
        answer = (answer_text or "").strip()
        if not answer:
            return 0

        length_ratio = min(1.0, len(answer) / cls.TARGET_LENGTH[question.difficulty])

        keywords = cls.keywords(question)
        if keywords:
            answer_words = set(cls._WORD.findall(answer.lower()))
            coverage = len(keywords & answer_words) / len(keywords)
            keyword_ratio = min(1.0, coverage / cls.KEYWORD_SATURATION[question.difficulty])
        else:
            keyword_ratio = length_ratio

        raw = cls.LENGTH_WEIGHT * length_ratio + cls.KEYWORD_WEIGHT * keyword_ratio
        return max(MIN_SCORE, min(MAX_SCORE, round(raw)))

    async def score(self, question: Question, answer_text: str) -> ScoreResult:
        with track_scoring(self.name):
            score = self.compute_score(question, answer_text)
        return ScoreResult(score=score, feedback=build_feedback(question, answer_text, score))


class GeminiAnswerScorer(AnswerScorer):
    """Scores answers with Gemini structured output, with retries and a per-attempt timeout."""

    name = "llm"

    def __init__(self, llm: ChatGoogleGenerativeAI, timeout_seconds: float = 20.0, attempts: int = 2):
        self.llm = llm
        self.timeout_seconds = timeout_seconds
        self.attempts = attempts
        self.prompt = create_answer_scoring_prompt()
        logger.info("Initialized GeminiAnswerScorer")

    async def score(self, question: Question, answer_text: str) -> ScoreResult:
        messages = self.prompt.format_messages(
            difficulty=question.difficulty.value,
            category=question.category,
            question=question.text,
            answer=answer_text,
        )

        llm_start = time.time()
        try:
            with track_scoring(self.name):
                assessment = await self._call_llm_with_retry(messages)
        except Exception as e:
            raise ScoringUnavailableError(f"LLM scoring failed for {question.id}: {e}") from e

        log_llm_call(
            logger,
            operation="score_answer",
            latency_ms=(time.time() - llm_start) * 1000,
            model=getattr(self.llm, "model", None),
            question_id=question.id,
            score=assessment.score,
        )

        feedback = build_feedback(
            question,
            answer_text,
            assessment.score,
            ai_feedback=assessment.feedback,
            ai_sample_answer=assessment.sample_answer,
        )
        return ScoreResult(score=assessment.score, feedback=feedback)

    async def _call_llm_with_retry(self, messages) -> AnswerAssessment:
        @async_retry_llm_call(attempts=self.attempts)
        async def score_answer():
            llm_with_structure = self.llm.with_structured_output(AnswerAssessment)
            return await call_llm_with_timeout(llm_with_structure.ainvoke, self.timeout_seconds, messages)

        result = await score_answer()
        if result is None:
            raise ScoringUnavailableError("LLM returned no structured output")
        if isinstance(result, AnswerAssessment):
            return result
        return AnswerAssessment.model_validate(result)


def create_scorer(settings: Settings) -> AnswerScorer:
    """Gemini scorer when an API key is configured, otherwise the heuristic."""
    llm = create_chat_model(settings)
    if llm is None:
        logger.info("No GEMINI_API_KEY configured, answers are scored by the local heuristic")
        return HeuristicAnswerScorer()
    return GeminiAnswerScorer(llm, timeout_seconds=settings.scoring_timeout_seconds)
