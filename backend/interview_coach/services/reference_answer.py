"""
Reference Answers
Model answers for the dashboard's "generate answer" button.
"""

import logging
import time
from typing import Optional, Tuple

from langchain_google_genai import ChatGoogleGenerativeAI

from interview_coach.core.models import Question
from interview_coach.prompts.scoring import create_reference_answer_prompt
from interview_coach.services.feedback import sample_answer_for
from interview_coach.utils.llm_retry import async_retry_llm_call, call_llm_with_timeout
from interview_coach.utils.logging_config import log_llm_call

logger = logging.getLogger(__name__)


class ReferenceAnswerGenerator:
    """Gemini prose answers, falling back to the curated or templated sample answer."""

    def __init__(self, llm: Optional[ChatGoogleGenerativeAI] = None, timeout_seconds: float = 30.0):
        self.llm = llm
        self.timeout_seconds = timeout_seconds
        self.prompt = create_reference_answer_prompt()

    async def generate(self, question: Question) -> Tuple[str, str]:
        """
        Returns:
            (answer, generated_by) where generated_by is "llm" or "sample"
        """
        if self.llm is None:
            return sample_answer_for(question), "sample"

        messages = self.prompt.format_messages(
            difficulty=question.difficulty.value,
            category=question.category,
            question=question.text,
        )

        @async_retry_llm_call(attempts=2)
        async def generate_reference_answer():
            return await call_llm_with_timeout(self.llm.ainvoke, self.timeout_seconds, messages)

        llm_start = time.time()
        try:
            response = await generate_reference_answer()
        except Exception as e:
            logger.warning(f"Reference answer for {question.id} failed, using sample answer: {e}")
            return sample_answer_for(question), "sample"

        answer = str(response.content).strip()
        log_llm_call(
            logger,
            operation="reference_answer",
            latency_ms=(time.time() - llm_start) * 1000,
            model=getattr(self.llm, "model", None),
            question_id=question.id,
        )
        if not answer:
            return sample_answer_for(question), "sample"
        return answer, "llm"
