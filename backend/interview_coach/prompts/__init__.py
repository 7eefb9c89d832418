"""
Prompts Module
LLM prompts with LangChain templates and structured output schemas.
"""

from .schemas import AnswerAssessment
from .scoring import (
    create_answer_scoring_prompt,
    create_reference_answer_prompt,
)


__all__ = [
    'AnswerAssessment',
    'create_answer_scoring_prompt',
    'create_reference_answer_prompt',
]
