"""
Pydantic Schemas for Structured LLM Outputs
Ensures type-safe responses from LLM calls.
"""

from pydantic import BaseModel, Field, field_validator


class AnswerAssessment(BaseModel):
    """LLM judgement of a single interview answer"""

    score: int = Field(
        description="Score from 0 to 100 for technical accuracy, completeness and clarity",
        ge=0,
        le=100
    )

    feedback: str = Field(
        description="2-4 sentences: what the answer got right and what it should improve",
        min_length=1
    )

    sample_answer: str = Field(
        description="A concise model answer demonstrating the expected response",
        min_length=1
    )

    @field_validator("feedback", "sample_answer")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()
