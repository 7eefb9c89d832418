"""
Question Sequencer
Holds a session's ordered question list and the current position.
"""

from typing import Optional, Sequence, Tuple

from interview_coach.core.exceptions import QuestionOutOfRangeError
from interview_coach.core.models import Question


class QuestionSequencer:
    """Steps through a fixed question list one question at a time."""

    def __init__(self, questions: Sequence[Question], start_index: int = 0):
        self._questions: Tuple[Question, ...] = tuple(questions)
        if not 0 <= start_index <= len(self._questions):
            raise QuestionOutOfRangeError(
                f"start_index {start_index} outside 0..{len(self._questions)}"
            )
        self._index = start_index

    @property
    def index(self) -> int:
        return self._index

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    def __len__(self) -> int:
        return len(self._questions)

    def current(self) -> Optional[Question]:
        if self.is_exhausted():
            return None
        return self._questions[self._index]

    def advance(self) -> None:
        if self.is_exhausted():
            raise QuestionOutOfRangeError(
                f"Cannot advance past question {len(self._questions)} of {len(self._questions)}"
            )
        self._index += 1

    def is_exhausted(self) -> bool:
        return self._index == len(self._questions)
