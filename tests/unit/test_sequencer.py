"""
Unit Tests for QuestionSequencer
"""

import pytest

from interview_coach.core.exceptions import QuestionOutOfRangeError
from interview_coach.core.sequencer import QuestionSequencer


class TestQuestionSequencer:
    """Test suite for QuestionSequencer."""

    def test_walks_questions_in_order(self, questions):
        sequencer = QuestionSequencer(questions)
        seen = []
        while not sequencer.is_exhausted():
            seen.append(sequencer.current().id)
            sequencer.advance()

        assert seen == [q.id for q in questions]
        assert sequencer.current() is None
        assert sequencer.index == len(questions)

    def test_advance_past_end_raises(self, questions):
        sequencer = QuestionSequencer(questions, start_index=len(questions))
        with pytest.raises(QuestionOutOfRangeError):
            sequencer.advance()
        assert sequencer.index == len(questions)

    def test_start_index_resumes_midway(self, questions):
        sequencer = QuestionSequencer(questions, start_index=3)
        assert sequencer.current() == questions[3]
        assert len(sequencer) == 6

    @pytest.mark.parametrize("start_index", [-1, 7])
    def test_invalid_start_index(self, questions, start_index):
        with pytest.raises(QuestionOutOfRangeError):
            QuestionSequencer(questions, start_index=start_index)

    def test_question_list_is_immutable(self, questions):
        sequencer = QuestionSequencer(questions)
        questions.pop()
        assert len(sequencer) == 6
        assert isinstance(sequencer.questions, tuple)
