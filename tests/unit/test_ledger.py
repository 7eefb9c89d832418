"""
Unit Tests for CandidateLedger

Ranking, search and the append-only contract.
"""

import pytest

from interview_coach.core.exceptions import InvalidSessionError
from interview_coach.core.ledger import CandidateLedger
from interview_coach.core.models import InterviewSession, SortOrder


class TestCandidateLedger:
    """Test suite for CandidateLedger."""

    @pytest.fixture
    def populated(self, ledger, make_complete):
        ledger.append(make_complete("a", "Alice Smith", "alice@example.com", 90))
        ledger.append(make_complete("b", "Bob Jones", "bob@example.com", 40))
        ledger.append(make_complete("c", "Carol White", "carol@example.com", 70))
        return ledger

    def test_sort_descending(self, populated):
        assert [s.final_score for s in populated.list(SortOrder.SCORE_DESC)] == [90, 70, 40]

    def test_sort_ascending(self, populated):
        assert [s.final_score for s in populated.list(SortOrder.SCORE_ASC)] == [40, 70, 90]

    def test_ties_keep_insertion_order(self, ledger, make_complete):
        ledger.append(make_complete("first", "First Person", "first@example.com", 70))
        ledger.append(make_complete("high", "High Person", "high@example.com", 95))
        ledger.append(make_complete("second", "Second Person", "second@example.com", 70))

        desc = [s.session_id for s in ledger.list(SortOrder.SCORE_DESC)]
        asc = [s.session_id for s in ledger.list(SortOrder.SCORE_ASC)]

        assert desc == ["high", "first", "second"]
        assert asc == ["first", "second", "high"]

    def test_search_matches_name_or_email_case_insensitive(self, ledger, make_complete):
        ledger.append(make_complete("1", "Jane Doe", "jd@example.com", 80))
        ledger.append(make_complete("2", "Mark Twain", "JANE.fan@example.com", 60))
        ledger.append(make_complete("3", "Someone Else", "other@example.com", 70))

        matches = ledger.list(search_text="jane")

        assert {s.session_id for s in matches} == {"1", "2"}

    def test_blank_search_returns_everything(self, populated):
        assert len(populated.list(search_text="   ")) == 3

    def test_rejects_incomplete_session(self, ledger, candidate):
        session = InterviewSession(session_id="x", candidate=candidate)
        with pytest.raises(InvalidSessionError):
            ledger.append(session)
        assert len(ledger) == 0

    def test_rejects_duplicate_session(self, ledger, make_complete):
        session = make_complete("dup", "Jane Doe", "jane@example.com", 80)
        ledger.append(session)
        with pytest.raises(InvalidSessionError):
            ledger.append(session)
        assert len(ledger) == 1

    def test_entries_are_copies(self, ledger, make_complete):
        session = make_complete("copy", "Jane Doe", "jane@example.com", 80)
        ledger.append(session)

        session.summary = "changed afterwards"

        assert ledger.get("copy").summary == "Jane Doe summary"

    def test_extend_skips_known_sessions(self, ledger, make_complete):
        first = make_complete("1", "Jane Doe", "jane@example.com", 80)
        ledger.append(first)

        added = ledger.extend([first, make_complete("2", "Jane Doe", "jane@example.com", 65)])

        assert added == 1
        assert len(ledger) == 2

    def test_history_by_email(self, ledger, make_complete):
        ledger.append(make_complete("1", "Jane Doe", "jane@example.com", 50))
        ledger.append(make_complete("2", "Bob Jones", "bob@example.com", 60))
        ledger.append(make_complete("3", "Jane Doe", "Jane@Example.com", 75))

        assert [s.session_id for s in ledger.history("jane@example.com")] == ["1", "3"]

    def test_get_unknown_returns_none(self):
        assert CandidateLedger().get("missing") is None
