"""
Candidate Ledger
Append-only collection of completed sessions, searchable and ranked by score.
"""

import logging
from typing import Dict, Iterable, List, Optional

from interview_coach.core.exceptions import InvalidSessionError
from interview_coach.core.models import InterviewSession, SessionStatus, SortOrder

logger = logging.getLogger(__name__)


class CandidateLedger:
    """
    Completed sessions in the order they were appended.

    Entries are deep copies taken at append time, so later changes to the
    caller's session object never reach the ledger. There is no update or
    delete.
    """

    def __init__(self):
        self._entries: List[InterviewSession] = []
        self._by_id: Dict[str, InterviewSession] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._by_id

    def append(self, session: InterviewSession) -> InterviewSession:
        if session.status != SessionStatus.COMPLETE:
            raise InvalidSessionError(
                f"Session {session.session_id} is {session.status.value}, only complete sessions can be appended"
            )
        if session.session_id in self._by_id:
            raise InvalidSessionError(f"Session {session.session_id} is already in the ledger")

        entry = session.model_copy(deep=True)
        self._entries.append(entry)
        self._by_id[entry.session_id] = entry
        logger.info(
            f"[{entry.session_id}] Appended to ledger: {entry.candidate.name} scored {entry.final_score}"
        )
        return entry

    def extend(self, sessions: Iterable[InterviewSession]) -> int:
        """Append several sessions, skipping those already present. Used when rehydrating."""
        added = 0
        for session in sessions:
            if session.session_id in self._by_id:
                continue
            self.append(session)
            added += 1
        return added

    def list(
        self,
        sort_order: SortOrder = SortOrder.SCORE_DESC,
        search_text: Optional[str] = None,
    ) -> List[InterviewSession]:
        needle = (search_text or "").strip().lower()
        matches = [
            entry for entry in self._entries
            if not needle
            or needle in entry.candidate.name.lower()
            or needle in entry.candidate.email.lower()
        ]
        # sorted() is stable, so equal scores keep insertion order
        return sorted(
            matches,
            key=lambda entry: entry.final_score,
            reverse=sort_order == SortOrder.SCORE_DESC,
        )

    def get(self, session_id: str) -> Optional[InterviewSession]:
        return self._by_id.get(session_id)

    def history(self, email: str) -> List[InterviewSession]:
        """All attempts made with this email, oldest first."""
        email = email.strip().lower()
        return [entry for entry in self._entries if entry.candidate.email.lower() == email]
