"""
Services module for the interview coach backend.
"""

from interview_coach.services.reference_answer import ReferenceAnswerGenerator
from interview_coach.services.resume_extractor import (
    extract_candidate_info,
    DocumentProcessingError,
)
from interview_coach.services.scoring import (
    AnswerScorer,
    GeminiAnswerScorer,
    HeuristicAnswerScorer,
    create_chat_model,
    create_scorer,
)
from interview_coach.services.session_store import (
    SessionStore,
    InMemorySessionStore,
    JsonFileSessionStore,
    create_session_store,
)

__all__ = [
    # Sessions
    "SessionStore",
    "InMemorySessionStore",
    "JsonFileSessionStore",
    "create_session_store",
    # Scoring
    "AnswerScorer",
    "GeminiAnswerScorer",
    "HeuristicAnswerScorer",
    "create_chat_model",
    "create_scorer",
    "ReferenceAnswerGenerator",
    # Resume extraction
    "extract_candidate_info",
    "DocumentProcessingError",
]
