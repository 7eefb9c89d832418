"""
Interview Summary
Final score and narrative summary, computed locally from per-difficulty averages.
"""

import math
from typing import Dict, List, Sequence

from interview_coach.core.constants import IMPROVEMENT_THRESHOLDS, STRENGTH_THRESHOLDS, TARGET_ROLE
from interview_coach.core.models import CandidateInfo, Difficulty, Outcome, Question


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_final_score(scores: Sequence[int]) -> int:
    """Mean of all scores, rounded to the nearest integer (halves round up)."""
    if not scores:
        raise ValueError("Cannot compute a final score without scores")
    return round_half_up(sum(scores) / len(scores))


def difficulty_averages(questions: Sequence[Question], outcomes: Sequence[Outcome]) -> Dict[Difficulty, float]:
    """Average score per difficulty, for difficulties that were asked."""
    by_difficulty: Dict[Difficulty, List[int]] = {}
    by_id = {question.id: question for question in questions}
    for outcome in outcomes:
        question = by_id[outcome.question_id]
        by_difficulty.setdefault(question.difficulty, []).append(outcome.score)
    return {difficulty: sum(scores) / len(scores) for difficulty, scores in by_difficulty.items()}


def performance_level(final_score: int) -> str:
    if final_score >= 80:
        return "Excellent"
    if final_score >= 60:
        return "Good"
    return "Needs Improvement"


def summarize(candidate: CandidateInfo, questions: Sequence[Question], outcomes: Sequence[Outcome]) -> str:
    final_score = compute_final_score([outcome.score for outcome in outcomes])
    averages = difficulty_averages(questions, outcomes)

    strengths = []
    improvements = []
    for difficulty in Difficulty:
        if difficulty not in averages:
            continue
        avg = averages[difficulty]
        strength_min, strength_text = STRENGTH_THRESHOLDS[difficulty.value]
        improvement_max, improvement_text = IMPROVEMENT_THRESHOLDS[difficulty.value]
        if avg >= strength_min:
            strengths.append(strength_text)
        if avg < improvement_max:
            improvements.append(improvement_text)

    parts = [
        f"{candidate.name} demonstrated {performance_level(final_score).lower()} performance "
        f"with an overall score of {final_score}/100."
    ]
    if strengths:
        parts.append(f"Strengths include {', '.join(strengths)}.")
    if improvements:
        parts.append(f"Areas for improvement: {', '.join(improvements)}.")
    potential = "strong potential" if final_score >= 70 else "room for growth"
    parts.append(f"The candidate shows {potential} for a {TARGET_ROLE} role.")

    return " ".join(parts)
