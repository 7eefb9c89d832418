"""
Question Bank
Pools of interview questions per difficulty and the per-session generator.
"""

import logging
import random
from typing import Dict, List, Optional

from interview_coach.core.constants import QUESTIONS_PER_DIFFICULTY
from interview_coach.core.models import Difficulty, Question

logger = logging.getLogger(__name__)


# (question text, category)
QUESTION_POOLS: Dict[Difficulty, List[tuple[str, str]]] = {
    Difficulty.EASY: [
        ("What is React and what are its main features?", "React Basics"),
        ("Explain the difference between let, const, and var in JavaScript.", "JavaScript Fundamentals"),
        ("What is the purpose of useEffect in React?", "React Hooks"),
        ("How do you handle events in React?", "React Events"),
        ("What is the difference between == and === in JavaScript?", "JavaScript Operators"),
        ("What is JSX in React?", "React Basics"),
        ("How do you create a component in React?", "React Components"),
        ("What is the virtual DOM in React?", "React Architecture"),
        ("How do you pass data between components in React?", "React Props"),
        ("What is state in React?", "React State"),
    ],
    Difficulty.MEDIUM: [
        ("Explain the React component lifecycle methods.", "React Lifecycle"),
        ("How do you manage state in React applications?", "State Management"),
        ("What is the difference between props and state?", "React Concepts"),
        ("How do you handle forms in React?", "React Forms"),
        ("Explain the concept of virtual DOM in React.", "React Architecture"),
        ("What are React Hooks and why are they useful?", "React Hooks"),
        ("How do you handle API calls in React?", "React API Integration"),
        ("What is the difference between functional and class components?", "React Components"),
        ("How do you implement conditional rendering in React?", "React Rendering"),
        ("What is the purpose of keys in React lists?", "React Lists"),
    ],
    Difficulty.HARD: [
        ("How do you optimize React application performance?", "Performance Optimization"),
        ("Explain the difference between controlled and uncontrolled components.", "Advanced React"),
        ("How do you implement error boundaries in React?", "Error Handling"),
        ("What is the difference between useCallback and useMemo?", "React Optimization"),
        ("How do you handle authentication in React applications?", "Authentication"),
        ("Explain React Context and when to use it.", "State Management"),
        ("How do you implement code splitting in React?", "Performance Optimization"),
        ("What is the difference between useReducer and useState?", "React Hooks"),
        ("How do you implement custom hooks in React?", "Custom Hooks"),
        ("Explain React Suspense and concurrent features.", "Advanced React"),
    ],
}


def generate_questions(
    rng: Optional[random.Random] = None,
    pools: Optional[Dict[Difficulty, List[tuple[str, str]]]] = None,
) -> List[Question]:
    """
    Draw a session's questions: easy first, then medium, then hard.

    Questions are drawn without replacement within a difficulty, so a
    session never repeats a question.
    """
    rng = rng or random.Random()
    pools = pools or QUESTION_POOLS
    questions: List[Question] = []

    for difficulty in Difficulty:
        count = QUESTIONS_PER_DIFFICULTY[difficulty.value]
        pool = pools[difficulty]
        if len(pool) < count:
            raise ValueError(f"Need {count} {difficulty.value} questions, pool has {len(pool)}")

        for i, (text, category) in enumerate(rng.sample(pool, count), start=1):
            questions.append(Question(
                id=f"{difficulty.value}_{i}",
                text=text,
                category=category,
                difficulty=difficulty,
                time_limit_seconds=difficulty.time_limit_seconds,
            ))

    logger.debug(f"Generated {len(questions)} questions: {[q.id for q in questions]}")
    return questions
