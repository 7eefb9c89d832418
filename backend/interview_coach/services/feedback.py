"""
Answer Feedback
Builds the narrative feedback, suggestions and sample answer for an outcome.
"""

from typing import Dict, Optional

from interview_coach.core.models import AnswerFeedback, Difficulty, Question


TIMEOUT_FEEDBACK = (
    "No answer provided within the time limit. "
    "Consider reviewing the fundamental concepts related to this topic."
)
TIMEOUT_SUGGESTIONS = ["Review basic concepts", "Practice time management", "Study related materials"]

# Curated answers for the questions asked most often; everything else gets a template
SAMPLE_ANSWERS: Dict[str, str] = {
    "What is React and what are its main features?": (
        "React is a JavaScript library for building user interfaces. Its main features are a "
        "component-based architecture for reusable UI pieces, a virtual DOM that keeps direct DOM "
        "manipulation to a minimum, JSX for writing markup alongside logic, unidirectional data flow "
        "that makes state changes predictable, and a large ecosystem (React Router, Redux, testing tools)."
    ),
    "Explain the difference between let, const, and var in JavaScript.": (
        "var is function-scoped and hoisted with an initial value of undefined; let and const are "
        "block-scoped and sit in the temporal dead zone until declared. var and let can be reassigned, "
        "const cannot. var can be redeclared in the same scope, let and const cannot. Prefer const, use "
        "let when a binding must change, and avoid var."
    ),
    "What is the purpose of useEffect in React?": (
        "useEffect runs side effects from function components: fetching data, subscribing to external "
        "sources, touching the DOM directly. The dependency array controls when it re-runs and the "
        "returned cleanup function removes listeners or cancels work when the component unmounts."
    ),
    "What is the difference between props and state?": (
        "Props are read-only inputs passed from parent to child; state is data a component owns and "
        "updates with setState or useState, and changing it triggers a re-render. Props flow down, state "
        "stays local."
    ),
    "How do you optimize React application performance?": (
        "Split code with React.lazy and Suspense, memoize with React.memo, useMemo and useCallback, "
        "virtualize long lists, keep state as local as possible to avoid needless re-renders, trim the "
        "bundle with tree shaking, and profile with the React DevTools Profiler before optimizing."
    ),
    "What is the difference between useCallback and useMemo?": (
        "useCallback memoizes a function reference, useMemo memoizes a computed value. Both take a "
        "dependency array and only recompute when a dependency changes. Use useCallback for callbacks "
        "passed to memoized children and useMemo for expensive calculations; both add overhead, so use "
        "them where profiling shows a problem."
    ),
}

GENERIC_SAMPLE_ANSWERS = {
    Difficulty.EASY: (
        "A good answer for this {category} question would include: 1) a clear definition of the main "
        "concept, 2) key features or characteristics, 3) a simple example or use case, 4) why it matters. "
        "For \"{question}\", explain the fundamental concept clearly and give a practical example."
    ),
    Difficulty.MEDIUM: (
        "An effective answer for this {category} question should cover: 1) a detailed explanation of the "
        "concept, 2) how it compares with related concepts, 3) real-world examples, 4) best practices or "
        "common patterns, 5) challenges to watch for. Show how the concept applies in day-to-day development."
    ),
    Difficulty.HARD: (
        "A comprehensive answer for this advanced {category} question should include: 1) deep technical "
        "understanding, 2) multiple approaches, 3) performance implications, 4) trade-offs and alternatives, "
        "5) real-world implementation examples, 6) common pitfalls. Discuss when each approach fits."
    ),
}

DIFFICULTY_NOTES = {
    Difficulty.EASY: "This was a basic question - mastering these fundamentals is crucial for your development journey.",
    Difficulty.MEDIUM: "This was an intermediate question - building on your basics with more complex scenarios.",
    Difficulty.HARD: "This was an advanced question - these concepts require deep understanding and practical experience.",
}


def sample_answer_for(question: Question) -> str:
    if question.text in SAMPLE_ANSWERS:
        return SAMPLE_ANSWERS[question.text]
    template = GENERIC_SAMPLE_ANSWERS[question.difficulty]
    return template.format(category=question.category, question=question.text.lower())


def suggestions_for(score: int) -> list[str]:
    if score >= 80:
        return ["Continue building on this knowledge", "Share your expertise with others", "Explore advanced topics"]
    if score >= 60:
        return ["Review related concepts", "Practice explaining concepts in detail", "Study real-world examples"]
    if score >= 40:
        return ["Review basic concepts", "Practice with examples", "Seek additional learning resources"]
    return ["Study fundamental concepts", "Practice basic examples", "Consider additional training"]


def timeout_feedback(question: Question) -> AnswerFeedback:
    return AnswerFeedback(
        text=TIMEOUT_FEEDBACK,
        suggestions=list(TIMEOUT_SUGGESTIONS),
        sample_answer=sample_answer_for(question),
    )


def build_feedback(
    question: Question,
    answer_text: str,
    score: int,
    ai_feedback: Optional[str] = None,
    ai_sample_answer: Optional[str] = None,
) -> AnswerFeedback:
    """
    Feedback for a scored answer.

    When the LLM supplied its own feedback that text is used as-is;
    otherwise the text is chosen by score band and answer length.
    """
    if not answer_text or not answer_text.strip():
        return timeout_feedback(question)

    sample = ai_sample_answer or sample_answer_for(question)
    if ai_feedback:
        return AnswerFeedback(text=ai_feedback, suggestions=suggestions_for(score), sample_answer=sample)

    topic = question.category.lower()
    length = len(answer_text.strip())

    if score >= 80:
        text = f"Excellent answer! Your response demonstrates strong understanding of {topic}. "
        if length > 100:
            text += "You provided comprehensive details and showed deep knowledge of the topic."
        else:
            text += "Your answer was concise yet covered the key points effectively."
    elif score >= 60:
        text = f"Good response! You showed solid understanding of {topic}. "
        if length > 50:
            text += "Your answer covered the main points well, though there's room for more depth."
        else:
            text += "Consider expanding your answer with more details and examples."
    elif score >= 40:
        text = (
            f"Your answer shows some understanding but needs improvement in {topic}. "
            "Consider studying the fundamental concepts more thoroughly."
        )
    else:
        text = (
            f"This area needs significant improvement. Focus on learning the basic concepts of {topic}. "
            "Consider starting with foundational materials."
        )

    text += " " + DIFFICULTY_NOTES[question.difficulty]
    return AnswerFeedback(text=text.strip(), suggestions=suggestions_for(score), sample_answer=sample)
