"""
Answer Scoring Prompts
Prompts for scoring candidate answers and writing reference answers.
Uses LangChain ChatPromptTemplate; scoring pairs with the AnswerAssessment schema.
"""

from langchain_core.prompts import ChatPromptTemplate, SystemMessagePromptTemplate, HumanMessagePromptTemplate


# ============================================================================
# ANSWER SCORING (one answer, structured output)
# ============================================================================

ANSWER_SCORING_SYSTEM = """You are an expert technical interviewer evaluating a candidate's answer to a {difficulty} level {category} question.

**SCORING (0-100)**:
- Technical accuracy: is what the candidate said correct?
- Completeness: does it cover the points an interviewer expects at this level?
- Clarity: is it organised and easy to follow?

**CALIBRATION**:
- easy questions: a correct definition with one example deserves 70+
- medium questions: expect comparisons, examples and trade-offs for 70+
- hard questions: expect multiple approaches, pitfalls and performance implications for 70+
- An answer that is off-topic or wrong scores below 30 regardless of length

**FEEDBACK**: 2-4 sentences addressed to the candidate: strengths first, then what to improve.

**SAMPLE ANSWER**: a concise model answer at the expected depth for this difficulty."""

ANSWER_SCORING_HUMAN = """Question: {question}

Candidate's Answer:
{answer}"""


def create_answer_scoring_prompt() -> ChatPromptTemplate:
    """
    Create prompt for scoring one answer.

    Variables:
        difficulty: easy / medium / hard
        category: Question category
        question: Question text
        answer: Candidate's answer text
    """
    return ChatPromptTemplate.from_messages([
        SystemMessagePromptTemplate.from_template(ANSWER_SCORING_SYSTEM),
        HumanMessagePromptTemplate.from_template(ANSWER_SCORING_HUMAN),
    ])


# ============================================================================
# REFERENCE ANSWER (free text, shown on the dashboard)
# ============================================================================

REFERENCE_ANSWER_SYSTEM = """You are an expert technical interviewer. Provide a comprehensive, well-structured answer to this {difficulty} level {category} question.

Include:
1. A clear explanation of the concept
2. Practical examples or use cases
3. Best practices or important considerations
4. Code examples if applicable

Make the answer educational, suitable for someone learning or reviewing this topic."""

REFERENCE_ANSWER_HUMAN = """Question: {question}"""


def create_reference_answer_prompt() -> ChatPromptTemplate:
    """
    Create prompt for a reference answer.

    Variables:
        difficulty: easy / medium / hard
        category: Question category
        question: Question text
    """
    return ChatPromptTemplate.from_messages([
        SystemMessagePromptTemplate.from_template(REFERENCE_ANSWER_SYSTEM),
        HumanMessagePromptTemplate.from_template(REFERENCE_ANSWER_HUMAN),
    ])
