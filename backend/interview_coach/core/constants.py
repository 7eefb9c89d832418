"""
Core Application Constants
Defines interview configuration and system-wide constants.
"""

# Question mix per session, in the order questions are asked
QUESTIONS_PER_DIFFICULTY = {
    "easy": 2,
    "medium": 2,
    "hard": 2,
}

# Seconds allowed per question
TIME_LIMIT_SECONDS = {
    "easy": 20,
    "medium": 60,
    "hard": 120,
}

TICK_INTERVAL_SECONDS = 1.0

MIN_SCORE = 0
MAX_SCORE = 100

# Summary thresholds (per-difficulty averages)
STRENGTH_THRESHOLDS = {
    "easy": (80, "strong fundamental knowledge"),
    "medium": (75, "good intermediate-level understanding"),
    "hard": (70, "solid advanced concepts grasp"),
}
IMPROVEMENT_THRESHOLDS = {
    "easy": (60, "basic concepts need reinforcement"),
    "medium": (60, "intermediate topics require more study"),
    "hard": (50, "advanced concepts need significant improvement"),
}

TARGET_ROLE = "full-stack developer"
