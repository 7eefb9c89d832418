"""
Metrics Collection and Monitoring

Provides Prometheus-style metrics for monitoring interview sessions and scoring.
"""

import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram, Gauge


# Session Metrics
sessions_started_total = Counter(
    "interview_sessions_started_total",
    "Total number of interview sessions started"
)

sessions_completed_total = Counter(
    "interview_sessions_completed_total",
    "Total number of interview sessions completed"
)

sessions_abandoned_total = Counter(
    "interview_sessions_abandoned_total",
    "Total number of interview sessions abandoned before completion"
)

active_sessions = Gauge(
    "interview_active_sessions",
    "Number of interview sessions currently in progress"
)

session_store_errors_total = Counter(
    "interview_session_store_errors_total",
    "Session snapshots that could not be written to the store"
)

final_score_distribution = Histogram(
    "interview_final_score",
    "Final interview scores (0-100)",
    buckets=(10, 20, 30, 40, 50, 60, 70, 80, 90, 100)
)


# Resolution Metrics
question_resolutions_total = Counter(
    "interview_question_resolutions_total",
    "Questions resolved, by trigger and difficulty",
    ["source", "difficulty"]  # source: submitted, timeout
)

ignored_triggers_total = Counter(
    "interview_ignored_triggers_total",
    "Submissions or expiries ignored because the question was already resolved",
    ["trigger"]  # trigger: submission, expiry
)


# Scoring Metrics
scoring_requests_total = Counter(
    "scoring_requests_total",
    "Total number of scoring requests",
    ["backend", "status"]  # backend: llm, heuristic; status: success, error
)

scoring_fallbacks_total = Counter(
    "scoring_fallbacks_total",
    "Answers scored by the heuristic because the LLM scorer failed"
)

scoring_latency_seconds = Histogram(
    "scoring_latency_seconds",
    "Scoring latency in seconds",
    ["backend"],
    buckets=(0.01, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)
)

llm_retry_attempts_total = Counter(
    "llm_retry_attempts_total",
    "Failed LLM attempts, by operation and error class",
    ["operation", "reason"]
)


# Utility Functions

@contextmanager
def track_scoring(backend: str):
    """
    Context manager to track scoring call metrics.

    Example:
        with track_scoring("llm"):
            result = await scorer.score(question, answer)
    """
    start_time = time.time()
    status = "success"

    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        scoring_requests_total.labels(backend=backend, status=status).inc()
        scoring_latency_seconds.labels(backend=backend).observe(time.time() - start_time)


def record_resolution(source: str, difficulty: str):
    question_resolutions_total.labels(source=source, difficulty=difficulty).inc()


def record_ignored_trigger(trigger: str):
    ignored_triggers_total.labels(trigger=trigger).inc()


def record_session_started():
    sessions_started_total.inc()


def record_session_completed(final_score: int):
    sessions_completed_total.inc()
    final_score_distribution.observe(final_score)


def record_session_abandoned():
    sessions_abandoned_total.inc()
