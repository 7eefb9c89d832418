"""
Structured Logging Configuration

Provides JSON-formatted logging for production environments with rich contextual metadata.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from logging import LogRecord


# Attributes every LogRecord carries; anything else arrived via `extra=`
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs", "message", "pathname",
    "process", "processName", "relativeCreated", "thread", "threadName",
    "exc_info", "exc_text", "stack_info", "taskName",
})


class JSONFormatter(logging.Formatter):
    """
    Custom JSON formatter for structured logging.

    Outputs logs in JSON format with timestamp, level, logger name, message, and extra fields.
    """

    def format(self, record: LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps({key: value})
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting (default True)
        log_file: Optional file path to write logs to

    Example:
        setup_logging(level="DEBUG", json_format=True, log_file="app.log")
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
        )

    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(getattr(logging, level.upper()))
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # Third-party chatter
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)
    # Per-tick timer logs are only useful when debugging the countdown itself
    logging.getLogger("interview_coach.core.timer").setLevel(logging.INFO)


def log_llm_call(
    logger: logging.Logger,
    operation: str,
    latency_ms: Optional[float] = None,
    model: Optional[str] = None,
    **extra
) -> None:
    """
    Log an LLM API call with standardized fields.

    Example:
        log_llm_call(logger, operation="score_answer", latency_ms=1250.5, model="gemini-2.5-flash")
    """
    log_data = {
        "event": "llm_call",
        "operation": operation,
    }

    if latency_ms is not None:
        log_data["latency_ms"] = round(latency_ms, 1)
    if model is not None:
        log_data["model"] = model

    log_data.update(extra)

    logger.info("LLM call completed", extra=log_data)


def log_resolution(
    logger: logging.Logger,
    session_id: str,
    question_id: str,
    source: str,
    score: int,
    scored_by: str,
    **extra
) -> None:
    """
    Log the resolution of one question with standardized fields.

    Example:
        log_resolution(logger, "abc123", "easy_1", source="timeout", score=0, scored_by="timeout")
    """
    log_data = {
        "event": "question_resolved",
        "session_id": session_id,
        "question_id": question_id,
        "source": source,
        "score": score,
        "scored_by": scored_by,
    }

    log_data.update(extra)

    logger.info(f"[{session_id}] Resolved {question_id} via {source}: {score}/100 ({scored_by})", extra=log_data)


def log_session_event(
    logger: logging.Logger,
    session_id: str,
    event_type: str,
    **extra
) -> None:
    """
    Log session-level events.

    Args:
        logger: The logger instance
        session_id: Session identifier
        event_type: Type of event (started, restored, abandoned, completed)
        **extra: Additional fields

    Example:
        log_session_event(logger, session_id="abc123", event_type="completed", final_score=67)
    """
    log_data = {
        "event": "session_event",
        "session_id": session_id,
        "event_type": event_type,
    }

    log_data.update(extra)

    logger.info(f"Session event: {event_type}", extra=log_data)
