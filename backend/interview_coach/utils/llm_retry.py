"""
LLM Retry Utilities

Error classification, retry with exponential backoff, and timeouts for LLM calls.
"""

import asyncio
import logging
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from interview_coach.utils.metrics import llm_retry_attempts_total

logger = logging.getLogger(__name__)

T = TypeVar('T')


class LLMRateLimitError(Exception):
    """Raised when LLM API rate limit is exceeded (429)"""
    pass


class LLMTimeoutError(Exception):
    """Raised when LLM API call times out"""
    pass


class LLMAPIError(Exception):
    """General LLM API error"""
    pass


RETRYABLE_ERRORS = (LLMRateLimitError, LLMTimeoutError, ConnectionError)


def classify_llm_error(error: Exception) -> Exception:
    """Map an arbitrary client exception onto the retry taxonomy."""
    if isinstance(error, (LLMRateLimitError, LLMTimeoutError, LLMAPIError, ConnectionError)):
        return error
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return LLMTimeoutError(f"Request timed out: {error}")

    error_msg = str(error).lower()
    if "429" in error_msg or "rate limit" in error_msg or "resource exhausted" in error_msg:
        return LLMRateLimitError(f"Rate limit exceeded: {error}")
    if "timeout" in error_msg or "deadline" in error_msg:
        return LLMTimeoutError(f"Request timed out: {error}")
    if any(keyword in error_msg for keyword in ("connection", "network", "unavailable")):
        return ConnectionError(f"Connection failed: {error}")
    return LLMAPIError(f"API error: {error}")


def async_retry_llm_call(attempts: int = 3, min_wait: float = 1.0, max_wait: float = 8.0):
    """
    Decorator for async LLM calls with retry logic.

    Rate limits, timeouts and connection errors are retried with exponential
    backoff; other API errors fail immediately. The last error is re-raised.

    Example:
        @async_retry_llm_call(attempts=2)
        async def call_llm(messages):
            return await llm.ainvoke(messages)
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @retry(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                classified = classify_llm_error(e)
                reason = type(classified).__name__
                llm_retry_attempts_total.labels(operation=func.__name__, reason=reason).inc()
                logger.warning(f"{reason} in {func.__name__}: {e}")
                if classified is e:
                    raise
                raise classified from e

        return wrapper
    return decorator


async def call_llm_with_timeout(
    llm_call: Callable[..., Awaitable[Any]],
    timeout_seconds: float = 60,
    *args,
    **kwargs
) -> Any:
    """
    Execute an LLM call with a timeout.

    Raises:
        LLMTimeoutError: If the call exceeds the timeout

    Example:
        result = await call_llm_with_timeout(llm.ainvoke, 30, messages)
    """
    try:
        return await asyncio.wait_for(
            llm_call(*args, **kwargs),
            timeout=timeout_seconds
        )
    except asyncio.TimeoutError as e:
        logger.error(f"LLM call timed out after {timeout_seconds}s")
        raise LLMTimeoutError(f"LLM call exceeded {timeout_seconds}s timeout") from e
