"""Retry logic with exponential backoff and jitter

Used only around the AI insight generator:
1. Only retries transient errors (timeouts, rate limits, 5xx errors)
2. Uses exponential backoff with jitter
3. Gives up after max retries; the caller then falls back to heuristics
"""

import asyncio
import random
import logging
from typing import Callable, Any, TypeVar
from functools import wraps
import httpx

from spike_tracker.resilience.metrics import record_retry

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Retry configuration
MAX_RETRIES = 2
BASE_DELAY = 0.5  # seconds
MAX_DELAY = 5.0  # seconds
JITTER = 0.1  # 10% random jitter

# openai SDK exception names, matched by name so this module doesn't import openai
RETRYABLE_SDK_ERRORS = {'RateLimitError', 'APITimeoutError', 'APIConnectionError', 'InternalServerError'}


def is_retryable_error(exc: Exception) -> bool:
    """
    Determine if error is transient and should be retried.

    Retryable:
    - Network timeouts
    - HTTP 429 and 500/502/503/504
    - openai SDK timeout, connection, rate limit and server errors

    Not retryable:
    - HTTP 4xx client errors
    - Unparsable model output (retrying the same prompt rarely helps)
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in [429, 500, 502, 503, 504]

    if isinstance(exc, httpx.TimeoutException):
        return True

    return exc.__class__.__name__ in RETRYABLE_SDK_ERRORS


def calculate_backoff(attempt: int) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Formula: delay = min(BASE_DELAY * (2 ** attempt), MAX_DELAY) +/- 10%

    Example:
        Attempt 0: ~0.5s
        Attempt 1: ~1s
        Attempt 2: ~2s
    """
    delay = min(BASE_DELAY * (2 ** attempt), MAX_DELAY)
    jitter_amount = random.uniform(-JITTER * delay, JITTER * delay)
    return max(delay + jitter_amount, 0.0)


async def retry_with_backoff(
    func: Callable[..., T],
    *args: Any,
    max_retries: int = MAX_RETRIES,
    api_name: str = "insight_generator",
    **kwargs: Any
) -> T:
    """
    Retry async function with exponential backoff.

    Args:
        func: Async function to retry
        max_retries: Maximum number of retry attempts
        api_name: Label for retry metrics
        *args, **kwargs: Arguments to pass to func

    Returns:
        Result from func

    Raises:
        Last exception if all retries exhausted or non-retryable error
    """
    for attempt in range(max_retries + 1):
        try:
            return await func(*args, **kwargs)

        except Exception as e:
            if attempt == max_retries:
                logger.error(
                    f"[RETRY] All {max_retries} retries exhausted for {func.__name__}"
                )
                raise

            if not is_retryable_error(e):
                logger.warning(
                    f"[RETRY] Non-retryable error for {func.__name__}: "
                    f"{type(e).__name__}: {e}"
                )
                raise

            backoff = calculate_backoff(attempt)
            record_retry(api_name)

            logger.info(
                f"[RETRY] Attempt {attempt + 1}/{max_retries} for {func.__name__} "
                f"after {backoff:.2f}s (error: {type(e).__name__})"
            )

            await asyncio.sleep(backoff)

    raise RuntimeError("Retry logic failed unexpectedly")


def with_retry(max_retries: int = MAX_RETRIES) -> Callable:
    """
    Decorator to add retry logic to async functions.

    Example:
        @with_retry(max_retries=2)
        async def call_model():
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await retry_with_backoff(func, *args, max_retries=max_retries, **kwargs)
        return wrapper
    return decorator
