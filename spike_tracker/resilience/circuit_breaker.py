"""Circuit breaker for the AI insight generator

When the generator keeps failing, the breaker opens and calls fail fast so
the heuristic fallback answers immediately instead of waiting on timeouts.

State Machine:
    CLOSED (normal) → OPEN (failing fast) → HALF_OPEN (testing) → CLOSED/OPEN
"""

import pybreaker
import logging
from datetime import timedelta
from typing import Callable, Any, TypeVar
from functools import wraps

from spike_tracker.resilience.metrics import record_circuit_breaker_state, record_api_failure
from spike_tracker.utils.datetime_helpers import ensure_aware, now_utc

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CircuitBreakerListener(pybreaker.CircuitBreakerListener):
    """Listener to log circuit breaker state changes and emit metrics"""

    def state_change(self, cb: pybreaker.CircuitBreaker, old_state: Any, new_state: Any) -> None:
        logger.warning(
            f"[CIRCUIT_BREAKER] {cb.name}: {old_state.name} → {new_state.name}"
        )
        record_circuit_breaker_state(cb.name, new_state.name.replace("-", "_"))

    def failure(self, cb: pybreaker.CircuitBreaker, exc: Exception) -> None:
        logger.error(
            f"[CIRCUIT_BREAKER] {cb.name} recorded failure: {type(exc).__name__}: {exc}"
        )
        record_api_failure(cb.name, type(exc).__name__)

    def success(self, cb: pybreaker.CircuitBreaker) -> None:
        logger.debug(f"[CIRCUIT_BREAKER] {cb.name} recorded success")


def create_breaker(name: str, fail_max: int = 5, reset_timeout: int = 60) -> pybreaker.CircuitBreaker:
    """
    Build a circuit breaker with the logging/metrics listener attached

    Args:
        name: Breaker name, used as the metrics label
        fail_max: Consecutive failures before the breaker opens
        reset_timeout: Seconds to stay open before trying HALF_OPEN
    """
    return pybreaker.CircuitBreaker(
        fail_max=fail_max,
        reset_timeout=reset_timeout,
        name=name,
        listeners=[CircuitBreakerListener()]
    )


def _timeout_elapsed(breaker: pybreaker.CircuitBreaker) -> bool:
    opened_at = breaker._state_storage.opened_at
    if opened_at is None:
        return True
    return now_utc() >= ensure_aware(opened_at) + timedelta(seconds=breaker.reset_timeout)


async def call_with_breaker(
    breaker: pybreaker.CircuitBreaker,
    func: Callable[..., T],
    *args: Any,
    **kwargs: Any
) -> T:
    """
    Await func and report its outcome to a (synchronous) pybreaker breaker.

    While the breaker is OPEN and its reset timeout has not elapsed, this
    raises pybreaker.CircuitBreakerError without calling func. Once the
    timeout has elapsed the call runs as the trial; its outcome is handed
    to the breaker afterwards, so the breaker only moves through HALF_OPEN
    to CLOSED (or back to OPEN) with the real result.

    Raises:
        pybreaker.CircuitBreakerError: Breaker is open, or this failure tripped it
        Exception: Whatever func raised, otherwise
    """
    if breaker.current_state == pybreaker.STATE_OPEN and not _timeout_elapsed(breaker):
        logger.warning(f"[CIRCUIT_BREAKER] {breaker.name} is OPEN - failing fast")
        raise pybreaker.CircuitBreakerError("Timeout not elapsed yet, circuit breaker still open")

    try:
        result = await func(*args, **kwargs)
    except Exception as exc:
        def _reraise() -> None:
            raise exc
        breaker.call(_reraise)
        raise

    return breaker.call(lambda: result)


# Configuration: 5 failures triggers OPEN, 60s timeout before HALF_OPEN
INSIGHT_BREAKER = create_breaker("insight_generator")


def with_circuit_breaker(breaker: pybreaker.CircuitBreaker) -> Callable:
    """
    Decorator to wrap async functions with circuit breaker protection.

    When the circuit is OPEN, calls fail immediately with CircuitBreakerError
    instead of calling the underlying function.

    Example:
        @with_circuit_breaker(INSIGHT_BREAKER)
        async def call_model():
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await call_with_breaker(breaker, func, *args, **kwargs)
        return wrapper
    return decorator
