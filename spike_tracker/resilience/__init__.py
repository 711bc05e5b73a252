"""Resilience patterns for the AI insight generator

Circuit breaker, retry with backoff, ordered fallback strategies, and
metrics collection so that a failing generator never blocks a log.
"""

from spike_tracker.resilience.circuit_breaker import (
    INSIGHT_BREAKER,
    call_with_breaker,
    create_breaker,
    with_circuit_breaker,
)
from spike_tracker.resilience.retry import retry_with_backoff, with_retry
from spike_tracker.resilience.fallback import execute_with_fallbacks, FallbackStrategy, FallbackResult
from spike_tracker.resilience.metrics import (
    record_circuit_breaker_state,
    record_api_call,
    record_api_failure,
    record_retry,
    record_fallback,
)

__all__ = [
    # Circuit Breakers
    "INSIGHT_BREAKER",
    "call_with_breaker",
    "create_breaker",
    "with_circuit_breaker",
    # Retry
    "retry_with_backoff",
    "with_retry",
    # Fallback
    "execute_with_fallbacks",
    "FallbackStrategy",
    "FallbackResult",
    # Metrics
    "record_circuit_breaker_state",
    "record_api_call",
    "record_api_failure",
    "record_retry",
    "record_fallback",
]
