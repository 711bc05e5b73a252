"""Prometheus metrics for resilience patterns

Counters for the AI insight generator: calls, failures, retries, fallbacks
and circuit breaker state. Recording a metric never raises.
"""

import logging
from prometheus_client import Counter, Histogram, Enum

logger = logging.getLogger(__name__)

# Circuit breaker state
# Values: closed, open, half_open
circuit_breaker_state = Enum(
    'spike_tracker_circuit_breaker_state',
    'Current state of circuit breaker',
    ['api'],
    states=['closed', 'open', 'half_open']
)

# Labels: api (insight_generator), status (success/failure)
api_calls_total = Counter(
    'spike_tracker_api_calls_total',
    'Total number of external API calls',
    ['api', 'status']
)

api_call_duration = Histogram(
    'spike_tracker_api_call_duration_seconds',
    'Duration of external API calls in seconds',
    ['api'],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, float('inf'))
)

# Labels: api, error_type (APITimeoutError/InsightParseError/etc)
api_failures_total = Counter(
    'spike_tracker_api_failures_total',
    'Total number of external API failures',
    ['api', 'error_type']
)

api_retries_total = Counter(
    'spike_tracker_api_retries_total',
    'Total number of retry attempts',
    ['api']
)

# Labels: primary_api, fallback_strategy (heuristic), status (success/failure)
fallback_executions_total = Counter(
    'spike_tracker_fallback_executions_total',
    'Total number of fallback strategy executions',
    ['primary_api', 'fallback_strategy', 'status']
)


def record_circuit_breaker_state(api: str, state: str) -> None:
    """
    Record circuit breaker state change.

    Args:
        api: Breaker name
        state: New state (closed, open, half_open)
    """
    try:
        circuit_breaker_state.labels(api=api).state(state)
        logger.debug(f"[METRICS] Circuit breaker {api} state: {state}")
    except Exception as e:
        logger.error(f"Failed to record circuit breaker state: {e}")


def record_api_call(api: str, success: bool, duration: float) -> None:
    """Record one external API call and its duration"""
    try:
        status = 'success' if success else 'failure'
        api_calls_total.labels(api=api, status=status).inc()
        api_call_duration.labels(api=api).observe(duration)
        logger.debug(f"[METRICS] API call {api}: {status}, duration: {duration:.2f}s")
    except Exception as e:
        logger.error(f"Failed to record API call metrics: {e}")


def record_api_failure(api: str, error_type: str) -> None:
    """Record an external API failure by exception class name"""
    try:
        api_failures_total.labels(api=api, error_type=error_type).inc()
        logger.debug(f"[METRICS] API failure {api}: {error_type}")
    except Exception as e:
        logger.error(f"Failed to record API failure: {e}")


def record_retry(api: str) -> None:
    try:
        api_retries_total.labels(api=api).inc()
        logger.debug(f"[METRICS] Retry attempt for {api}")
    except Exception as e:
        logger.error(f"Failed to record retry: {e}")


def record_fallback(primary_api: str, fallback_strategy: str, success: bool) -> None:
    """
    Record fallback strategy execution.

    Args:
        primary_api: Strategy that was tried first
        fallback_strategy: Strategy that ran instead
        success: Whether the fallback succeeded
    """
    try:
        status = 'success' if success else 'failure'
        fallback_executions_total.labels(
            primary_api=primary_api,
            fallback_strategy=fallback_strategy,
            status=status
        ).inc()
        logger.debug(
            f"[METRICS] Fallback {primary_api} -> {fallback_strategy}: {status}"
        )
    except Exception as e:
        logger.error(f"Failed to record fallback: {e}")
