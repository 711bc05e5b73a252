"""Fallback strategies

Runs strategies in priority order until one succeeds. The insight flow
registers the AI generator first and the heuristic engine last, so a
response is always produced.
"""

import inspect
import logging
from typing import Any, Callable, List, TypeVar
from dataclasses import dataclass

from spike_tracker.resilience.metrics import record_fallback

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class FallbackStrategy:
    """
    Defines a fallback strategy with priority ordering.

    Attributes:
        name: Human-readable name for logging
        handler: Sync or async callable that implements the strategy
        priority: Priority level (lower = higher priority, 1 = primary)
    """
    name: str
    handler: Callable[..., T]
    priority: int


@dataclass
class FallbackResult:
    """Value returned by the first successful strategy"""
    value: Any
    strategy: str


async def execute_with_fallbacks(
    strategies: List[FallbackStrategy],
    *args: Any,
    **kwargs: Any
) -> FallbackResult:
    """
    Execute strategies in priority order until one succeeds.

    Args:
        strategies: List of FallbackStrategy to try
        *args, **kwargs: Arguments to pass to each strategy handler

    Returns:
        FallbackResult with the value and the name of the strategy that produced it

    Raises:
        ValueError: If no strategies were given
        Last exception if all strategies fail
    """
    if not strategies:
        raise ValueError("At least one fallback strategy is required")

    sorted_strategies = sorted(strategies, key=lambda s: s.priority)
    primary = sorted_strategies[0].name
    last_exception = None

    for strategy in sorted_strategies:
        try:
            logger.debug(f"[FALLBACK] Trying strategy: {strategy.name}")

            result = strategy.handler(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result

            if strategy.name != primary:
                record_fallback(primary, strategy.name, success=True)
                logger.info(f"[FALLBACK] Strategy '{strategy.name}' succeeded")

            return FallbackResult(value=result, strategy=strategy.name)

        except Exception as e:
            logger.warning(
                f"[FALLBACK] Strategy '{strategy.name}' failed: "
                f"{type(e).__name__}: {e}"
            )
            last_exception = e

            if strategy.name != primary:
                record_fallback(primary, strategy.name, success=False)

    logger.error(
        f"[FALLBACK] All {len(sorted_strategies)} fallback strategies exhausted"
    )
    raise last_exception
