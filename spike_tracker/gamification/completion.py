"""
Action completion window

A suggested corrective action can be marked done once, within 30 minutes
of the log being created, for a flat bonus.
"""

from datetime import datetime, timedelta
from typing import Optional
import logging

from spike_tracker.exceptions import AlreadyCompletedError, ActionExpiredError
from spike_tracker.utils.datetime_helpers import elapsed_since

logger = logging.getLogger(__name__)

COMPLETION_WINDOW = timedelta(minutes=30)
COMPLETION_BONUS = 7


def validate_completion(
    log_created_at: datetime,
    action_completed: bool,
    now: datetime,
    log_id: Optional[str] = None
) -> None:
    """
    Check that a log's action may still be completed

    Args:
        log_created_at: When the log was created
        action_completed: Current completion flag on the log
        now: Time of the completion request
        log_id: Optional log ID for error context

    Raises:
        AlreadyCompletedError: The action was already completed
        ActionExpiredError: More than 30 minutes have passed since creation
    """
    if action_completed:
        raise AlreadyCompletedError(log_id=log_id, operation="complete_action")

    elapsed = elapsed_since(log_created_at, now)
    if elapsed > COMPLETION_WINDOW:
        raise ActionExpiredError(
            elapsed_seconds=elapsed.total_seconds(),
            log_id=log_id,
            operation="complete_action",
        )

    logger.debug(f"Completion accepted for log {log_id} after {elapsed.total_seconds():.0f}s")
