"""Unit tests for the action completion window (spike_tracker/gamification/completion.py)"""
import pytest
from datetime import datetime, timedelta, timezone

from spike_tracker.exceptions import ActionExpiredError, AlreadyCompletedError
from spike_tracker.gamification.completion import (
    validate_completion,
    COMPLETION_BONUS,
    COMPLETION_WINDOW,
)

CREATED_AT = datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


def test_window_and_bonus_constants():
    assert COMPLETION_WINDOW == timedelta(minutes=30)
    assert COMPLETION_BONUS == 7


def test_completion_within_window():
    """Test 29:59 after creation is accepted"""
    validate_completion(CREATED_AT, False, CREATED_AT + timedelta(minutes=29, seconds=59))


def test_completion_at_exactly_thirty_minutes():
    """Test the boundary itself is still inside the window"""
    validate_completion(CREATED_AT, False, CREATED_AT + timedelta(minutes=30))


def test_completion_just_after_window_expires():
    """Test 30:01 after creation is rejected"""
    with pytest.raises(ActionExpiredError) as exc_info:
        validate_completion(CREATED_AT, False, CREATED_AT + timedelta(minutes=30, seconds=1), log_id="log-1")

    assert exc_info.value.elapsed_seconds == 1801
    assert exc_info.value.log_id == "log-1"


def test_completion_at_31_minutes_expired():
    with pytest.raises(ActionExpiredError):
        validate_completion(CREATED_AT, False, CREATED_AT + timedelta(minutes=31))


def test_already_completed_rejected():
    with pytest.raises(AlreadyCompletedError):
        validate_completion(CREATED_AT, True, CREATED_AT + timedelta(minutes=1))


def test_already_completed_checked_before_expiry():
    """Test an old completed log reports AlreadyCompleted, not Expired"""
    with pytest.raises(AlreadyCompletedError):
        validate_completion(CREATED_AT, True, CREATED_AT + timedelta(hours=2))
