"""Unit tests for Reward System (spike_tracker/gamification/reward_system.py)"""
import random
import pytest
from datetime import datetime, timedelta, timezone

from spike_tracker.exceptions import InvalidInputError
from spike_tracker.gamification.reward_system import (
    compute_reward,
    calculate_new_streak,
    roll_surprise_bonus,
    MAX_POINTS_PER_LOG,
)
from tests.conftest import FixedRandom


# ============================================================================
# Streak Tests
# ============================================================================

def test_first_log_starts_streak(morning, unlucky_rng):
    """Test first ever log yields streak 1 whatever the previous value"""
    for previous in (0, 1, 5, 40):
        result = compute_reward(previous, None, 0, morning, rng=unlucky_rng)
        assert result["new_streak"] == 1
        assert result["streak_bonus"] == 0
        assert result["day_diff"] is None


def test_consecutive_day_continues_streak(morning, unlucky_rng):
    """Test next calendar day increments streak and adds the +5 bonus"""
    yesterday = morning - timedelta(days=1)

    result = compute_reward(4, yesterday, 0, morning, rng=unlucky_rng)

    assert result["new_streak"] == 5
    assert result["streak_bonus"] == 5
    assert result["day_diff"] == 1


def test_consecutive_day_uses_calendar_days():
    """Test 23:59 -> 00:01 counts as the next day"""
    last = datetime(2024, 1, 14, 23, 59, tzinfo=timezone.utc)
    now = datetime(2024, 1, 15, 0, 1, tzinfo=timezone.utc)

    result = calculate_new_streak(2, last, now)

    assert result["new_streak"] == 3
    assert result["continued"] is True


def test_same_day_leaves_streak_unchanged(morning, unlucky_rng):
    """Test repeat log on the same day neither grows nor resets streak"""
    earlier_today = morning.replace(hour=7)

    result = compute_reward(3, earlier_today, 0, morning, rng=unlucky_rng)

    assert result["new_streak"] == 3
    assert result["streak_bonus"] == 0
    assert result["day_diff"] == 0


def test_same_day_after_almost_24_hours_is_still_same_day():
    """Test 00:01 -> 23:59 on one day is a same-day repeat"""
    last = datetime(2024, 1, 15, 0, 1, tzinfo=timezone.utc)
    now = datetime(2024, 1, 15, 23, 59, tzinfo=timezone.utc)

    assert calculate_new_streak(6, last, now)["new_streak"] == 6


def test_gap_resets_streak(morning, unlucky_rng):
    """Test a gap of more than one day resets streak to 1 without bonus"""
    three_days_ago = morning - timedelta(days=3)

    result = compute_reward(9, three_days_ago, 0, morning, rng=unlucky_rng)

    assert result["new_streak"] == 1
    assert result["streak_bonus"] == 0
    assert result["day_diff"] == 3


def test_streak_uses_user_timezone():
    """Test day boundaries follow the user's timezone, not UTC"""
    last = datetime(2024, 1, 14, 10, 0, tzinfo=timezone.utc)  # Jan 14 15:30 IST
    now = datetime(2024, 1, 14, 20, 0, tzinfo=timezone.utc)   # Jan 15 01:30 IST

    assert calculate_new_streak(1, last, now)["new_streak"] == 1
    assert calculate_new_streak(1, last, now, tz="Asia/Kolkata")["new_streak"] == 2


def test_naive_datetimes_are_treated_as_utc(unlucky_rng):
    """Test naive timestamps from older records still compute a day diff"""
    last = datetime(2024, 1, 14, 12, 0)
    now = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)

    assert compute_reward(1, last, 0, now, rng=unlucky_rng)["new_streak"] == 2


# ============================================================================
# Points Tests
# ============================================================================

def test_base_points_only(evening, unlucky_rng):
    """Test evening log with no activity earns only the base 10"""
    result = compute_reward(0, None, 1000, evening, rng=unlucky_rng)

    assert result["points_earned"] == 10
    assert result["time_bonus"] == 0
    assert result["activity_bonus"] == 0
    assert result["surprise_bonus"] == 0


def test_time_bonus_before_six_pm(unlucky_rng):
    """Test +3 before 18:00 and none from 18:00"""
    before = datetime(2024, 1, 15, 17, 59, tzinfo=timezone.utc)
    at = datetime(2024, 1, 15, 18, 0, tzinfo=timezone.utc)

    assert compute_reward(0, None, 0, before, rng=unlucky_rng)["time_bonus"] == 3
    assert compute_reward(0, None, 0, at, rng=unlucky_rng)["time_bonus"] == 0


def test_activity_bonus_threshold(evening, unlucky_rng):
    """Test +5 only when steps are strictly above 5000"""
    assert compute_reward(0, None, 5000, evening, rng=unlucky_rng)["activity_bonus"] == 0
    assert compute_reward(0, None, 5001, evening, rng=unlucky_rng)["activity_bonus"] == 5


def test_surprise_bonus_lucky_branch(evening, lucky_rng):
    """Test a draw below 0.3 adds randint(5, 15)"""
    result = compute_reward(0, None, 0, evening, rng=lucky_rng)

    assert result["surprise_bonus"] == 10
    assert result["points_earned"] == 20
    assert lucky_rng.randint_calls == [(5, 15)]


def test_surprise_bonus_threshold_is_exclusive():
    """Test a draw of exactly 0.3 gives no bonus"""
    assert roll_surprise_bonus(FixedRandom(draw=0.3)) == 0
    assert roll_surprise_bonus(FixedRandom(draw=0.2999, bonus=5)) == 5


def test_seeded_rng_is_reproducible(evening):
    """Test the same seed gives the same surprise bonus sequence"""
    first_rng, second_rng = random.Random(42), random.Random(42)
    first = [compute_reward(0, None, 0, evening, rng=first_rng)["surprise_bonus"] for _ in range(20)]
    second = [compute_reward(0, None, 0, evening, rng=second_rng)["surprise_bonus"] for _ in range(20)]

    assert first == second
    assert all(bonus == 0 or 5 <= bonus <= 15 for bonus in first)


def test_points_stay_within_bounds(morning):
    """Test points are always between 10 and 38"""
    rng = random.Random(7)
    yesterday = morning - timedelta(days=1)

    for _ in range(500):
        points = compute_reward(1, yesterday, 9000, morning, rng=rng)["points_earned"]
        assert 10 <= points <= MAX_POINTS_PER_LOG == 38


def test_scenario_scout_day(morning):
    """Test streak 2, logged yesterday, 6000 steps at 10:00 -> streak 3, 23 or 28..38 points"""
    yesterday = morning - timedelta(days=1)

    unlucky = compute_reward(2, yesterday, 6000, morning, rng=FixedRandom(draw=0.5))
    assert unlucky["new_streak"] == 3
    assert unlucky["points_earned"] == 10 + 5 + 3 + 5

    for bonus in (5, 15):
        lucky = compute_reward(2, yesterday, 6000, morning, rng=FixedRandom(draw=0.1, bonus=bonus))
        assert lucky["points_earned"] == 23 + bonus


# ============================================================================
# Input Validation Tests
# ============================================================================

def test_negative_streak_rejected(morning):
    with pytest.raises(InvalidInputError) as exc_info:
        compute_reward(-1, None, 0, morning)
    assert exc_info.value.field == "previous_streak"


@pytest.mark.parametrize("steps", [-1, float("nan"), float("inf")])
def test_invalid_steps_rejected(morning, steps):
    with pytest.raises(InvalidInputError) as exc_info:
        compute_reward(0, None, steps, morning)
    assert exc_info.value.field == "steps"
