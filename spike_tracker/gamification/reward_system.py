"""
Reward System

Computes the points earned for one logged sugar event.

Point Rules (all additive, evaluated in order):
- Base: 10 points for every log
- Streak: +5 when the previous log was exactly one calendar day earlier
- Time of day: +3 when logged before 18:00 local time
- Activity: +5 when the step count is above 5000
- Surprise: 30% chance of a random 5-15 point bonus

Streak Rules:
- First ever log starts the streak at 1
- Next calendar day continues the streak
- Same calendar day leaves the streak unchanged
- Any longer gap resets the streak to 1

The calculation has no side effects. The caller persists new_streak and
points_earned on the user and sets last_log_date = now.
"""

from typing import Dict, Optional
from datetime import datetime
import logging
import math
import random

from spike_tracker.exceptions import InvalidInputError
from spike_tracker.utils.datetime_helpers import calendar_days_between, local_hour

logger = logging.getLogger(__name__)

BASE_POINTS = 10
STREAK_BONUS = 5
EARLY_LOG_BONUS = 3
EARLY_LOG_CUTOFF_HOUR = 18
ACTIVITY_BONUS = 5
ACTIVITY_STEP_THRESHOLD = 5000
SURPRISE_CHANCE = 0.3
SURPRISE_MIN = 5
SURPRISE_MAX = 15

MAX_POINTS_PER_LOG = BASE_POINTS + STREAK_BONUS + EARLY_LOG_BONUS + ACTIVITY_BONUS + SURPRISE_MAX

_default_rng = random.Random()


def calculate_new_streak(
    previous_streak: int,
    last_log_date: Optional[datetime],
    now: datetime,
    tz: Optional[str] = None
) -> Dict[str, any]:
    """
    Work out the streak after a log at `now`

    Returns:
        {
            'new_streak': int,
            'day_diff': int or None (None for the first log),
            'continued': bool  # True only for a next-day log
        }
    """
    if last_log_date is None:
        return {"new_streak": 1, "day_diff": None, "continued": False}

    day_diff = calendar_days_between(last_log_date, now, tz)

    if day_diff == 1:
        return {"new_streak": previous_streak + 1, "day_diff": day_diff, "continued": True}

    if day_diff > 1:
        logger.debug(f"Streak reset after {day_diff} day gap (was {previous_streak})")
        return {"new_streak": 1, "day_diff": day_diff, "continued": False}

    # Same calendar day (or a last log stamped after now)
    return {"new_streak": previous_streak, "day_diff": day_diff, "continued": False}


def roll_surprise_bonus(rng: Optional[random.Random] = None) -> int:
    """
    Draw the variable "surprise" reward

    Args:
        rng: random.Random-compatible source (random() and randint())

    Returns:
        0, or a bonus between SURPRISE_MIN and SURPRISE_MAX inclusive
    """
    rng = rng or _default_rng
    if rng.random() < SURPRISE_CHANCE:
        return rng.randint(SURPRISE_MIN, SURPRISE_MAX)
    return 0


def compute_reward(
    previous_streak: int,
    last_log_date: Optional[datetime],
    steps: float,
    now: datetime,
    rng: Optional[random.Random] = None,
    tz: Optional[str] = None
) -> Dict[str, any]:
    """
    Compute streak and points for one logged event

    Args:
        previous_streak: User's streak before this log (>= 0)
        last_log_date: Timestamp of the user's previous log, None if first
        steps: Step count for today (>= 0)
        now: Time of this log
        rng: Random source for the surprise bonus (injectable for tests)
        tz: User's IANA timezone for calendar-day and hour-of-day math

    Returns:
        {
            'new_streak': int,
            'points_earned': int,
            'surprise_bonus': int,
            'streak_bonus': int,
            'time_bonus': int,
            'activity_bonus': int,
            'day_diff': int or None
        }

    Raises:
        InvalidInputError: If previous_streak or steps is negative
    """
    if previous_streak is None or previous_streak < 0:
        raise InvalidInputError(
            "Previous streak must be zero or positive",
            field="previous_streak",
            value=previous_streak,
            operation="compute_reward",
        )
    if steps is None or not math.isfinite(steps) or steps < 0:
        raise InvalidInputError(
            "Steps must be a non-negative number",
            field="steps",
            value=steps,
            operation="compute_reward",
        )

    # 1. Base points
    points_earned = BASE_POINTS

    # 2. Streak
    streak_info = calculate_new_streak(previous_streak, last_log_date, now, tz)
    streak_bonus = STREAK_BONUS if streak_info["continued"] else 0
    points_earned += streak_bonus

    # 3. Time bonus (before 6 PM)
    time_bonus = EARLY_LOG_BONUS if local_hour(now, tz) < EARLY_LOG_CUTOFF_HOUR else 0
    points_earned += time_bonus

    # 4. Activity bonus
    activity_bonus = ACTIVITY_BONUS if steps > ACTIVITY_STEP_THRESHOLD else 0
    points_earned += activity_bonus

    # 5. Variable reward
    surprise_bonus = roll_surprise_bonus(rng)
    points_earned += surprise_bonus

    if surprise_bonus:
        logger.info(f"Surprise bonus rolled: +{surprise_bonus}")

    return {
        "new_streak": streak_info["new_streak"],
        "points_earned": points_earned,
        "surprise_bonus": surprise_bonus,
        "streak_bonus": streak_bonus,
        "time_bonus": time_bonus,
        "activity_bonus": activity_bonus,
        "day_diff": streak_info["day_diff"],
    }
