"""
Gamification system for Spike Tracker

Every logged sugar event earns points and moves the daily streak;
streak milestones unlock badges, and completing the suggested action
within its window earns a flat bonus.
"""

from spike_tracker.gamification.reward_system import compute_reward, calculate_new_streak
from spike_tracker.gamification.badge_system import award_badges, MILESTONE_BADGES
from spike_tracker.gamification.completion import (
    validate_completion,
    COMPLETION_BONUS,
    COMPLETION_WINDOW,
)

__all__ = [
    "compute_reward",
    "calculate_new_streak",
    "award_badges",
    "MILESTONE_BADGES",
    "validate_completion",
    "COMPLETION_BONUS",
    "COMPLETION_WINDOW",
]
