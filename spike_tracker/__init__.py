"""
Spike Tracker - reward and insight engine for sugar-consumption logging

Call contracts:
- compute_reward: points and streak for one event
- award_badges: streak milestone badges
- derive_insight: rule-based insight and corrective action
- validate_completion: completion window check for the action bonus
"""

from spike_tracker.gamification import (
    compute_reward,
    award_badges,
    validate_completion,
)
from spike_tracker.health.metrics import calculate_bmi
from spike_tracker.insights.heuristics import derive_insight

__all__ = [
    "compute_reward",
    "award_badges",
    "derive_insight",
    "validate_completion",
    "calculate_bmi",
]
