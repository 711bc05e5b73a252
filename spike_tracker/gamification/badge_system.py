"""
Badge System

Streak milestones unlock one-time badges:
- 1 day:  First Spike 🔥
- 3 days: Sugar Scout 🥈
- 7 days: Spike Crusher 🏅

Only the streak value reached by the current log is checked; milestones
passed earlier are not back-filled. Awarding is idempotent by badge name.
"""

from typing import Dict, List, Optional, Sequence
from datetime import datetime
import logging

from spike_tracker.models.user import Badge

logger = logging.getLogger(__name__)

MILESTONE_BADGES: Dict[int, Dict[str, str]] = {
    1: {"name": "First Spike", "icon": "🔥"},
    3: {"name": "Sugar Scout", "icon": "🥈"},
    7: {"name": "Spike Crusher", "icon": "🏅"},
}


def milestone_for_streak(streak: int) -> Optional[Dict[str, str]]:
    """Badge definition for an exact streak value, if any"""
    return MILESTONE_BADGES.get(streak)


def award_badges(
    badges: Sequence[Badge],
    new_streak: int,
    awarded_at: datetime
) -> Dict[str, any]:
    """
    Grant the milestone badge for new_streak if the user doesn't own it

    Args:
        badges: User's current badges (not modified)
        new_streak: Streak after the current log
        awarded_at: Timestamp to stamp on a newly granted badge

    Returns:
        {
            'badges': list of Badge (a new list, extended if awarded),
            'awarded_name': str or None  # None if no milestone or already owned
        }
    """
    updated: List[Badge] = list(badges)
    milestone = milestone_for_streak(new_streak)

    if milestone is None:
        return {"badges": updated, "awarded_name": None}

    if any(badge.name == milestone["name"] for badge in updated):
        logger.debug(f"Badge '{milestone['name']}' already owned, skipping")
        return {"badges": updated, "awarded_name": None}

    updated.append(
        Badge(name=milestone["name"], icon=milestone["icon"], date_awarded=awarded_at)
    )
    logger.info(f"Awarded badge '{milestone['name']}' for {new_streak}-day streak")

    return {"badges": updated, "awarded_name": milestone["name"]}
