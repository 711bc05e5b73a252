"""
Rule-based insight engine

Produces a cause-effect insight and one corrective action for a logged
sugar event. This is the guaranteed fallback behind the AI generator, so
it never raises for well-formed input.

Rules are an ordered table evaluated top to bottom; the first predicate
that matches wins and the default applies when none do:

1. weight_management - BMI > 25 and intensity > 3
2. active_day        - steps > 8000
3. sleep_risk        - steps < 3000 in the evening (18:00 or later)
4. morning_crash     - morning (05:00-11:59) and intensity > 3
5. poor_sleep        - slept under 6 hours
6. default
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Union
import logging

from spike_tracker.health.metrics import raw_bmi
from spike_tracker.models.user import User
from spike_tracker.utils.datetime_helpers import local_hour

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsightContext:
    """Everything the rules look at for one event"""
    sugar_type: str
    intensity: int
    steps: float
    sleep_hours: float
    hour: int
    bmi: float

    @property
    def is_evening(self) -> bool:
        return self.hour >= 18

    @property
    def is_morning(self) -> bool:
        return 5 <= self.hour < 12


@dataclass(frozen=True)
class InsightRule:
    """
    One entry in the rule table

    Attributes:
        name: Stable identifier, useful in logs and tests
        predicate: Returns True when the rule applies
        insight: Explanatory text
        action: Suggested corrective action
    """
    name: str
    predicate: Callable[[InsightContext], bool]
    insight: str
    action: str


INSIGHT_RULES: List[InsightRule] = [
    InsightRule(
        name="weight_management",
        predicate=lambda ctx: ctx.bmi > 25 and ctx.intensity > 3,
        insight="Frequent sugar spikes can make it harder to manage weight over time.",
        action="Try a 10-minute walk to use up this glucose immediately.",
    ),
    InsightRule(
        name="active_day",
        predicate=lambda ctx: ctx.steps > 8000,
        insight="You've been active today, so your body can handle this better.",
        action="Keep moving to burn off the extra energy.",
    ),
    InsightRule(
        name="sleep_risk",
        predicate=lambda ctx: ctx.steps < 3000 and ctx.is_evening,
        insight="Low activity today and sugar at night can disrupt your deep sleep.",
        action="Try a 10-minute walk before bed to stabilize blood sugar.",
    ),
    InsightRule(
        name="morning_crash",
        predicate=lambda ctx: ctx.is_morning and ctx.intensity > 3,
        insight="Starting the day with high sugar can lead to an energy crash by noon.",
        action="Pair this with some protein (like nuts) to slow absorption.",
    ),
    InsightRule(
        name="poor_sleep",
        predicate=lambda ctx: ctx.sleep_hours < 6,
        insight="You're tired, so your brain is craving quick energy. It's a trap.",
        action="A short nap or fresh air is better than sugar right now.",
    ),
]

DEFAULT_RULE = InsightRule(
    name="default",
    predicate=lambda ctx: True,
    insight="Sugary treats give a quick spike, but a crash follows soon.",
    action="Drink a glass of water to help process the sugar.",
)


def _profile_value(user: Union[User, Mapping[str, Any], None], field: str) -> Any:
    if user is None:
        return None
    if isinstance(user, Mapping):
        return user.get(field)
    return getattr(user, field, None)


def build_context(
    sugar_type: str,
    intensity: int,
    steps: float,
    sleep_hours: float,
    user: Union[User, Mapping[str, Any], None],
    now: datetime,
    tz: Optional[str] = None
) -> InsightContext:
    """
    Collect rule inputs for one event

    BMI is recomputed from the current height and weight on every call;
    the rounded snapshot stored on the profile is not used here.
    """
    if tz is None:
        tz = _profile_value(user, "timezone")

    return InsightContext(
        sugar_type=sugar_type,
        intensity=intensity,
        steps=steps,
        sleep_hours=sleep_hours,
        hour=local_hour(now, tz),
        bmi=raw_bmi(_profile_value(user, "height"), _profile_value(user, "weight")),
    )


def select_rule(context: InsightContext) -> InsightRule:
    """Return the first matching rule, or DEFAULT_RULE"""
    for rule in INSIGHT_RULES:
        if rule.predicate(context):
            return rule
    return DEFAULT_RULE


def derive_insight(
    sugar_type: str,
    intensity: int,
    steps: float,
    sleep_hours: float,
    user: Union[User, Mapping[str, Any], None],
    now: datetime,
    tz: Optional[str] = None
) -> Dict[str, str]:
    """
    Pick an insight and action for a logged event

    Args:
        sugar_type: What was consumed (free text)
        intensity: Sugar intensity 1-5
        steps: Steps so far today
        sleep_hours: Hours slept last night
        user: Profile with height/weight (User, dict, or None)
        now: Time of the event
        tz: Timezone override (defaults to the user's timezone)

    Returns:
        {'insight': str, 'action': str}
    """
    context = build_context(sugar_type, intensity, steps, sleep_hours, user, now, tz)
    rule = select_rule(context)

    logger.debug(
        f"Insight rule '{rule.name}' selected for {sugar_type} "
        f"(intensity={intensity}, steps={steps}, sleep={sleep_hours}, hour={context.hour})"
    )

    return {"insight": rule.insight, "action": rule.action}
