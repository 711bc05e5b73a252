"""Unit tests for the rule-based insight engine (spike_tracker/insights/heuristics.py)"""
import pytest
from datetime import datetime, timezone

from spike_tracker.insights.heuristics import (
    INSIGHT_RULES,
    DEFAULT_RULE,
    build_context,
    derive_insight,
    select_rule,
)


def at_hour(hour: int) -> datetime:
    return datetime(2024, 1, 15, hour, 30, tzinfo=timezone.utc)


def rule_name(sugar_type="Chai", intensity=2, steps=5000, sleep_hours=7, user=None, now=None):
    context = build_context(sugar_type, intensity, steps, sleep_hours, user, now or at_hour(14))
    return select_rule(context).name


# ============================================================================
# Rule Order
# ============================================================================

def test_rule_order():
    """Test the rule table is evaluated in the documented order"""
    assert [rule.name for rule in INSIGHT_RULES] == [
        "weight_management",
        "active_day",
        "sleep_risk",
        "morning_crash",
        "poor_sleep",
    ]
    assert DEFAULT_RULE.name == "default"


def test_high_bmi_and_intensity_wins_over_everything(overweight_user):
    """Test BMI 28 + intensity 4 picks rule 1 regardless of steps, sleep, and time"""
    for steps in (0, 2000, 9000):
        for sleep_hours in (3, 9):
            for hour in (7, 14, 21):
                assert rule_name(
                    intensity=4, steps=steps, sleep_hours=sleep_hours,
                    user=overweight_user, now=at_hour(hour),
                ) == "weight_management"


def test_high_bmi_with_low_intensity_falls_through(overweight_user):
    assert rule_name(intensity=3, steps=9000, user=overweight_user) == "active_day"


def test_active_day():
    assert rule_name(steps=8001) == "active_day"
    assert rule_name(steps=8000) == "default"


def test_sleep_risk_needs_evening():
    assert rule_name(steps=2999, now=at_hour(18)) == "sleep_risk"
    assert rule_name(steps=2999, now=at_hour(17)) == "default"
    assert rule_name(steps=3000, now=at_hour(20)) == "default"


def test_morning_crash_window():
    assert rule_name(intensity=4, now=at_hour(5)) == "morning_crash"
    assert rule_name(intensity=4, now=at_hour(11)) == "morning_crash"
    assert rule_name(intensity=4, now=at_hour(12)) == "default"
    assert rule_name(intensity=4, now=at_hour(4)) == "default"
    assert rule_name(intensity=3, now=at_hour(8)) == "default"


def test_sleep_risk_beats_poor_sleep():
    assert rule_name(steps=1000, sleep_hours=4, now=at_hour(22)) == "sleep_risk"


def test_poor_sleep():
    assert rule_name(sleep_hours=5.9) == "poor_sleep"
    assert rule_name(sleep_hours=6) == "default"


def test_morning_crash_beats_poor_sleep():
    assert rule_name(intensity=5, sleep_hours=4, now=at_hour(8)) == "morning_crash"


# ============================================================================
# Context Derivation
# ============================================================================

def test_bmi_recomputed_from_profile(overweight_user):
    context = build_context("Sweet", 4, 5000, 7, overweight_user, at_hour(14))
    assert context.bmi == pytest.approx(28.0)


def test_missing_profile_means_zero_bmi():
    context = build_context("Sweet", 5, 5000, 7, None, at_hour(14))
    assert context.bmi == 0.0
    assert rule_name(intensity=5, user={"height": 175}) == "default"


def test_dict_profile_supported():
    assert rule_name(intensity=4, user={"height": 175, "weight": 85.75}) == "weight_management"


def test_hour_uses_user_timezone():
    """Test 01:30 UTC is evening in New York"""
    user = {"timezone": "America/New_York"}
    context = build_context("Chai", 2, 1000, 7, user, at_hour(1))

    assert context.hour == 20
    assert context.is_evening


# ============================================================================
# derive_insight
# ============================================================================

def test_derive_insight_returns_rule_text(overweight_user):
    result = derive_insight("Sweet", 4, 5000, 7, overweight_user, at_hour(14))

    assert set(result) == {"insight", "action"}
    assert "weight" in result["insight"]
    assert "10-minute walk" in result["action"]


def test_default_insight():
    result = derive_insight("Chai", 2, 5000, 7, None, at_hour(14))

    assert result["insight"] == DEFAULT_RULE.insight
    assert "water" in result["action"]


def test_derive_insight_is_deterministic(test_user):
    now = at_hour(9)
    results = [derive_insight("Cold Drink", 4, 4000, 5, test_user, now) for _ in range(5)]
    assert all(result == results[0] for result in results)
