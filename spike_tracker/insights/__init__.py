"""Insight engine: rule-based heuristics plus an optional AI generator"""
from spike_tracker.insights.heuristics import (
    INSIGHT_RULES,
    DEFAULT_RULE,
    InsightContext,
    InsightRule,
    build_context,
    derive_insight,
    select_rule,
)
from spike_tracker.insights.generator import (
    InsightGenerator,
    OpenAIInsightGenerator,
    build_insight_prompt,
    parse_generated_insight,
    resolve_insight,
)

__all__ = [
    "INSIGHT_RULES",
    "DEFAULT_RULE",
    "InsightContext",
    "InsightRule",
    "build_context",
    "derive_insight",
    "select_rule",
    "InsightGenerator",
    "OpenAIInsightGenerator",
    "build_insight_prompt",
    "parse_generated_insight",
    "resolve_insight",
]
