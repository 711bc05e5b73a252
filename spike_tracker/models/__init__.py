"""Pydantic models for users, logs and insights"""
from spike_tracker.models.user import ActivityLevel, Badge, User
from spike_tracker.models.log import SugarLog
from spike_tracker.models.insight import Insight
from spike_tracker.models.event import EventResult, CompletionResult

__all__ = ["ActivityLevel", "Badge", "User", "SugarLog", "Insight", "EventResult", "CompletionResult"]
