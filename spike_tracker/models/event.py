"""Result models for the event processing flow"""
from typing import Optional
from pydantic import BaseModel

from spike_tracker.models.log import SugarLog


class EventResult(BaseModel):
    """Everything the caller shows after a log is processed"""
    log: SugarLog
    streak: int
    points: int
    points_earned: int
    surprise_bonus: int
    new_badge: Optional[str] = None
    insight: str
    action: str
    insight_source: str  # 'ai' or 'heuristic'
    bmi: Optional[float] = None


class CompletionResult(BaseModel):
    """Outcome of a successful action completion"""
    message: str
    log_id: str
    bonus: int
    points: int
