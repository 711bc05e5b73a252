"""Sugar consumption log models"""
from datetime import datetime
from typing import Optional
from uuid import uuid4
from pydantic import BaseModel, Field, field_validator

from spike_tracker.utils.datetime_helpers import ensure_aware


class SugarLog(BaseModel):
    """One logged consumption event"""
    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str  # device id of the owner, used as a lookup key
    type: str = Field(..., min_length=1)  # e.g. 'Chai', 'Sweet', 'Cold Drink'
    intensity: int = Field(..., ge=1, le=5)
    created_at: datetime
    action: Optional[str] = None
    insight: Optional[str] = None
    action_completed: bool = False

    @field_validator("created_at")
    @classmethod
    def created_at_is_aware(cls, v: datetime) -> datetime:
        """Naive timestamps are UTC"""
        return ensure_aware(v)
