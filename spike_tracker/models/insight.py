"""Insight models shared by the heuristic engine and the AI generator"""
from pydantic import BaseModel, Field, field_validator


class Insight(BaseModel):
    """Cause-effect insight paired with one corrective action"""
    insight: str = Field(..., min_length=1)
    action: str = Field(..., min_length=1)

    @field_validator("insight", "action")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Trim whitespace and reject blank text"""
        trimmed = v.strip()
        if not trimmed:
            raise ValueError("must not be blank")
        return trimmed
