"""User-related Pydantic models"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ActivityLevel(str, Enum):
    """Self-reported activity level"""
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


class Badge(BaseModel):
    """One-time badge unlocked by a streak milestone"""
    name: str
    icon: str
    date_awarded: datetime


class User(BaseModel):
    """Device identity and running gamification state"""
    device_id: str = Field(..., min_length=1)
    age: Optional[int] = None
    gender: Optional[str] = None  # male, female, other
    height: Optional[float] = None  # cm
    weight: Optional[float] = None  # kg
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    target_sugar: float = 30  # grams/day
    bmi: Optional[float] = None  # snapshot taken at registration
    streak: int = Field(default=0, ge=0)
    points: int = Field(default=0, ge=0)
    level: int = 1
    last_log_date: Optional[datetime] = None
    badges: list[Badge] = Field(default_factory=list)
    timezone: str = "UTC"  # IANA timezone (e.g., "Asia/Kolkata", "Europe/London")
    email: Optional[str] = None
