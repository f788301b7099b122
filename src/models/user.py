"""User-related Pydantic models"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class LearnerLevel(str, Enum):
    """Self-reported experience level chosen at sign-up"""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class StreakState(BaseModel):
    """Daily-activity streak embedded in the user record"""
    current: int = Field(default=0, ge=0)
    longest: int = Field(default=0, ge=0)
    last_active: datetime


class Badge(BaseModel):
    """Badge earned by a user"""
    id: str
    name: str
    earned_at: datetime


class User(BaseModel):
    """
    User record

    Carries no XP of its own: XP lives on the user's LearningPath.
    """
    user_id: str
    name: str = Field(..., max_length=50)
    email: str
    level: LearnerLevel = LearnerLevel.BEGINNER
    avatar: str = ""
    streak: StreakState
    badges: List[Badge] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    version: int = Field(default=0, ge=0)
