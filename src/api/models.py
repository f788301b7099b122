"""Pydantic models for API request/response validation"""
from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime

from src.models.progress import LearningPath, LessonId, StepAward
from src.models.user import Badge, LearnerLevel, StreakState, User


class CreateUserRequest(BaseModel):
    """Request to register a user"""
    user_id: str = Field(..., min_length=1, description="User identifier")
    name: str = Field(..., min_length=1, max_length=50, description="Display name")
    email: str = Field(..., description="Email address (unique)")
    level: LearnerLevel = Field(default=LearnerLevel.BEGINNER, description="Self-reported level")


class UserResponse(BaseModel):
    """Response with user profile and gamification state"""
    user_id: str
    name: str
    email: str
    level: LearnerLevel
    avatar: str
    xp: int = Field(..., description="XP total, read from the learning path")
    streak: StreakState
    badges: List[Badge]
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User, xp: int) -> "UserResponse":
        return cls(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            level=user.level,
            avatar=user.avatar,
            xp=xp,
            streak=user.streak,
            badges=user.badges,
            created_at=user.created_at,
        )


class BadgeRequest(BaseModel):
    """Request to award a badge"""
    badge_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class StepUpdateRequest(BaseModel):
    """Request to update a learning step"""
    progress: Optional[int] = Field(
        default=None,
        description="New progress; values outside 0..100 are clamped"
    )
    lesson_id: Optional[LessonId] = Field(
        default=None,
        description="Lesson just completed; repeats are ignored"
    )


class StepUpdateResponse(BaseModel):
    """Response after a step update"""
    progress: LearningPath
    award: Optional[StepAward] = None
    xp_gained: int = 0


class QuizRequest(BaseModel):
    """Request to record a quiz result"""
    quiz_id: str = Field(..., description="Quiz identifier")
    topic: str = Field(default="", description="Quiz topic")
    score: int = Field(..., description="Correct answers")
    total_questions: int = Field(..., description="Number of questions")


class QuizResultResponse(BaseModel):
    """Response after recording a quiz"""
    progress: LearningPath
    xp_gained: int
    percentage: int


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    storage: str = Field(..., description="Storage backend in use")
    timestamp: datetime = Field(..., description="Check timestamp")
