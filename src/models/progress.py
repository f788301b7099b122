"""Learning path, quiz and stats models"""
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from src.models.user import Badge, StreakState

LessonId = Union[int, str]


def normalize_lesson_id(lesson_id: LessonId) -> LessonId:
    """Numeric strings name the same lesson as the integer ("7" is 7)"""
    if isinstance(lesson_id, str) and lesson_id.strip().isdigit():
        return int(lesson_id.strip())
    return lesson_id


class StepStatus(str, Enum):
    """Lifecycle of a learning step: locked -> current -> completed"""
    LOCKED = "locked"
    CURRENT = "current"
    COMPLETED = "completed"


class CompletedLesson(BaseModel):
    """A lesson marked complete within a step"""
    lesson_id: LessonId
    completed_at: datetime

    @field_validator("lesson_id")
    @classmethod
    def normalize_id(cls, v: LessonId) -> LessonId:
        return normalize_lesson_id(v)


class LearningStep(BaseModel):
    """One unit of the learning curriculum"""
    step_id: int = Field(..., gt=0)
    title: str = ""
    status: StepStatus = StepStatus.LOCKED
    progress: int = Field(default=0, ge=0, le=100)
    completed_lessons: List[CompletedLesson] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def has_lesson(self, lesson_id: LessonId) -> bool:
        lesson_id = normalize_lesson_id(lesson_id)
        return any(lesson.lesson_id == lesson_id for lesson in self.completed_lessons)


class QuizResult(BaseModel):
    """A recorded quiz attempt"""
    quiz_id: str
    topic: str = ""
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., gt=0)
    completed_at: datetime


class LearningPath(BaseModel):
    """
    Per-user learning progress aggregate

    `total_xp` is the only stored XP quantity for a user; user-facing XP is
    read from here.
    """
    user_id: str
    steps: List[LearningStep] = Field(default_factory=list)
    quizzes: List[QuizResult] = Field(default_factory=list)
    total_xp: int = Field(default=0, ge=0)
    current_topic: str = "javascript-fundamentals"
    completed_topics: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = Field(default=0, ge=0)  # optimistic-concurrency token, bumped by the store


class StepAward(BaseModel):
    """XP awarded by completing a step"""
    step_id: int
    xp_gained: int
    unlocked_step_id: Optional[int] = None


class StepUpdateResult(BaseModel):
    """Outcome of update_step: the new path and the award, if a completion happened"""
    path: LearningPath
    award: Optional[StepAward] = None


class QuizOutcome(BaseModel):
    """Outcome of record_quiz"""
    path: LearningPath
    xp_gained: int
    percentage: int


class Stats(BaseModel):
    """Read-only dashboard summary"""
    xp: int
    streak: StreakState
    badges: List[Badge]
    overall_progress: int
    completed_steps: int
    total_steps: int
    avg_quiz_score: int
    last_quiz_score: int
    total_quizzes: int
