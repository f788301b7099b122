"""API routes for LearnBotX progress tracking

Domain errors (NotFoundError, InvalidArgumentError, ConcurrencyConflictError)
propagate out of the handlers and are mapped to HTTP responses by the
exception handlers registered in src.api.server.
"""
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Request, status

from src.api.models import (
    CreateUserRequest, UserResponse, BadgeRequest,
    StepUpdateRequest, StepUpdateResponse,
    QuizRequest, QuizResultResponse,
    HealthCheckResponse,
)
from src.api.auth import verify_api_key
from src.api.middleware import limiter
from src.config import RATE_LIMIT, STORAGE_BACKEND
from src.models.progress import LearningPath, Stats
from src.services.container import get_container
from src.services.progress_service import ProgressService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_progress_service() -> ProgressService:
    """Resolve the ProgressService from the global container"""
    return get_container().progress_service


# ==========================================
# Users & streaks
# ==========================================

@router.post("/api/v1/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMIT)
async def create_user(
    request: Request,
    body: CreateUserRequest,
    service: ProgressService = Depends(get_progress_service),
    api_key: str = Depends(verify_api_key)
):
    """Register a user and seed their learning path"""
    user = await service.register_user(body.user_id, body.name, body.email, body.level)
    logger.info(f"Created user via API: {user.user_id}")
    return UserResponse.from_user(user, xp=await service.get_xp(user.user_id))


@router.get("/api/v1/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    service: ProgressService = Depends(get_progress_service),
    api_key: str = Depends(verify_api_key)
):
    """Get user profile with XP, streak and badges"""
    user = await service.get_user(user_id)
    return UserResponse.from_user(user, xp=await service.get_xp(user_id))


@router.post("/api/v1/users/{user_id}/login", response_model=UserResponse)
@limiter.limit(RATE_LIMIT)
async def record_login(
    request: Request,
    user_id: str,
    service: ProgressService = Depends(get_progress_service),
    api_key: str = Depends(verify_api_key)
):
    """
    Record a login for the user and update their daily streak

    Called by the auth layer after it has verified the user's credentials.
    """
    user = await service.record_login(user_id)
    return UserResponse.from_user(user, xp=await service.get_xp(user_id))


@router.post("/api/v1/users/{user_id}/badges", response_model=UserResponse)
@limiter.limit(RATE_LIMIT)
async def award_badge(
    request: Request,
    user_id: str,
    body: BadgeRequest,
    service: ProgressService = Depends(get_progress_service),
    api_key: str = Depends(verify_api_key)
):
    """Award a badge (no-op if the user already has it)"""
    user = await service.award_badge(user_id, body.badge_id, body.name)
    return UserResponse.from_user(user, xp=await service.get_xp(user_id))


# ==========================================
# Learning progress
# ==========================================

@router.get("/api/v1/users/{user_id}/progress", response_model=LearningPath)
async def get_progress(
    user_id: str,
    service: ProgressService = Depends(get_progress_service),
    api_key: str = Depends(verify_api_key)
):
    """Get the user's learning path (created with the default steps on first access)"""
    return await service.get_progress(user_id)


@router.put("/api/v1/users/{user_id}/progress/steps/{step_id}", response_model=StepUpdateResponse)
@limiter.limit(RATE_LIMIT)
async def update_step(
    request: Request,
    user_id: str,
    step_id: int,
    body: StepUpdateRequest,
    service: ProgressService = Depends(get_progress_service),
    api_key: str = Depends(verify_api_key)
):
    """Update progress on a learning step; completing it unlocks the next one"""
    result = await service.update_step(user_id, step_id, progress=body.progress, lesson_id=body.lesson_id)
    return StepUpdateResponse(
        progress=result.path,
        award=result.award,
        xp_gained=result.award.xp_gained if result.award else 0,
    )


@router.post("/api/v1/users/{user_id}/progress/quizzes", response_model=QuizResultResponse)
@limiter.limit(RATE_LIMIT)
async def record_quiz(
    request: Request,
    user_id: str,
    body: QuizRequest,
    service: ProgressService = Depends(get_progress_service),
    api_key: str = Depends(verify_api_key)
):
    """Record a quiz result (10 XP per correct answer)"""
    outcome = await service.record_quiz(
        user_id,
        quiz_id=body.quiz_id,
        topic=body.topic,
        score=body.score,
        total_questions=body.total_questions,
    )
    return QuizResultResponse(
        progress=outcome.path,
        xp_gained=outcome.xp_gained,
        percentage=outcome.percentage,
    )


@router.get("/api/v1/users/{user_id}/progress/stats", response_model=Stats)
async def get_stats(
    user_id: str,
    service: ProgressService = Depends(get_progress_service),
    api_key: str = Depends(verify_api_key)
):
    """Get dashboard statistics"""
    return await service.get_stats(user_id)


# ==========================================
# Health
# ==========================================

@router.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """Health check (no authentication)"""
    return HealthCheckResponse(
        status="ok",
        storage=STORAGE_BACKEND,
        timestamp=datetime.now(timezone.utc),
    )
