"""
Learning Path and Step Progress Engine

A learning path is an ordered list of steps. Each step moves
locked → current → completed and never back. Completing a step (progress
reaching 100) awards XP and unlocks the next step in sequence.

All functions here are pure: they return a new LearningPath and never modify
the one passed in, so a raised error leaves the caller's snapshot untouched.
"""

from typing import Optional, Sequence
from datetime import datetime
import logging

from src.exceptions import InvalidArgumentError, NotFoundError
from src.gamification.xp_system import step_completion_xp
from src.models.progress import (
    LearningPath,
    LearningStep,
    CompletedLesson,
    LessonId,
    StepAward,
    StepStatus,
    StepUpdateResult,
)

logger = logging.getLogger(__name__)

DEFAULT_SEED_TITLES = (
    "JavaScript Fundamentals",
    "Functions & Scope",
    "Arrays & Objects",
    "Async JavaScript",
    "DOM Manipulation",
    "React Basics",
)


def create_learning_path(
    user_id: str,
    now: datetime,
    titles: Sequence[str] = DEFAULT_SEED_TITLES,
) -> LearningPath:
    """
    Seed a new learning path: step 1 current, every other step locked

    Args:
        user_id: Owner of the path
        now: Creation time (also step 1's started_at)
        titles: Ordered step titles; step ids are assigned 1..N

    Raises:
        InvalidArgumentError: if `titles` is empty
    """
    if not titles:
        raise InvalidArgumentError("A learning path needs at least one step", field="titles", value=[])

    steps = [
        LearningStep(
            step_id=position,
            title=title,
            status=StepStatus.CURRENT if position == 1 else StepStatus.LOCKED,
            started_at=now if position == 1 else None,
        )
        for position, title in enumerate(titles, start=1)
    ]

    logger.info(f"Created learning path for user {user_id} with {len(steps)} steps")
    return LearningPath(user_id=user_id, steps=steps, created_at=now, updated_at=now)


def find_step_index(path: LearningPath, step_id: int) -> int:
    """
    Zero-based position of `step_id` in the path

    Raises:
        NotFoundError: if the path has no such step
    """
    for index, step in enumerate(path.steps):
        if step.step_id == step_id:
            return index
    raise NotFoundError(
        f"Step {step_id} not found in learning path",
        record_type="Step",
        record_id=step_id,
        user_id=path.user_id,
    )


def current_step(path: LearningPath) -> Optional[LearningStep]:
    """The step currently being worked on, or None once every step is completed"""
    return next((step for step in path.steps if step.status == StepStatus.CURRENT), None)


def clamp_progress(progress: int) -> int:
    if isinstance(progress, bool) or not isinstance(progress, int):
        raise InvalidArgumentError("progress must be an integer", field="progress", value=progress)
    return min(100, max(0, progress))


def update_step(
    path: LearningPath,
    step_id: int,
    now: datetime,
    progress: Optional[int] = None,
    lesson_id: Optional[LessonId] = None,
) -> StepUpdateResult:
    """
    Apply a progress update and/or lesson completion to one step

    - `progress` is clamped to 0..100 (never rejected for being out of range)
    - `lesson_id` is recorded once; repeats are ignored
    - Reaching 100 on the current step completes it, awards XP by position
      and unlocks the next step if it is still locked
    - A locked step accepts progress and lessons but does not complete; it
      completes on the first update after it has been unlocked

    Args:
        path: Current snapshot of the user's path
        step_id: Step to update
        now: Time of the update
        progress: New progress value (optional)
        lesson_id: Lesson just finished (optional)

    Returns:
        StepUpdateResult with the new path and a StepAward when this call
        completed the step, else award=None

    Raises:
        NotFoundError: unknown step_id
        InvalidArgumentError: non-integer progress
    """
    index = find_step_index(path, step_id)
    new_progress = clamp_progress(progress) if progress is not None else None

    updated = path.model_copy(deep=True)
    step = updated.steps[index]

    if new_progress is not None:
        step.progress = new_progress

    if lesson_id is not None and not step.has_lesson(lesson_id):
        step.completed_lessons.append(CompletedLesson(lesson_id=lesson_id, completed_at=now))

    award = None
    if step.status == StepStatus.LOCKED and step.progress >= 100:
        logger.debug(f"Step {step_id} for user {path.user_id} is locked; completion deferred")
    elif step.status == StepStatus.CURRENT and step.progress >= 100:
        step.status = StepStatus.COMPLETED
        step.completed_at = now

        xp_gained = step_completion_xp(index)
        updated.total_xp += xp_gained

        unlocked_step_id = None
        if index + 1 < len(updated.steps):
            next_step = updated.steps[index + 1]
            if next_step.status == StepStatus.LOCKED:
                next_step.status = StepStatus.CURRENT
                next_step.started_at = now
                unlocked_step_id = next_step.step_id

        award = StepAward(step_id=step_id, xp_gained=xp_gained, unlocked_step_id=unlocked_step_id)
        logger.info(
            f"User {path.user_id} completed step {step_id} (+{xp_gained} XP, total {updated.total_xp})"
            + (f", unlocked step {unlocked_step_id}" if unlocked_step_id else "")
        )

    updated.updated_at = now
    return StepUpdateResult(path=updated, award=award)
