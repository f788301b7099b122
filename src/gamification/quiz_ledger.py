"""
Quiz Ledger

Quiz attempts are appended to the learning path in the order they arrive,
with no de-duplication by quiz id: submitting the same quiz twice records it
twice and awards XP twice. Callers that need idempotent submission must
guard against it themselves.
"""

from datetime import datetime
import logging

from src.gamification.xp_system import quiz_percentage, quiz_xp
from src.models.progress import LearningPath, QuizOutcome, QuizResult

logger = logging.getLogger(__name__)


def record_quiz(
    path: LearningPath,
    quiz_id: str,
    topic: str,
    score: int,
    total_questions: int,
    now: datetime,
) -> QuizOutcome:
    """
    Record a quiz attempt and award XP for it

    Returns:
        QuizOutcome(path, xp_gained, percentage) with a new path

    Raises:
        InvalidArgumentError: total_questions <= 0 or score outside 0..total_questions
    """
    # Validates before anything is touched
    pct = quiz_percentage(score, total_questions)
    xp_gained = quiz_xp(score)

    updated = path.model_copy(deep=True)
    updated.quizzes.append(
        QuizResult(
            quiz_id=quiz_id,
            topic=topic,
            score=score,
            total_questions=total_questions,
            completed_at=now,
        )
    )
    updated.total_xp += xp_gained
    updated.updated_at = now

    logger.info(
        f"User {path.user_id} scored {score}/{total_questions} ({pct}%) on quiz {quiz_id}: "
        f"+{xp_gained} XP, total {updated.total_xp}"
    )

    return QuizOutcome(path=updated, xp_gained=xp_gained, percentage=pct)
