"""Dashboard statistics derived from a learning path and its owner"""

from src.gamification.xp_system import percentage, round_half_up
from src.models.progress import LearningPath, Stats, StepStatus
from src.models.user import User


def compute_stats(path: LearningPath, user: User) -> Stats:
    """
    Summarize progress for display. Pure; empty histories yield zeros.

    XP is read from the path, which is the single stored copy.
    """
    total_steps = len(path.steps)
    completed_steps = sum(1 for step in path.steps if step.status == StepStatus.COMPLETED)
    overall_progress = percentage(completed_steps, total_steps) if total_steps else 0

    quiz_scores = [percentage(q.score, q.total_questions) for q in path.quizzes]
    avg_quiz_score = round_half_up(sum(quiz_scores) / len(quiz_scores)) if quiz_scores else 0
    last_quiz_score = quiz_scores[-1] if quiz_scores else 0

    return Stats(
        xp=path.total_xp,
        streak=user.streak,
        badges=user.badges,
        overall_progress=overall_progress,
        completed_steps=completed_steps,
        total_steps=total_steps,
        avg_quiz_score=avg_quiz_score,
        last_quiz_score=last_quiz_score,
        total_quizzes=len(path.quizzes),
    )
