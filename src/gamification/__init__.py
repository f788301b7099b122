"""
Gamification & learning-progress engine for LearnBotX

This module implements the rules behind the learning dashboard:
- Learning path with step unlocking (locked → current → completed)
- XP awards for step completion and quizzes
- Daily-activity streaks
- Read-only dashboard statistics

Every function is pure: it takes a state snapshot plus the current time and
returns new state. Loading, saving and serializing access to a user's state
are the caller's job (see src.services.progress_service).
"""

from src.gamification.streak_system import evaluate_streak, describe_streak_change
from src.gamification.learning_path import (
    DEFAULT_SEED_TITLES,
    create_learning_path,
    update_step,
    current_step,
)
from src.gamification.quiz_ledger import record_quiz
from src.gamification.stats import compute_stats
from src.gamification.xp_system import step_completion_xp, quiz_xp, quiz_percentage

__all__ = [
    "evaluate_streak",
    "describe_streak_change",
    "DEFAULT_SEED_TITLES",
    "create_learning_path",
    "update_step",
    "current_step",
    "record_quiz",
    "compute_stats",
    "step_completion_xp",
    "quiz_xp",
    "quiz_percentage",
]
