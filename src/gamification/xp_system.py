"""
XP Award Rules

XP is additive with no decay or spending. Two sources:
- Step completion: 50 XP + 25 XP per position in the path (later steps pay more)
- Quiz: 10 XP per correct answer

Percentages are rounded half-up, the way the dashboard has always displayed
them (so 2.5% shows as 3%, not 2%).
"""

import math
import logging

from src.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

STEP_BASE_XP = 50
STEP_INDEX_BONUS_XP = 25
XP_PER_CORRECT_ANSWER = 10


def step_completion_xp(step_index: int) -> int:
    """XP for completing the step at zero-based `step_index`"""
    return STEP_BASE_XP + STEP_INDEX_BONUS_XP * step_index


def quiz_xp(score: int) -> int:
    """XP for a quiz with `score` correct answers"""
    return score * XP_PER_CORRECT_ANSWER


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    """round(100 * part / whole), half-up; `whole` must be positive"""
    return round_half_up(100 * part / whole)


def validate_quiz_score(score: int, total_questions: int) -> None:
    """
    Check a quiz score before it is recorded or scored

    Raises:
        InvalidArgumentError: if total_questions is not positive, or score is
            outside 0..total_questions, or either is not an integer
    """
    for field, value in (("score", score), ("total_questions", total_questions)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgumentError(f"{field} must be an integer", field=field, value=value)

    if total_questions <= 0:
        raise InvalidArgumentError(
            "total_questions must be greater than zero",
            field="total_questions",
            value=total_questions
        )
    if score < 0 or score > total_questions:
        raise InvalidArgumentError(
            f"score must be between 0 and {total_questions}",
            field="score",
            value=score
        )


def quiz_percentage(score: int, total_questions: int) -> int:
    """
    Percentage score of a quiz attempt

    Example:
        quiz_percentage(4, 5) -> 80
    """
    validate_quiz_score(score, total_questions)
    return percentage(score, total_questions)
