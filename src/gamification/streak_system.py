"""
Daily-Activity Streak System

A streak counts consecutive days of qualifying activity (a login), measured in
rolling 24-hour windows from the last activity rather than calendar days:

- More than 24h and less than 48h since last activity: streak continues (+1)
- 48h or more: streak broken, restarts at 1
- 24h or less: same day, no change (repeat logins do not double-count)

The last-activity timestamp always moves to the new activity time.
"""

from typing import Any, Dict
from datetime import datetime
import logging

from src.models.user import StreakState
from src.utils.datetime_helpers import hours_since

logger = logging.getLogger(__name__)

CONTINUE_AFTER_HOURS = 24
RESET_AFTER_HOURS = 48


def classify_gap(hours: float) -> str:
    """Classify hours since last activity as 'continue', 'reset' or 'same_day'"""
    if CONTINUE_AFTER_HOURS < hours < RESET_AFTER_HOURS:
        return "continue"
    if hours >= RESET_AFTER_HOURS:
        return "reset"
    return "same_day"


def evaluate_streak(streak: StreakState, now: datetime) -> StreakState:
    """
    Apply a qualifying activity at `now` to a streak

    Args:
        streak: Stored streak state
        now: Time of the activity

    Returns:
        New StreakState; the input is not modified
    """
    hours = hours_since(streak.last_active, now)
    gap = classify_gap(hours)
    current = streak.current
    longest = streak.longest

    if gap == "continue":
        current += 1
        longest = max(longest, current)
        logger.debug(f"Streak continues after {hours:.1f}h: {streak.current} → {current}")

    elif gap == "reset":
        current = 1
        longest = max(longest, current)
        logger.debug(f"Streak reset after {hours:.1f}h (was {streak.current})")

    return StreakState(current=current, longest=longest, last_active=now)


def describe_streak_change(old: StreakState, new: StreakState) -> Dict[str, Any]:
    """
    Summarize the effect of evaluate_streak for the login log line

    Returns:
        {
            'old_streak': int,
            'current_streak': int,
            'longest_streak': int,
            'gap': 'continue' | 'reset' | 'same_day'
        }
    """
    return {
        "old_streak": old.current,
        "current_streak": new.current,
        "longest_streak": new.longest,
        "gap": classify_gap(hours_since(old.last_active, new.last_active)),
    }
