"""
ProgressService - Learning Progress Business Logic

Wraps the pure gamification engine with loading, saving and per-user
serialization. Every mutating call:

1. takes the user's asyncio lock (serializes requests inside this process)
2. loads the current snapshot, applies one engine operation, saves it with a
   version check (detects writers in other processes)
3. on a version conflict, reloads and re-applies, up to max_conflict_retries
"""

import asyncio
import logging
import re
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional, Sequence, TypeVar

from src.db.store import ProgressStore
from src.exceptions import ConcurrencyConflictError, InvalidArgumentError, LearnBotError, NotFoundError
from src.gamification import (
    DEFAULT_SEED_TITLES,
    compute_stats,
    create_learning_path,
    describe_streak_change,
    evaluate_streak,
    record_quiz,
    update_step,
)
from src.models.progress import LearningPath, LessonId, QuizOutcome, Stats, StepUpdateResult
from src.models.user import Badge, LearnerLevel, StreakState, User
from src.utils.datetime_helpers import Clock, now_utc

logger = logging.getLogger(__name__)

T = TypeVar("T")

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


class ProgressService:
    """
    Service for learning progress, XP and streaks.

    Responsibilities:
    - Account registration with a seeded learning path
    - Streak evaluation on login
    - Step progress and quiz recording
    - Dashboard statistics
    """

    def __init__(
        self,
        store: ProgressStore,
        clock: Clock = now_utc,
        seed_titles: Sequence[str] = DEFAULT_SEED_TITLES,
        max_conflict_retries: int = 3,
    ):
        """
        Initialize ProgressService.

        Args:
            store: Persistence for users and learning paths
            clock: Source of the current time
            seed_titles: Step titles for newly created learning paths
            max_conflict_retries: Re-applications allowed after a lost version check
        """
        self.store = store
        self.clock = clock
        self.seed_titles = tuple(seed_titles)
        self.max_conflict_retries = max_conflict_retries
        # Per-user locks, removed once no task holds or waits on them
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        logger.debug("ProgressService initialized")

    # ==========================================
    # Users & streaks
    # ==========================================

    async def register_user(
        self,
        user_id: str,
        name: str,
        email: str,
        level: LearnerLevel = LearnerLevel.BEGINNER,
    ) -> User:
        """
        Create a user with a fresh streak and a seeded learning path

        Raises:
            InvalidArgumentError: duplicate user id or email, malformed email
        """
        email = email.strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise InvalidArgumentError("Please enter a valid email", field="email", value=email)

        async with self._user_lock(user_id):
            if await self.store.load_user(user_id) is not None:
                raise InvalidArgumentError("User already exists", field="user_id", value=user_id)
            if await self.store.find_user_by_email(email) is not None:
                raise InvalidArgumentError("Email already registered", field="email", value=email)

            now = self.clock()
            user = User(
                user_id=user_id,
                name=name.strip(),
                email=email,
                level=level,
                streak=StreakState(current=0, longest=0, last_active=now),
                created_at=now,
            )
            try:
                saved = await self.store.save_user(user)
            except ConcurrencyConflictError as e:
                raise InvalidArgumentError("User already exists", field="user_id", value=user_id) from e

            # users row first: learning_paths references it
            try:
                await self.store.save_path(create_learning_path(user_id, now, self.seed_titles))
            except LearnBotError:
                logger.error(
                    f"User {user_id} was saved without a learning path; "
                    f"the seed path is created on the next get_progress"
                )
                raise

        logger.info(f"Registered user {user_id} with a {len(self.seed_titles)}-step learning path")
        return saved

    async def get_user(self, user_id: str) -> User:
        """Raises NotFoundError if the user doesn't exist"""
        user = await self.store.load_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found", record_type="User", record_id=user_id)
        return user

    async def record_login(self, user_id: str) -> User:
        """Evaluate the user's streak for a login happening now"""

        async def attempt() -> User:
            user = await self.get_user(user_id)
            new_streak = evaluate_streak(user.streak, self.clock())
            saved = await self.store.save_user(user.model_copy(update={"streak": new_streak}))

            change = describe_streak_change(user.streak, new_streak)
            logger.info(
                f"Login for user {user_id}: streak {change['old_streak']} → {change['current_streak']} "
                f"({change['gap']}, longest {change['longest_streak']})"
            )
            return saved

        return await self._serialized(user_id, "record_login", attempt)

    async def award_badge(self, user_id: str, badge_id: str, name: str) -> User:
        """Give a user a badge; awarding a badge they already hold is a no-op"""

        async def attempt() -> User:
            user = await self.get_user(user_id)
            if any(badge.id == badge_id for badge in user.badges):
                return user

            badges = [*user.badges, Badge(id=badge_id, name=name, earned_at=self.clock())]
            saved = await self.store.save_user(user.model_copy(update={"badges": badges}))
            logger.info(f"User {user_id} earned badge {badge_id} ({name})")
            return saved

        return await self._serialized(user_id, "award_badge", attempt)

    # ==========================================
    # Learning path
    # ==========================================

    async def get_progress(self, user_id: str) -> LearningPath:
        """
        Load the user's learning path, creating the seed path on first access

        Raises:
            NotFoundError: if the user doesn't exist
        """
        path = await self.store.load_path(user_id)
        if path is not None:
            return path

        await self.get_user(user_id)

        async def attempt() -> LearningPath:
            existing = await self.store.load_path(user_id)
            if existing is not None:
                return existing
            return await self.store.save_path(create_learning_path(user_id, self.clock(), self.seed_titles))

        return await self._serialized(user_id, "get_progress", attempt)

    async def update_step(
        self,
        user_id: str,
        step_id: int,
        progress: Optional[int] = None,
        lesson_id: Optional[LessonId] = None,
    ) -> StepUpdateResult:
        """
        Apply a step progress update

        Raises:
            NotFoundError: no learning path, or unknown step
            InvalidArgumentError: malformed progress
        """

        async def attempt() -> StepUpdateResult:
            path = await self._load_existing_path(user_id)
            result = update_step(path, step_id, self.clock(), progress=progress, lesson_id=lesson_id)
            saved = await self.store.save_path(result.path)
            return result.model_copy(update={"path": saved})

        return await self._serialized(user_id, "update_step", attempt)

    async def record_quiz(
        self,
        user_id: str,
        quiz_id: str,
        topic: str,
        score: int,
        total_questions: int,
    ) -> QuizOutcome:
        """
        Record a quiz attempt and award its XP

        Raises:
            NotFoundError: no learning path
            InvalidArgumentError: invalid score / total_questions
        """

        async def attempt() -> QuizOutcome:
            path = await self._load_existing_path(user_id)
            outcome = record_quiz(path, quiz_id, topic, score, total_questions, self.clock())
            saved = await self.store.save_path(outcome.path)
            return outcome.model_copy(update={"path": saved})

        return await self._serialized(user_id, "record_quiz", attempt)

    async def get_stats(self, user_id: str) -> Stats:
        """Dashboard statistics; NotFoundError if the user or path is missing"""
        user = await self.get_user(user_id)
        path = await self._load_existing_path(user_id)
        return compute_stats(path, user)

    async def get_xp(self, user_id: str) -> int:
        """The user's XP total (read from the learning path, 0 before it exists)"""
        path = await self.store.load_path(user_id)
        return path.total_xp if path else 0

    # ==========================================
    # Helpers
    # ==========================================

    async def _load_existing_path(self, user_id: str) -> LearningPath:
        path = await self.store.load_path(user_id)
        if path is None:
            raise NotFoundError(
                f"Learning path for user {user_id} not found",
                record_type="Progress",
                record_id=user_id,
                user_id=user_id,
            )
        return path

    async def _serialized(
        self,
        user_id: str,
        operation: str,
        attempt: Callable[[], Awaitable[T]],
    ) -> T:
        """Run `attempt` under the user's lock, re-running it after lost version checks"""
        async with self._user_lock(user_id):
            for retry in range(self.max_conflict_retries + 1):
                try:
                    return await attempt()
                except ConcurrencyConflictError:
                    if retry >= self.max_conflict_retries:
                        logger.error(
                            f"{operation} for user {user_id} gave up after {retry + 1} conflicting attempts"
                        )
                        raise
                    logger.warning(f"{operation} for user {user_id} hit a version conflict, retrying")

    @asynccontextmanager
    async def _user_lock(self, user_id: str) -> AsyncIterator[None]:
        """Hold the user's lock; the entry is dropped when the last holder or waiter leaves"""
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[user_id] -= 1
            if not self._lock_users[user_id]:
                del self._lock_users[user_id]
                del self._locks[user_id]
