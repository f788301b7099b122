"""
Progress store: persistence contract for users and learning paths

Saves are optimistic: a record is written only if its `version` still matches
what is stored, and the store bumps the version on every successful write.
A record with version 0 is new and may only be inserted, never overwrite.
A lost race raises ConcurrencyConflictError; the caller reloads and retries.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from src.exceptions import ConcurrencyConflictError
from src.models.progress import LearningPath
from src.models.user import User

logger = logging.getLogger(__name__)


class ProgressStore(ABC):
    """Read-your-writes storage for one user's User record and LearningPath"""

    @abstractmethod
    async def load_user(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_user_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def save_user(self, user: User) -> User:
        """Version-checked write; returns the stored copy with its new version"""

    @abstractmethod
    async def load_path(self, user_id: str) -> Optional[LearningPath]:
        ...

    @abstractmethod
    async def save_path(self, path: LearningPath) -> LearningPath:
        """Version-checked write; returns the stored copy with its new version"""

    async def close(self) -> None:
        """Release resources held by the store"""


class InMemoryProgressStore(ProgressStore):
    """
    In-process store for development and tests

    Not persisted across restarts. Records are copied on the way in and out
    so callers never share mutable state with the store.
    """

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._paths: Dict[str, LearningPath] = {}
        logger.info("InMemoryProgressStore initialized - progress is NOT persisted across restarts")

    async def load_user(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def find_user_by_email(self, email: str) -> Optional[User]:
        email = email.lower()
        for user in self._users.values():
            if user.email.lower() == email:
                return user.model_copy(deep=True)
        return None

    async def save_user(self, user: User) -> User:
        self._check_version("User", user.user_id, self._users.get(user.user_id), user.version)
        stored = user.model_copy(deep=True, update={"version": user.version + 1})
        self._users[user.user_id] = stored
        logger.debug(f"Saved user {user.user_id} at version {stored.version}")
        return stored.model_copy(deep=True)

    async def load_path(self, user_id: str) -> Optional[LearningPath]:
        path = self._paths.get(user_id)
        return path.model_copy(deep=True) if path else None

    async def save_path(self, path: LearningPath) -> LearningPath:
        self._check_version("LearningPath", path.user_id, self._paths.get(path.user_id), path.version)
        stored = path.model_copy(deep=True, update={"version": path.version + 1})
        self._paths[path.user_id] = stored
        logger.debug(f"Saved learning path for user {path.user_id} at version {stored.version}")
        return stored.model_copy(deep=True)

    @staticmethod
    def _check_version(record_type: str, user_id: str, existing, version: int) -> None:
        stored_version = existing.version if existing is not None else 0
        if stored_version != version:
            raise ConcurrencyConflictError(
                f"{record_type} for user {user_id} is at version {stored_version}, write expected {version}",
                record_type=record_type,
                expected_version=version,
                user_id=user_id,
            )
