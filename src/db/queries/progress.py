"""PostgreSQL-backed progress store

Users and learning paths are stored as JSONB documents next to an integer
`version` column; writes are conditional on the version the caller read.
"""
import logging
from typing import Optional

import psycopg
from psycopg.types.json import Jsonb

from src.db.connection import Database, db
from src.db.store import ProgressStore
from src.exceptions import ConcurrencyConflictError, wrap_external_exception
from src.models.progress import LearningPath
from src.models.user import User

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    user_id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    document JSONB NOT NULL,
    version INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS learning_paths (
    user_id TEXT PRIMARY KEY REFERENCES users(user_id) ON DELETE CASCADE,
    document JSONB NOT NULL,
    version INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""


class PostgresProgressStore(ProgressStore):
    """ProgressStore over a psycopg async connection pool"""

    def __init__(self, database: Database = db):
        self.db = database

    async def init_schema(self) -> None:
        """Create tables if they don't exist"""
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(SCHEMA_SQL)
                await conn.commit()
            logger.info("Progress schema ready")
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="init_schema") from e

    async def close(self) -> None:
        await self.db.close_pool()

    # ==========================================
    # Users
    # ==========================================

    async def load_user(self, user_id: str) -> Optional[User]:
        row = await self._fetch_one(
            "SELECT document, version FROM users WHERE user_id = %s",
            (user_id,),
            operation="load_user",
            user_id=user_id,
        )
        return User.model_validate({**row["document"], "version": row["version"]}) if row else None

    async def find_user_by_email(self, email: str) -> Optional[User]:
        row = await self._fetch_one(
            "SELECT document, version FROM users WHERE lower(email) = lower(%s)",
            (email,),
            operation="find_user_by_email",
        )
        return User.model_validate({**row["document"], "version": row["version"]}) if row else None

    async def save_user(self, user: User) -> User:
        document = Jsonb(user.model_dump(mode="json", exclude={"version"}))

        if user.version == 0:
            row = await self._fetch_one(
                """
                INSERT INTO users (user_id, email, document, version)
                VALUES (%s, %s, %s, 1)
                ON CONFLICT DO NOTHING
                RETURNING version
                """,
                (user.user_id, user.email, document),
                operation="save_user",
                user_id=user.user_id,
                commit=True,
            )
        else:
            row = await self._fetch_one(
                """
                UPDATE users
                SET document = %s,
                    email = %s,
                    version = version + 1,
                    updated_at = CURRENT_TIMESTAMP
                WHERE user_id = %s AND version = %s
                RETURNING version
                """,
                (document, user.email, user.user_id, user.version),
                operation="save_user",
                user_id=user.user_id,
                commit=True,
            )

        if not row:
            raise ConcurrencyConflictError(
                f"User {user.user_id} changed since version {user.version}",
                record_type="User",
                expected_version=user.version,
                user_id=user.user_id,
            )
        return user.model_copy(update={"version": row["version"]})

    # ==========================================
    # Learning paths
    # ==========================================

    async def load_path(self, user_id: str) -> Optional[LearningPath]:
        row = await self._fetch_one(
            "SELECT document, version FROM learning_paths WHERE user_id = %s",
            (user_id,),
            operation="load_path",
            user_id=user_id,
        )
        return LearningPath.model_validate({**row["document"], "version": row["version"]}) if row else None

    async def save_path(self, path: LearningPath) -> LearningPath:
        document = Jsonb(path.model_dump(mode="json", exclude={"version"}))

        if path.version == 0:
            row = await self._fetch_one(
                """
                INSERT INTO learning_paths (user_id, document, version)
                VALUES (%s, %s, 1)
                ON CONFLICT (user_id) DO NOTHING
                RETURNING version
                """,
                (path.user_id, document),
                operation="save_path",
                user_id=path.user_id,
                commit=True,
            )
        else:
            row = await self._fetch_one(
                """
                UPDATE learning_paths
                SET document = %s,
                    version = version + 1,
                    updated_at = CURRENT_TIMESTAMP
                WHERE user_id = %s AND version = %s
                RETURNING version
                """,
                (document, path.user_id, path.version),
                operation="save_path",
                user_id=path.user_id,
                commit=True,
            )

        if not row:
            raise ConcurrencyConflictError(
                f"Learning path for user {path.user_id} changed since version {path.version}",
                record_type="LearningPath",
                expected_version=path.version,
                user_id=path.user_id,
            )
        return path.model_copy(update={"version": row["version"]})

    async def _fetch_one(
        self,
        query: str,
        params: tuple,
        operation: str,
        user_id: Optional[str] = None,
        commit: bool = False,
    ) -> Optional[dict]:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(query, params)
                    row = await cur.fetchone()
                if commit:
                    await conn.commit()
                return row
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation=operation, user_id=user_id) from e
