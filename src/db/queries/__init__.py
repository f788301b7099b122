"""
Database queries

Module organization:
- progress.py: PostgreSQL-backed ProgressStore (users and learning paths)
"""

from src.db.queries.progress import PostgresProgressStore, SCHEMA_SQL

__all__ = [
    "PostgresProgressStore",
    "SCHEMA_SQL",
]
