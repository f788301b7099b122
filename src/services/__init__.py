"""
Service Layer Package

This package contains business logic services that sit between the
presentation layer (FastAPI routes) and the data access layer (progress store).

Core Services:
- ProgressService: registration, streaks, learning path, quizzes, stats
"""

from src.services.container import ServiceContainer, get_container, init_container, reset_container
from src.services.progress_service import ProgressService

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
    "reset_container",
    "ProgressService",
]
