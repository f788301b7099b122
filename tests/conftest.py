"""Global test fixtures and utilities for LearnBotX tests"""
import pytest
from datetime import datetime, timedelta, timezone

from src.db.store import InMemoryProgressStore
from src.gamification.learning_path import create_learning_path
from src.models.user import StreakState, User
from src.services.progress_service import ProgressService


# ============================================================================
# Time Fixtures
# ============================================================================

class FakeClock:
    """Controllable clock: call it for 'now', advance() to move time forward"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def fixed_now():
    """Reference time used across tests"""
    return datetime(2024, 3, 15, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now):
    return FakeClock(fixed_now)


# ============================================================================
# Domain Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


@pytest.fixture
def learning_path(test_user_id, fixed_now):
    """Fresh six-step path"""
    return create_learning_path(test_user_id, fixed_now)


@pytest.fixture
def test_user(test_user_id, fixed_now):
    """Standard test user"""
    return User(
        user_id=test_user_id,
        name="Ada Learner",
        email="ada@example.com",
        streak=StreakState(current=3, longest=5, last_active=fixed_now),
        created_at=fixed_now,
    )


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def store():
    return InMemoryProgressStore()


@pytest.fixture
def progress_service(store, clock):
    return ProgressService(store, clock=clock)


@pytest.fixture
def test_api_key():
    """Standard test API key"""
    return "test_api_key_12345"
