"""Tests for the progress API endpoints"""
import pytest
import httpx

from src import config
from src.api.server import create_api_application
from src.services.container import init_container, reset_container


@pytest.fixture
def app(store, clock, monkeypatch, test_api_key):
    """Application wired to an in-memory store and a fake clock"""
    monkeypatch.setattr(config, "API_KEYS", [test_api_key])
    init_container(store, clock=clock)
    yield create_api_application(use_lifespan=False)
    reset_container()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def headers(test_api_key):
    return {"Authorization": f"Bearer {test_api_key}"}


async def create_user(client, headers, user_id="api_user"):
    response = await client.post(
        "/api/v1/users",
        json={"user_id": user_id, "name": "Api User", "email": f"{user_id}@example.com"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_health_needs_no_auth(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_invalid_api_key(client):
    response = await client.get("/api/v1/users/x", headers={"Authorization": "Bearer wrong"})

    assert response.status_code == 401
    assert response.json()["error"] == "AuthenticationError"


@pytest.mark.asyncio
async def test_missing_api_key(client):
    response = await client.get("/api/v1/users/x")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_no_api_keys_configured(client, headers, monkeypatch):
    monkeypatch.setattr(config, "API_KEYS", [])

    response = await client.get("/api/v1/users/x", headers=headers)

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_create_and_get_user(client, headers):
    created = await create_user(client, headers)
    assert created["xp"] == 0
    assert created["streak"]["current"] == 0
    assert created["level"] == "beginner"

    response = await client.get("/api/v1/users/api_user", headers=headers)
    assert response.status_code == 200
    assert response.json()["email"] == "api_user@example.com"


@pytest.mark.asyncio
async def test_create_duplicate_user(client, headers):
    await create_user(client, headers)
    response = await client.post(
        "/api/v1/users",
        json={"user_id": "api_user", "name": "Again", "email": "again@example.com"},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidArgumentError"


@pytest.mark.asyncio
async def test_unknown_user_is_404(client, headers):
    response = await client.get("/api/v1/users/ghost/progress/stats", headers=headers)

    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundError"


@pytest.mark.asyncio
async def test_login_updates_streak(client, headers, clock):
    await create_user(client, headers)
    clock.advance(hours=30)

    response = await client.post("/api/v1/users/api_user/login", headers=headers)

    assert response.status_code == 200
    assert response.json()["streak"]["current"] == 1
    assert response.json()["streak"]["longest"] == 1


@pytest.mark.asyncio
async def test_step_completion_flow(client, headers):
    """Test completing a step awards XP, unlocks the next and shows on the user"""
    await create_user(client, headers)

    response = await client.put(
        "/api/v1/users/api_user/progress/steps/1",
        json={"progress": 120, "lesson_id": 1},
        headers=headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["xp_gained"] == 50
    assert data["award"]["unlocked_step_id"] == 2
    steps = data["progress"]["steps"]
    assert steps[0]["status"] == "completed"
    assert steps[0]["progress"] == 100
    assert steps[1]["status"] == "current"

    # second submission is a no-op for XP
    response = await client.put(
        "/api/v1/users/api_user/progress/steps/1",
        json={"progress": 100},
        headers=headers,
    )
    assert response.json()["xp_gained"] == 0
    assert response.json()["award"] is None

    user = (await client.get("/api/v1/users/api_user", headers=headers)).json()
    assert user["xp"] == 50


@pytest.mark.asyncio
async def test_unknown_step_is_404(client, headers):
    await create_user(client, headers)

    response = await client.put(
        "/api/v1/users/api_user/progress/steps/42",
        json={"progress": 10},
        headers=headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_quiz_and_stats(client, headers):
    await create_user(client, headers)

    response = await client.post(
        "/api/v1/users/api_user/progress/quizzes",
        json={"quiz_id": "js-1", "topic": "javascript", "score": 4, "total_questions": 5},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["xp_gained"] == 40
    assert response.json()["percentage"] == 80

    stats = (await client.get("/api/v1/users/api_user/progress/stats", headers=headers)).json()
    assert stats["xp"] == 40
    assert stats["avg_quiz_score"] == 80
    assert stats["last_quiz_score"] == 80
    assert stats["total_quizzes"] == 1
    assert stats["total_steps"] == 6


@pytest.mark.asyncio
async def test_quiz_with_zero_questions_is_400(client, headers):
    await create_user(client, headers)

    response = await client.post(
        "/api/v1/users/api_user/progress/quizzes",
        json={"quiz_id": "js-1", "topic": "javascript", "score": 0, "total_questions": 0},
        headers=headers,
    )

    assert response.status_code == 400
    assert "total_questions" in response.json()["user_message"]


@pytest.mark.asyncio
async def test_award_badge(client, headers):
    await create_user(client, headers)

    response = await client.post(
        "/api/v1/users/api_user/badges",
        json={"badge_id": "first-steps", "name": "First Steps"},
        headers=headers,
    )

    assert response.status_code == 200
    assert [badge["id"] for badge in response.json()["badges"]] == ["first-steps"]


@pytest.mark.asyncio
async def test_locked_step_update_keeps_one_current_step(client, headers):
    await create_user(client, headers)

    response = await client.put(
        "/api/v1/users/api_user/progress/steps/3",
        json={"progress": 100, "lesson_id": "2"},
        headers=headers,
    )

    assert response.status_code == 200
    assert response.json()["award"] is None
    steps = response.json()["progress"]["steps"]
    assert [step["status"] for step in steps].count("current") == 1
    assert steps[2]["status"] == "locked"
    assert steps[2]["completed_lessons"][0]["lesson_id"] == 2
