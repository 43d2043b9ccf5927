"""
System smoke test: full API flow in-process with SQLite.

Verifies health, auth, lesson authoring and submission, progress, leagues,
quests, social endpoints and the error contract.
"""

import uuid

import pytest
from httpx import AsyncClient

API = "/api/v1"

LESSON_BODY = {
    "title": "Greetings",
    "description": "Say hello and goodbye",
    "lesson_type": "vocabulary",
    "category": "beginner",
    "difficulty": 1,
    "xp_reward": 50,
    "feather_reward": 5,
    "exercises": [
        {"exercise_type": "multiple-choice", "question": "Hello?", "options": ["hola", "adios"], "correct_answer": "hola"},
        {"exercise_type": "fill-blank", "question": "Goodbye?", "correct_answer": "adios"},
        {"exercise_type": "writing", "question": "Thank you?", "correct_answer": "gracias"},
        {"exercise_type": "speaking", "question": "Please?", "correct_answer": "por favor"},
    ],
}


async def create_lesson(client: AsyncClient, admin_headers: dict, **overrides) -> dict:
    r = await client.post(f"{API}/lessons", json={**LESSON_BODY, **overrides}, headers=admin_headers)
    assert r.status_code == 201, r.text
    return r.json()


def submission(*answers: str) -> dict:
    return {
        "answers": [
            {"exercise_index": i, "user_answer": a, "time_spent": 20}
            for i, a in enumerate(answers)
        ]
    }


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    r = await client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["database"] == "connected"
    assert "version" in data

    root = await client.get("/")
    assert root.json()["api"]["v1"] == API


@pytest.mark.asyncio
async def test_register_login_me(client: AsyncClient):
    email = f"smoke-{uuid.uuid4().hex[:8]}@example.com"
    r = await client.post(
        f"{API}/auth/register",
        json={"email": email, "password": "SecurePass123", "name": "Smoke User"},
    )
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == email
    assert data["user"]["league"] == "Bronze"
    assert data["user"]["settings"]["theme"] == "auto"

    r = await client.post(f"{API}/auth/login", json={"email": email, "password": "SecurePass123"})
    assert r.status_code == 200
    token = r.json()["access_token"]

    r = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["name"] == "Smoke User"

    dup = await client.post(
        f"{API}/auth/register",
        json={"email": email, "password": "SecurePass123", "name": "Again"},
    )
    assert dup.status_code == 409
    assert dup.json()["code"] == "email_taken"

    bad = await client.post(f"{API}/auth/login", json={"email": email, "password": "wrong-pass1"})
    assert bad.status_code == 401
    assert bad.json()["code"] == "invalid_credentials"


@pytest.mark.asyncio
async def test_weak_password_is_422(client: AsyncClient):
    r = await client.post(
        f"{API}/auth/register",
        json={"email": "weak@example.com", "password": "letters-only", "name": "Weak"},
    )
    assert r.status_code == 422
    assert r.json()["detail"] == "Validation error"


@pytest.mark.asyncio
async def test_unauthenticated_requests(client: AsyncClient):
    r = await client.get(f"{API}/auth/me")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"
    assert r.json() == {"detail": "Not authenticated", "code": "unauthenticated"}
    assert "X-Request-ID" in r.headers

    r = await client.get(f"{API}/lessons", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.json()["code"] == "invalid_token"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    r = await client.get("/health", headers={"X-Request-ID": "trace-42"})
    assert r.headers["X-Request-ID"] == "trace-42"


@pytest.mark.asyncio
async def test_only_admins_create_lessons(client: AsyncClient, auth_headers: dict):
    r = await client.post(f"{API}/lessons", json=LESSON_BODY, headers=auth_headers)
    assert r.status_code == 403
    assert r.json()["code"] == "forbidden"


@pytest.mark.asyncio
async def test_lesson_submission_flow(client: AsyncClient, auth_headers: dict, admin_headers: dict):
    lesson = await create_lesson(client, admin_headers)
    assert "correct_answer" not in lesson["exercises"][0]

    r = await client.get(f"{API}/lessons", params={"type": "vocabulary"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["total"] == 1

    r = await client.get(f"{API}/lessons/recommended", headers=auth_headers)
    assert [l["id"] for l in r.json()] == [lesson["id"]]

    r = await client.get(f"{API}/lessons/{lesson['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["progress"] is None

    r = await client.post(f"{API}/lessons/{lesson['id']}/start", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "in-progress"

    r = await client.post(
        f"{API}/lessons/{lesson['id']}/submit",
        json=submission("hola", "adios", "gracias", "nope"),
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["score"] == 75
    assert data["correct_answers"] == 3
    assert data["total_exercises"] == 4
    assert data["is_completed"] is True
    assert data["rewards"]["xp"] == 38
    assert data["rewards"]["feathers"] == 4
    assert data["streak"]["streak"] == 1
    assert data["league"]["points_gained"] == 38
    assert data["progress"]["status"] == "completed"
    assert data["progress"]["attempts"] == 1

    again = await client.post(
        f"{API}/lessons/{lesson['id']}/submit",
        json=submission("hola", "adios", "gracias", "por favor"),
        headers=auth_headers,
    )
    assert again.status_code == 409
    assert again.json()["code"] == "already_completed"

    me = (await client.get(f"{API}/auth/me", headers=auth_headers)).json()
    assert (me["xp"], me["feathers"], me["streak"], me["league_points"]) == (38, 4, 1, 38)


@pytest.mark.asyncio
async def test_submission_errors(client: AsyncClient, auth_headers: dict, admin_headers: dict):
    lesson = await create_lesson(client, admin_headers)
    url = f"{API}/lessons/{lesson['id']}/submit"

    r = await client.post(url, json={"answers": [{"exercise_index": 7, "user_answer": "x"}]}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_exercise_index"

    r = await client.post(url, json={"answers": [{"exercise_index": -1, "user_answer": "x"}]}, headers=auth_headers)
    assert r.status_code == 422

    r = await client.post(f"{API}/lessons/{uuid.uuid4()}/submit", json=submission("x"), headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"

    r = await client.post(url, json=submission("x", "y"), headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["is_completed"] is False
    assert r.json()["rewards"] is None


@pytest.mark.asyncio
async def test_submission_answer_field(client: AsyncClient, auth_headers: dict, admin_headers: dict):
    first = await create_lesson(client, admin_headers)
    second = await create_lesson(client, admin_headers, title="Greetings again")
    correct = ["hola", "adios", "gracias", "por favor"]

    r = await client.post(
        f"{API}/lessons/{first['id']}/submit",
        json={"answers": [{"exercise_index": i, "user_answer": a} for i, a in enumerate(correct)]},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["score"] == 100
    assert r.json()["progress"]["exercise_results"][0]["user_answer"] == "hola"

    # Older clients send "answer"
    r = await client.post(
        f"{API}/lessons/{second['id']}/submit",
        json={"answers": [{"exercise_index": i, "answer": a} for i, a in enumerate(correct)]},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["score"] == 100

    r = await client.post(
        f"{API}/lessons/{second['id']}/submit",
        json={"answers": [{"exercise_index": 0}]},
        headers=auth_headers,
    )
    assert r.status_code == 422
    assert r.json()["errors"][0]["field"].endswith("user_answer")


@pytest.mark.asyncio
async def test_lesson_admin_update_and_delete(client: AsyncClient, auth_headers: dict, admin_headers: dict):
    lesson = await create_lesson(client, admin_headers)
    url = f"{API}/lessons/{lesson['id']}"

    r = await client.patch(url, json={"title": "Greetings II", "difficulty": 2, "xp_reward": 80}, headers=admin_headers)
    assert r.status_code == 200, r.text
    data = r.json()
    assert (data["title"], data["difficulty"], data["xp_reward"]) == ("Greetings II", 2, 80)
    assert len(data["exercises"]) == 4

    r = await client.patch(url, json={"exercises": []}, headers=admin_headers)
    assert r.status_code == 422
    r = await client.patch(url, json={"prerequisites": [lesson["id"]]}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_prerequisite"
    r = await client.patch(url, json={"title": "Mine now"}, headers=auth_headers)
    assert r.status_code == 403

    r = await client.delete(url, headers=admin_headers)
    assert r.status_code == 200
    assert (await client.get(url, headers=auth_headers)).status_code == 404
    assert (await client.get(f"{API}/lessons", headers=auth_headers)).json()["total"] == 0
    r = await client.post(f"{url}/submit", json=submission("hola"), headers=auth_headers)
    assert r.status_code == 404

    r = await client.patch(url, json={"is_active": True}, headers=admin_headers)
    assert r.status_code == 200
    assert (await client.get(url, headers=auth_headers)).status_code == 200

    r = await client.delete(f"{API}/lessons/{uuid.uuid4()}", headers=admin_headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_progress_endpoints(client: AsyncClient, auth_headers: dict, admin_headers: dict):
    lesson = await create_lesson(client, admin_headers)
    await client.post(
        f"{API}/lessons/{lesson['id']}/submit",
        json=submission("hola", "adios", "gracias", "por favor"),
        headers=auth_headers,
    )

    r = await client.get(f"{API}/progress", headers=auth_headers)
    assert r.status_code == 200
    data = r.json()
    assert data["pagination"]["total"] == 1
    assert data["progress"][0]["lesson"]["title"] == "Greetings"
    assert data["stats"]["total_lessons"] == 1
    assert data["stats"]["current_streak"] == 1

    r = await client.get(f"{API}/progress/completed", headers=auth_headers)
    assert len(r.json()["progress"]) == 1
    r = await client.get(f"{API}/progress/in-progress", headers=auth_headers)
    assert r.json()["progress"] == []

    r = await client.get(f"{API}/progress/stats", params={"period": "week"}, headers=auth_headers)
    assert r.status_code == 200
    stats = r.json()
    assert stats["overview"]["total_xp_earned"] == 50
    assert stats["by_type"][0]["key"] == "vocabulary"

    r = await client.get(f"{API}/progress/stats", params={"period": "decade"}, headers=auth_headers)
    assert r.status_code == 422

    r = await client.get(f"{API}/progress/streak", headers=auth_headers)
    assert r.json()["current_streak"] == 1
    assert r.json()["longest_streak"] == 1

    r = await client.get(f"{API}/progress", params={"status": "paused"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_status"

    r = await client.delete(f"{API}/lessons/{lesson['id']}/progress", headers=auth_headers)
    assert r.status_code == 200
    r = await client.get(f"{API}/lessons/{lesson['id']}/progress", headers=auth_headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_league_endpoints(client: AsyncClient, auth_headers: dict, admin_headers: dict):
    r = await client.get(f"{API}/leagues")
    assert [t["name"] for t in r.json()["tiers"]][:2] == ["Bronze", "Silver"]

    r = await client.post(f"{API}/leagues/update-points", json={"points": 1200}, headers=auth_headers)
    assert r.status_code == 200
    data = r.json()
    assert data["promoted"] is True
    assert data["new_league"] == "Silver"
    assert data["league_week"] == 1

    r = await client.post(f"{API}/leagues/update-points", json={"points": -5}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_points"

    r = await client.post(
        f"{API}/leagues/update-points", json={"points": 10, "lesson_score": 90}, headers=auth_headers
    )
    assert r.status_code == 422

    r = await client.get(f"{API}/leagues/current", headers=auth_headers)
    assert r.json()["current_league"]["name"] == "Silver"
    assert r.json()["points_to_next"] == 1300

    r = await client.get(f"{API}/leagues/leaderboard", headers=auth_headers)
    assert r.json()["leaderboard"][0]["is_current_user"] is True
    assert r.json()["user_rank"] == 1

    r = await client.get(f"{API}/leagues/leaderboard", params={"league": "Gold"}, headers=auth_headers)
    assert r.json()["leaderboard"] == []
    assert r.json()["user_rank"] is None

    r = await client.get(f"{API}/leagues/friends", headers=auth_headers)
    assert r.json()["total_friends"] == 0

    r = await client.post(
        f"{API}/leagues",
        json={"name": "Legend", "level": 7, "min_points": 30000},
        headers=admin_headers,
    )
    assert r.status_code == 409
    assert r.json()["code"] == "overlapping_league_range"


@pytest.mark.asyncio
async def test_league_tier_admin(client: AsyncClient, auth_headers: dict, admin_headers: dict):
    tiers = {t["name"]: t for t in (await client.get(f"{API}/leagues")).json()["tiers"]}

    r = await client.patch(
        f"{API}/leagues/{tiers['Master']['id']}", json={"max_points": 30000}, headers=admin_headers
    )
    assert r.status_code == 200, r.text
    assert r.json()["max_points"] == 30000

    r = await client.post(
        f"{API}/leagues",
        json={"name": "Legend", "level": 7, "min_points": 30000},
        headers=admin_headers,
    )
    assert r.status_code == 201, r.text
    names = [t["name"] for t in (await client.get(f"{API}/leagues")).json()["tiers"]]
    assert names[-2:] == ["Master", "Legend"]

    r = await client.patch(
        f"{API}/leagues/{tiers['Silver']['id']}", json={"min_points": 1200}, headers=admin_headers
    )
    assert r.status_code == 400
    assert r.json()["code"] == "ladder_gap"

    r = await client.delete(f"{API}/leagues/{tiers['Gold']['id']}", headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["code"] == "ladder_gap"

    r = await client.patch(
        f"{API}/leagues/{tiers['Gold']['id']}",
        json={"min_points": 3000, "max_points": 2000},
        headers=admin_headers,
    )
    assert r.status_code == 422
    r = await client.patch(f"{API}/leagues/{tiers['Gold']['id']}", json={"name": None}, headers=admin_headers)
    assert r.status_code == 422

    r = await client.patch(
        f"{API}/leagues/{tiers['Gold']['id']}", json={"description": "Shiny"}, headers=auth_headers
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_quest_endpoints(client: AsyncClient, auth_headers: dict, admin_headers: dict):
    lesson = await create_lesson(client, admin_headers)
    await client.post(
        f"{API}/lessons/{lesson['id']}/submit",
        json=submission("hola", "adios", "gracias", "por favor"),
        headers=auth_headers,
    )

    r = await client.get(f"{API}/quests/daily", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["total"] == 4

    r = await client.get(f"{API}/quests/achievements", headers=auth_headers)
    assert r.json()["completion_percentage"] == 25

    r = await client.post(f"{API}/quests/claim/first_lesson", headers=auth_headers)
    assert r.status_code == 200, r.text
    assert r.json()["total_xp"] == 100
    assert r.json()["rewards"] == {"xp": 50, "feathers": 5}

    r = await client.post(f"{API}/quests/claim/first_lesson", headers=auth_headers)
    assert r.status_code == 409
    assert r.json()["code"] == "already_claimed"

    r = await client.post(f"{API}/quests/claim/lesson_master", headers=auth_headers)
    assert r.status_code == 400

    r = await client.post(f"{API}/quests/claim/nope", headers=auth_headers)
    assert r.status_code == 404

    r = await client.get(f"{API}/quests/summary", headers=auth_headers)
    assert r.json()["overall"]["total_xp"] == 100


@pytest.mark.asyncio
async def test_user_endpoints(client: AsyncClient, make_user, headers_for, auth_headers: dict):
    other = await make_user(name="Pen Pal")

    r = await client.put(f"{API}/users/profile", json={"bio": "Learning Spanish"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["bio"] == "Learning Spanish"

    r = await client.put(f"{API}/users/settings", json={"theme": "dark"}, headers=auth_headers)
    assert r.json()["settings"] == {"notifications": True, "sound": True, "language": "en", "theme": "dark"}

    r = await client.put(f"{API}/users/settings", json={"theme": "neon"}, headers=auth_headers)
    assert r.status_code == 422

    r = await client.post(f"{API}/users/{other.id}/follow", headers=auth_headers)
    assert r.status_code == 200
    r = await client.post(f"{API}/users/{other.id}/follow", headers=auth_headers)
    assert r.status_code == 409
    assert r.json()["code"] == "duplicate_follow"

    r = await client.get(f"{API}/users/{other.id}", headers=auth_headers)
    assert r.json()["is_following"] is True
    assert r.json()["followers"] == 1

    r = await client.get(f"{API}/users/following", headers=auth_headers)
    assert [u["name"] for u in r.json()["users"]] == ["Pen Pal"]

    r = await client.get(f"{API}/users/search", params={"q": "pen"}, headers=auth_headers)
    assert r.json()["total"] == 1

    r = await client.get(f"{API}/users/stats", headers=auth_headers)
    assert r.json()["following"] == 1
    assert r.json()["rank"] >= 1

    r = await client.get(f"{API}/users/activity", headers=auth_headers)
    assert "user.followed" in {e["event_type"] for e in r.json()}

    r = await client.delete(f"{API}/users/account", headers=headers_for(other))
    assert r.status_code == 200
    r = await client.get(f"{API}/users/{other.id}", headers=auth_headers)
    assert r.status_code == 404
