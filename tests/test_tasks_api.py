"""
HTTP tests for the /api/tasks routes: the auth gate, ownership scoping and
the ``completed`` field contract.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from auth.jwt import TokenService


class TestAuthGate:
    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, client):
        resp = await client.get("/api/tasks")
        assert resp.status_code == 401
        assert resp.json() == {"error": "Unauthorized: Token missing."}

    @pytest.mark.asyncio
    async def test_non_bearer_header_is_401(self, client):
        resp = await client.get("/api/tasks", headers={"Authorization": "Basic abc"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_bad_token_is_403(self, client):
        resp = await client.get("/api/tasks", headers={"Authorization": "Bearer nope.nope"})
        assert resp.status_code == 403
        assert resp.json() == {"error": "Forbidden: Invalid or expired token."}

    @pytest.mark.asyncio
    async def test_expired_token_is_403(self, app, client, register_user):
        user, _ = await register_user()
        issued_long_ago = TokenService(
            app.state.settings.jwt_secret,
            app.state.settings.jwt_expiry_seconds,
            clock=lambda: 0,
        )
        stale = issued_long_ago.issue(user["id"])

        resp = await client.get("/api/tasks", headers={"Authorization": f"Bearer {stale}"})
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_gate_runs_before_body_validation(self, client):
        resp = await client.post("/api/tasks", json={"title": ""})
        assert resp.status_code == 401


class TestTaskCrud:
    @pytest.mark.asyncio
    async def test_example_flow(self, client, register_user):
        alice, alice_headers = await register_user()
        _, bob_headers = await register_user("bob", "b@x.com", "p2")

        resp = await client.post("/api/tasks", json={"title": "buy milk"}, headers=alice_headers)
        assert resp.status_code == 201
        assert resp.json() == {
            "id": 1,
            "title": "buy milk",
            "completed": False,
            "authorId": alice["id"],
        }

        resp = await client.get("/api/tasks", headers=bob_headers)
        assert resp.status_code == 200
        assert resp.json() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"title": ""}, {"title": "   "}])
    async def test_create_requires_title(self, client, register_user, payload):
        _, headers = await register_user()
        resp = await client.post("/api/tasks", json=payload, headers=headers)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Task title is required."}

    @pytest.mark.asyncio
    async def test_client_cannot_choose_owner_or_state(self, client, register_user):
        alice, headers = await register_user()
        bob, _ = await register_user("bob", "b@x.com", "p2")

        resp = await client.post(
            "/api/tasks",
            json={"title": "sneaky", "authorId": bob["id"], "completed": True},
            headers=headers,
        )
        assert resp.status_code == 201
        assert resp.json()["authorId"] == alice["id"]
        assert resp.json()["completed"] is False

    @pytest.mark.asyncio
    async def test_completed_round_trip(self, client, register_user):
        _, headers = await register_user()
        task = (await client.post("/api/tasks", json={"title": "t"}, headers=headers)).json()

        resp = await client.put(f"/api/tasks/{task['id']}", json={"completed": True}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["completed"] is True

        [listed] = (await client.get("/api/tasks", headers=headers)).json()
        assert listed["completed"] is True
        assert listed["title"] == "t"

    @pytest.mark.asyncio
    async def test_update_accepts_is_done(self, client, register_user):
        _, headers = await register_user()
        task = (await client.post("/api/tasks", json={"title": "t"}, headers=headers)).json()

        resp = await client.put(f"/api/tasks/{task['id']}", json={"isDone": True}, headers=headers)
        assert resp.json()["completed"] is True

    @pytest.mark.asyncio
    async def test_update_title(self, client, register_user):
        _, headers = await register_user()
        task = (await client.post("/api/tasks", json={"title": "old"}, headers=headers)).json()

        resp = await client.put(f"/api/tasks/{task['id']}", json={"title": "new"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {**task, "title": "new"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload, message",
        [
            ({}, "Must provide title or completed status for update."),
            ({"title": None, "completed": None}, "Must provide title or completed status for update."),
            ({"title": "  ", "completed": True}, "Task title cannot be empty."),
        ],
    )
    async def test_rejected_updates_do_not_mutate(self, client, register_user, payload, message):
        _, headers = await register_user()
        task = (await client.post("/api/tasks", json={"title": "keep"}, headers=headers)).json()

        resp = await client.put(f"/api/tasks/{task['id']}", json=payload, headers=headers)
        assert resp.status_code == 400
        assert resp.json() == {"error": message}

        [listed] = (await client.get("/api/tasks", headers=headers)).json()
        assert listed == task

    @pytest.mark.asyncio
    async def test_invalid_task_id(self, client, register_user):
        _, headers = await register_user()
        put = await client.put("/api/tasks/abc", json={"title": "x"}, headers=headers)
        delete = await client.delete("/api/tasks/abc", headers=headers)
        assert put.status_code == delete.status_code == 400
        assert put.json() == delete.json() == {"error": "Invalid task ID."}

    @pytest.mark.asyncio
    async def test_list_ordering(self, client, register_user):
        _, headers = await register_user()
        ids = []
        for title in ("a", "b", "c"):
            ids.append((await client.post("/api/tasks", json={"title": title}, headers=headers)).json()["id"])
        await client.put(f"/api/tasks/{ids[0]}", json={"completed": True}, headers=headers)

        titles = [t["title"] for t in (await client.get("/api/tasks", headers=headers)).json()]
        assert titles == ["b", "c", "a"]

    @pytest.mark.asyncio
    async def test_delete(self, client, register_user):
        _, headers = await register_user()
        task = (await client.post("/api/tasks", json={"title": "t"}, headers=headers)).json()

        resp = await client.delete(f"/api/tasks/{task['id']}", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Task deleted successfully."}
        assert (await client.get("/api/tasks", headers=headers)).json() == []


class TestOwnership:
    @pytest.mark.asyncio
    async def test_other_user_gets_404_everywhere(self, client, register_user):
        _, alice_headers = await register_user()
        _, bob_headers = await register_user("bob", "b@x.com", "p2")
        task = (await client.post("/api/tasks", json={"title": "mine"}, headers=alice_headers)).json()

        put = await client.put(f"/api/tasks/{task['id']}", json={"completed": True}, headers=bob_headers)
        delete = await client.delete(f"/api/tasks/{task['id']}", headers=bob_headers)
        missing = await client.delete("/api/tasks/9999", headers=bob_headers)

        assert put.status_code == delete.status_code == missing.status_code == 404
        assert put.json() == delete.json() == missing.json() == {
            "error": "Task not found or unauthorized."
        }
        [listed] = (await client.get("/api/tasks", headers=alice_headers)).json()
        assert listed == task

    @pytest.mark.asyncio
    async def test_concurrent_deletes(self, client, register_user):
        _, headers = await register_user()
        task = (await client.post("/api/tasks", json={"title": "t"}, headers=headers)).json()

        responses = await asyncio.gather(
            client.delete(f"/api/tasks/{task['id']}", headers=headers),
            client.delete(f"/api/tasks/{task['id']}", headers=headers),
        )
        assert sorted(r.status_code for r in responses) == [200, 404]


class TestStatusPage:
    @pytest.mark.asyncio
    async def test_root(self, client):
        resp = await client.get("/")
        assert resp.status_code == 200
        assert "running" in resp.text
        assert "X-Process-Time" in resp.headers


class TestServerErrors:
    @pytest.mark.asyncio
    async def test_store_failure_is_a_generic_500(self, client, register_user):
        _, headers = await register_user()
        with patch(
            "api.routes.task_repo.list_tasks",
            new_callable=AsyncMock,
            side_effect=OperationalError("SELECT", {}, Exception("connection reset")),
        ):
            resp = await client.get("/api/tasks", headers=headers)
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch tasks."}

    @pytest.mark.asyncio
    async def test_corrupt_password_hash_is_not_a_bad_password(self, app, client, register_user):
        from database.models import User

        await register_user()
        async with app.state.db.session_factory() as session:
            await session.execute(update(User).values(password_hash="garbage"))
            await session.commit()

        resp = await client.post("/api/login", json={"email": "a@x.com", "password": "p1"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Server error during login."}
