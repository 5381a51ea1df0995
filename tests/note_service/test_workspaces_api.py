"""Integration tests for workspace endpoints."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


@pytest.fixture
async def people(client: AsyncClient, auth) -> list[str]:
    ids = ["u-owner", "u-alice", "u-bob"]
    for user_id in ids:
        resp = await client.post("/api/users/create", json={"name": user_id[2:].title()}, headers=auth(user_id))
        assert resp.status_code == 201
    return ids


async def test_workspace_full_crud(client: AsyncClient, auth, people: list[str]) -> None:
    """Exercise create -> get -> update -> list -> delete in one test."""
    owner = auth("u-owner")

    # Create
    resp = await client.post("/api/workspaces/create", json={"name": "Team", "description": "Shared"}, headers=owner)
    assert resp.status_code == 201
    ws = resp.json()
    ws_id = ws["workspace_id"]
    assert ws["owner_id"] == "u-owner"
    assert ws["members"] == ["u-owner"]
    assert ws["is_personal"] is False

    # Get
    resp = await client.get(f"/api/workspaces/{ws_id}/get", headers=owner)
    assert resp.status_code == 200
    assert resp.json()["description"] == "Shared"

    # Update (partial -- only name)
    resp = await client.post(f"/api/workspaces/{ws_id}/update", json={"name": "Renamed"}, headers=owner)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Renamed"
    assert resp.json()["description"] == "Shared"  # unchanged

    # List (personal + shared)
    resp = await client.get("/api/workspaces/list", headers=owner)
    assert resp.status_code == 200
    assert {w["workspace_id"] for w in resp.json()} >= {ws_id}
    assert len(resp.json()) == 2

    # Delete
    resp = await client.post(f"/api/workspaces/{ws_id}/delete", headers=owner)
    assert resp.status_code == 204

    resp = await client.get(f"/api/workspaces/{ws_id}/get", headers=owner)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Workspace not found"


async def test_membership_flow(client: AsyncClient, auth, people: list[str], notifier) -> None:
    owner = auth("u-owner")
    ws_id = (await client.post("/api/workspaces/create", json={"name": "Team"}, headers=owner)).json()["workspace_id"]

    resp = await client.get(f"/api/workspaces/{ws_id}/get", headers=auth("u-alice"))
    assert resp.status_code == 403
    assert resp.json()["code"] == "access_denied"

    resp = await client.post(f"/api/workspaces/{ws_id}/invite", json={"user_id": "u-alice"}, headers=owner)
    assert resp.status_code == 200
    assert resp.json()["members"] == ["u-alice", "u-owner"]
    assert notifier.sent[0][0] == "u-alice"

    resp = await client.get(f"/api/workspaces/{ws_id}/membership/u-alice", headers=owner)
    assert resp.json() == {"workspace_id": ws_id, "user_id": "u-alice", "status": "MEMBER"}

    resp = await client.post(f"/api/workspaces/{ws_id}/invite", json={"user_id": "u-alice"}, headers=owner)
    assert resp.status_code == 400
    assert resp.json()["code"] == "already_member"

    resp = await client.post(f"/api/workspaces/{ws_id}/invite", json={"user_id": "ghost"}, headers=owner)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "User to add not found"

    resp = await client.post(f"/api/workspaces/{ws_id}/ban", json={"user_id": "u-alice"}, headers=auth("u-alice"))
    assert resp.status_code == 403

    resp = await client.post(f"/api/workspaces/{ws_id}/ban", json={"user_id": "u-alice"}, headers=owner)
    assert resp.status_code == 200
    assert resp.json()["members"] == ["u-owner"]
    assert resp.json()["banned_members"] == ["u-alice"]

    # Idempotent.
    resp = await client.post(f"/api/workspaces/{ws_id}/ban", json={"user_id": "u-alice"}, headers=owner)
    assert resp.status_code == 200
    assert resp.json()["banned_members"] == ["u-alice"]

    resp = await client.post(f"/api/workspaces/{ws_id}/invite", json={"user_id": "u-alice"}, headers=owner)
    assert resp.status_code == 403
    assert resp.json()["code"] == "banned"

    resp = await client.get(f"/api/workspaces/{ws_id}/membership/u-alice", headers=owner)
    assert resp.json()["status"] == "BANNED"

    resp = await client.post(f"/api/workspaces/{ws_id}/ban", json={"user_id": "u-owner"}, headers=owner)
    assert resp.status_code == 400
    assert resp.json()["code"] == "cannot_ban_owner"


async def test_leave(client: AsyncClient, auth, people: list[str]) -> None:
    owner = auth("u-owner")
    ws_id = (await client.post("/api/workspaces/create", json={"name": "Team"}, headers=owner)).json()["workspace_id"]
    await client.post(f"/api/workspaces/{ws_id}/invite", json={"user_id": "u-bob"}, headers=owner)

    resp = await client.post(f"/api/workspaces/{ws_id}/leave", headers=owner)
    assert resp.status_code == 403
    assert resp.json()["code"] == "owner_cannot_leave"

    resp = await client.post(f"/api/workspaces/{ws_id}/leave", headers=auth("u-bob"))
    assert resp.status_code == 200
    assert resp.json()["members"] == ["u-owner"]

    resp = await client.post(f"/api/workspaces/{ws_id}/leave", headers=auth("u-bob"))
    assert resp.status_code == 400
    assert resp.json()["code"] == "not_a_member"


async def test_personal_workspace_rejects_mutation(client: AsyncClient, auth, people: list[str]) -> None:
    owner = auth("u-owner")
    personal_id = (await client.get("/api/users/me/get", headers=owner)).json()["personal_workspace_id"]

    resp = await client.post(f"/api/workspaces/{personal_id}/invite", json={"user_id": "u-bob"}, headers=owner)
    assert resp.status_code == 403
    assert resp.json()["code"] == "personal_workspace"

    resp = await client.post(f"/api/workspaces/{personal_id}/delete", headers=owner)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Cannot delete your personal workspace"


async def test_members_tags_and_poll(client: AsyncClient, auth, people: list[str]) -> None:
    owner = auth("u-owner")
    ws_id = (await client.post("/api/workspaces/create", json={"name": "Team"}, headers=owner)).json()["workspace_id"]
    await client.post(f"/api/workspaces/{ws_id}/invite", json={"user_id": "u-bob"}, headers=owner)

    resp = await client.get(f"/api/workspaces/{ws_id}/members", headers=auth("u-bob"))
    assert resp.status_code == 200
    assert sorted(u["user_id"] for u in resp.json()) == ["u-bob", "u-owner"]

    resp = await client.get(f"/api/workspaces/{ws_id}/poll", headers=owner)
    assert resp.json() == {"has_new_messages": False, "latest_activity_at": None}

    await client.post("/api/notes/create", json={"workspace_id": ws_id, "tags": ["b", "a"]}, headers=owner)
    await client.post("/api/notes/create", json={"workspace_id": ws_id, "kind": "CHAT"}, headers=auth("u-bob"))

    resp = await client.get(f"/api/workspaces/{ws_id}/tags", headers=owner)
    assert resp.json() == {"tags": ["a", "b"]}

    resp = await client.get(f"/api/workspaces/{ws_id}/poll", headers=owner)
    poll = resp.json()
    assert poll["has_new_messages"] is True

    resp = await client.get(f"/api/workspaces/{ws_id}/poll", params={"since": poll["latest_activity_at"]}, headers=owner)
    assert resp.json()["has_new_messages"] is False
