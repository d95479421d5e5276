"""
HTTP surface tests: routing, authentication, and the mapping from access
failures to status codes and the error envelope.
"""

from __future__ import annotations

import uuid

import pytest
import structlog
from httpx import ASGITransport, AsyncClient

from taskgrid.api.deps import get_session_factory
from taskgrid.core.database import get_session
from taskgrid.main import app
from taskgrid_shared.schemas.common import EntityKind, Role


# ---------------------------------------------------------------------------
# Fixtures: the app wired to the per-test SQLite database
# ---------------------------------------------------------------------------


@pytest.fixture
async def client(session_factory):
    async def _session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def world(session, tree):
    """Committed org tree: owner, org member, outsider, and two tasks."""
    owner = await tree.user("owner")
    member = await tree.user("member")
    outsider = await tree.user("outsider")
    org = await tree.organization(owner)
    await tree.member(EntityKind.ORGANIZATION, org, owner, Role.OWNER)
    await tree.member(EntityKind.ORGANIZATION, org, member, Role.MEMBER)
    ws = await tree.workspace(org)
    project = await tree.project(ws, owner)
    mine = await tree.task(project, created_by=owner, assignee=member, title="mine")
    await tree.task(project, created_by=owner, title="not mine")
    await session.commit()
    return {
        "owner": owner,
        "member": member,
        "outsider": outsider,
        "org": org,
        "ws": ws,
        "project": project,
        "mine": mine,
    }


def auth(user) -> dict:
    return {"Authorization": f"Bearer {user.id}"}


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------


class TestSystem:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    async def test_api_root(self, client):
        response = await client.get("/api/v1/")
        assert response.status_code == 200
        assert "/access/{kind}/{entityId}" in response.json()["endpoints"]

    async def test_lifespan_starts_and_stops(self, client, reset_logging):
        async with app.router.lifespan_context(app):
            response = await client.get("/health")
            assert response.status_code == 200
            assert structlog.is_configured()


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class TestAuthentication:
    async def test_missing_token(self, client):
        response = await client.get("/api/v1/orgs/")
        assert response.status_code == 401

    async def test_malformed_token(self, client):
        response = await client.get("/api/v1/orgs/", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    async def test_unknown_user(self, client):
        response = await client.get("/api/v1/orgs/", headers={"Authorization": f"Bearer {uuid.uuid4()}"})
        assert response.status_code == 401


# ---------------------------------------------------------------------------
# Access probing
# ---------------------------------------------------------------------------


class TestAccessEndpoint:
    async def test_owner_probe(self, client, world):
        response = await client.get(
            f"/api/v1/access/workspace/{world['ws'].id}", headers=auth(world["owner"])
        )
        assert response.status_code == 200
        body = response.json()
        assert body["is_elevated"] is True
        assert body["role"] == "owner"
        assert body["source"] == "ownership"

    async def test_task_identity_probe(self, client, world, tree, session):
        stranger = await tree.user("stranger")
        task = await tree.task(world["project"], created_by=world["owner"], reporter=stranger)
        await session.commit()

        response = await client.get(f"/api/v1/access/task/{task.id}", headers=auth(stranger))
        assert response.status_code == 200
        body = response.json()
        assert body["role"] is None
        assert body["is_elevated"] is False
        assert body["via_entity_grant"] is True

    async def test_missing_entity_is_404(self, client, world):
        response = await client.get(
            f"/api/v1/access/project/{uuid.uuid4()}", headers=auth(world["outsider"])
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_outsider_is_403(self, client, world):
        response = await client.get(
            f"/api/v1/access/project/{world['project'].id}", headers=auth(world["outsider"])
        )
        assert response.status_code == 403
        assert response.json() == {
            "error": {"code": "FORBIDDEN", "message": "Not a member of this project", "status": 403}
        }

    async def test_invalid_kind_is_400(self, client, world):
        response = await client.get(
            f"/api/v1/access/galaxy/{uuid.uuid4()}", headers=auth(world["owner"])
        )
        assert response.status_code == 400
        assert "Invalid scope" in response.json()["detail"]

    async def test_bad_organization_hint_is_ignored(self, client, world):
        response = await client.get(
            f"/api/v1/access/workspace/{world['ws'].id}",
            headers={**auth(world["owner"]), "X-Organization-Id": str(uuid.uuid4())},
        )
        assert response.status_code == 200
        assert response.json()["role"] == "owner"


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


class TestListingEndpoints:
    async def test_member_sees_only_their_tasks(self, client, world):
        response = await client.get(
            f"/api/v1/orgs/{world['org'].id}/tasks", headers=auth(world["member"])
        )
        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [str(world["mine"].id)]

    async def test_owner_sees_all_project_tasks(self, client, world):
        response = await client.get(
            f"/api/v1/projects/{world['project'].id}/tasks", headers=auth(world["owner"])
        )
        assert response.status_code == 200
        assert len(response.json()) == 2

    async def test_outsider_cannot_list_workspaces(self, client, world):
        response = await client.get(
            f"/api/v1/orgs/{world['org'].id}/workspaces", headers=auth(world["outsider"])
        )
        assert response.status_code == 403

    async def test_orgs_listing(self, client, world):
        response = await client.get("/api/v1/orgs/", headers=auth(world["member"]))
        assert [o["id"] for o in response.json()] == [str(world["org"].id)]

        response = await client.get("/api/v1/orgs/", headers=auth(world["outsider"]))
        assert response.json() == []


# ---------------------------------------------------------------------------
# Membership edits
# ---------------------------------------------------------------------------


class TestMemberEndpoints:
    async def test_owner_demotion_is_400(self, client, world):
        org, owner = world["org"], world["owner"]
        response = await client.patch(
            f"/api/v1/members/organization/{org.id}/{owner.id}",
            json={"role": "manager"},
            headers=auth(owner),
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "OWNER_DEMOTION"

    async def test_add_then_duplicate(self, client, world):
        org, owner, outsider = world["org"], world["owner"], world["outsider"]
        path = f"/api/v1/members/organization/{org.id}"

        created = await client.post(path, json={"user_id": str(outsider.id), "role": "viewer"}, headers=auth(owner))
        assert created.status_code == 201
        assert created.json()["role"] == "viewer"

        again = await client.post(path, json={"user_id": str(outsider.id)}, headers=auth(owner))
        assert again.status_code == 409

    async def test_member_cannot_edit(self, client, world):
        org = world["org"]
        response = await client.delete(
            f"/api/v1/members/organization/{org.id}/{world['owner'].id}",
            headers=auth(world["member"]),
        )
        assert response.status_code == 403

    async def test_self_removal(self, client, world):
        org, member = world["org"], world["member"]
        response = await client.delete(
            f"/api/v1/members/organization/{org.id}/{member.id}", headers=auth(member)
        )
        assert response.status_code == 204

        probe = await client.get(f"/api/v1/access/organization/{org.id}", headers=auth(member))
        assert probe.status_code == 403

    async def test_tasks_have_no_membership(self, client, world):
        response = await client.post(
            f"/api/v1/members/task/{world['mine'].id}",
            json={"user_id": str(world["member"].id)},
            headers=auth(world["owner"]),
        )
        assert response.status_code == 400


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


class TestSetupEndpoints:
    async def test_setup_flow(self, client):
        status = await client.get("/api/v1/setup/status")
        assert status.json()["can_setup"] is True

        payload = {
            "email": "admin@example.com",
            "password": "long enough password",
            "display_name": "Admin",
        }
        created = await client.post("/api/v1/setup/admin", json=payload)
        assert created.status_code == 201
        user_id = created.json()["user_id"]

        again = await client.post("/api/v1/setup/admin", json=payload)
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "SETUP_COMPLETED"

        orgs = await client.get("/api/v1/orgs/", headers={"Authorization": f"Bearer {user_id}"})
        assert [o["slug"] for o in orgs.json()] == ["default"]

    async def test_short_password_rejected(self, client):
        response = await client.post(
            "/api/v1/setup/admin",
            json={"email": "admin@example.com", "password": "short", "display_name": "Admin"},
        )
        assert response.status_code == 422
