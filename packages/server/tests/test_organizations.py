"""
Integration tests for Organization endpoints.

Tests cover:
- Org creation (validation, reserved and taken slugs, creator becomes ADMIN)
- Joining by code (normalisation, idempotency, deleted orgs)
- Settings read/update, join code rotation, soft delete
- Cross-org isolation of admin endpoints
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from app.models.organization import Organization
from app.models.organization_member import OrganizationMember
from app.services.organizations import generate_join_code
from beachvb_shared.schemas.organizations import SLUG_PATTERN, OrgJoinRequest

NEW_ORG = {"name": "Sunset Beach VB", "slug": "sunset-beach", "timezone": "America/Los_Angeles"}


# ---------------------------------------------------------------------------
# Unit tests (no DB needed)
# ---------------------------------------------------------------------------

class TestJoinCode:
    def test_format(self):
        for _ in range(50):
            code = generate_join_code()
            assert len(code) == 8
            assert code.isalnum()
            assert code == code.upper()

    def test_join_request_normalises_code(self):
        assert OrgJoinRequest(code="  ab12cd34 ").code == "AB12CD34"
        assert OrgJoinRequest(code="   ").code is None


class TestSlugPattern:
    @pytest.mark.parametrize("slug", ["ab", "sunset-beach", "league-2026", "a" * 50])
    def test_valid(self, slug):
        assert SLUG_PATTERN.match(slug)

    @pytest.mark.parametrize("slug", ["a", "Sunset", "sunset beach", "sunset_beach", "a" * 51, ""])
    def test_invalid(self, slug):
        assert not SLUG_PATTERN.match(slug)


# ---------------------------------------------------------------------------
# POST /api/org/create
# ---------------------------------------------------------------------------

class TestCreateOrg:
    @pytest.mark.asyncio
    async def test_creates_org_and_admin_membership(self, client, factory, headers_for):
        user = await factory.user()
        resp = await client.post("/api/org/create", json=NEW_ORG, headers=headers_for(user))
        assert resp.status_code == 200
        assert resp.json() == {"slug": "sunset-beach"}

        assert await factory.count(Organization) == 1
        assert await factory.count(
            OrganizationMember,
            OrganizationMember.user_id == user.id,
            OrganizationMember.role == "ADMIN",
        ) == 1

    @pytest.mark.asyncio
    async def test_join_code_generated(self, client, factory, headers_for):
        user = await factory.user()
        await client.post("/api/org/create", json=NEW_ORG, headers=headers_for(user))
        resp = await client.get("/api/org/sunset-beach/settings", headers=headers_for(user))
        code = resp.json()["joinCode"]
        assert len(code) == 8 and code.isalnum() and code == code.upper()

    @pytest.mark.asyncio
    async def test_requires_profile(self, client, headers_for):
        resp = await client.post("/api/org/create", json=NEW_ORG, headers=headers_for("auth-new"))
        assert resp.status_code == 403
        assert resp.json() == {"error": "Profile not complete"}

    @pytest.mark.asyncio
    async def test_requires_session(self, client):
        resp = await client.post("/api/org/create", json=NEW_ORG)
        assert resp.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["name", "slug", "timezone"])
    async def test_missing_fields(self, client, factory, headers_for, missing):
        user = await factory.user()
        body = {k: v for k, v in NEW_ORG.items() if k != missing}
        resp = await client.post("/api/org/create", json=body, headers=headers_for(user))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required fields"}

    @pytest.mark.asyncio
    async def test_invalid_slug(self, client, factory, headers_for):
        user = await factory.user()
        resp = await client.post(
            "/api/org/create",
            json={**NEW_ORG, "slug": "Sunset Beach!"},
            headers=headers_for(user),
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid slug format"}

    @pytest.mark.asyncio
    async def test_taken_slug_conflict_leaves_db_unchanged(self, client, factory, headers_for):
        owner = await factory.user(name="Owner")
        existing = await factory.org(slug="sunset-beach", name="Original")
        await factory.member(owner, existing, role="ADMIN")
        other = await factory.user(name="Other")

        resp = await client.post(
            "/api/org/create",
            json={**NEW_ORG, "name": "Impostor"},
            headers=headers_for(other),
        )
        assert resp.status_code == 409
        assert resp.json() == {"error": "That URL is already taken. Please choose another."}

        assert await factory.count(Organization) == 1
        assert await factory.count(OrganizationMember) == 1
        assert await factory.count(OrganizationMember, OrganizationMember.user_id == other.id) == 0
        reloaded = await factory.get(Organization, existing.id)
        assert reloaded.name == "Original"

    @pytest.mark.asyncio
    async def test_slug_of_deleted_org_stays_taken(self, client, factory, headers_for):
        user = await factory.user()
        await factory.org(slug="sunset-beach", deleted_at=datetime.now(timezone.utc))
        resp = await client.post("/api/org/create", json=NEW_ORG, headers=headers_for(user))
        assert resp.status_code == 409

    @pytest.mark.asyncio
    @pytest.mark.parametrize("slug", ["dashboard", "api", "create-org", "join"])
    async def test_reserved_slug(self, client, factory, headers_for, slug):
        user = await factory.user()
        resp = await client.post(
            "/api/org/create",
            json={**NEW_ORG, "slug": slug},
            headers=headers_for(user),
        )
        assert resp.status_code == 409
        assert await factory.count(Organization) == 0


# ---------------------------------------------------------------------------
# POST /api/org/join
# ---------------------------------------------------------------------------

class TestJoinOrg:
    @pytest.mark.asyncio
    async def test_join_as_member(self, client, factory, headers_for):
        org = await factory.org(join_code="SAND2026")
        user = await factory.user()
        resp = await client.post("/api/org/join", json={"code": " sand2026 "}, headers=headers_for(user))
        assert resp.status_code == 200
        assert resp.json() == {"slug": org.slug}
        assert await factory.count(
            OrganizationMember,
            OrganizationMember.user_id == user.id,
            OrganizationMember.role == "MEMBER",
        ) == 1

    @pytest.mark.asyncio
    async def test_join_twice_is_idempotent(self, client, factory, headers_for):
        org = await factory.org(join_code="SAND2026")
        user = await factory.user()
        for _ in range(2):
            resp = await client.post("/api/org/join", json={"code": "SAND2026"}, headers=headers_for(user))
            assert resp.status_code == 200
            assert resp.json() == {"slug": org.slug}
        assert await factory.count(OrganizationMember, OrganizationMember.user_id == user.id) == 1

    @pytest.mark.asyncio
    async def test_concurrent_join_is_idempotent(self, client, factory, headers_for):
        """The membership appears between the existence check and the insert."""
        org = await factory.org(slug="race-league", join_code="RACE1234")
        user = await factory.user()
        await factory.member(user, org, role="MEMBER")

        with patch("app.services.organizations.find_membership", AsyncMock(return_value=None)):
            resp = await client.post("/api/org/join", json={"code": "RACE1234"}, headers=headers_for(user))

        assert resp.status_code == 200
        assert resp.json() == {"slug": "race-league"}
        assert await factory.count(OrganizationMember, OrganizationMember.user_id == user.id) == 1

        # The request's transaction stayed usable after the failed insert
        listed = await client.get("/api/user/orgs", headers=headers_for(user))
        assert [o["slug"] for o in listed.json()["data"]] == ["race-league"]

    @pytest.mark.asyncio
    async def test_existing_admin_keeps_role(self, client, factory, headers_for):
        org = await factory.org(join_code="SAND2026")
        user = await factory.user()
        await factory.member(user, org, role="ADMIN")
        resp = await client.post("/api/org/join", json={"code": "SAND2026"}, headers=headers_for(user))
        assert resp.status_code == 200
        assert await factory.count(OrganizationMember, OrganizationMember.role == "ADMIN") == 1

    @pytest.mark.asyncio
    async def test_code_required(self, client, factory, headers_for):
        user = await factory.user()
        for body in ({}, {"code": ""}, {"code": "   "}):
            resp = await client.post("/api/org/join", json=body, headers=headers_for(user))
            assert resp.status_code == 400
            assert resp.json() == {"error": "Join code is required"}

    @pytest.mark.asyncio
    async def test_unknown_code(self, client, factory, headers_for):
        user = await factory.user()
        resp = await client.post("/api/org/join", json={"code": "NOPE0000"}, headers=headers_for(user))
        assert resp.status_code == 404
        assert resp.json() == {"error": "Invalid join code. Please check with your admin."}

    @pytest.mark.asyncio
    async def test_deleted_org_code(self, client, factory, headers_for):
        await factory.org(join_code="SAND2026", deleted_at=datetime.now(timezone.utc))
        user = await factory.user()
        resp = await client.post("/api/org/join", json={"code": "SAND2026"}, headers=headers_for(user))
        assert resp.status_code == 404
        assert await factory.count(OrganizationMember) == 0


# ---------------------------------------------------------------------------
# Org-scoped admin endpoints
# ---------------------------------------------------------------------------

@pytest.fixture
async def org_with_roles(factory):
    """One org with an admin, a scorer and a member; plus an admin of another org."""
    org = await factory.org(slug="sunset-beach", join_code="SAND2026")
    other_org = await factory.org(slug="north-shore", join_code="NORTH001")
    admin = await factory.user(name="Alex Admin")
    scorer = await factory.user(name="Sam Scorer")
    member = await factory.user(name="Kai Member")
    outsider = await factory.user(name="Other Admin")
    await factory.member(admin, org, role="ADMIN")
    await factory.member(scorer, org, role="SCORER")
    await factory.member(member, org, role="MEMBER")
    await factory.member(outsider, other_org, role="ADMIN")
    return {
        "org": org,
        "other_org": other_org,
        "admin": admin,
        "scorer": scorer,
        "member": member,
        "outsider": outsider,
    }


class TestSettings:
    @pytest.mark.asyncio
    async def test_admin_reads_settings(self, client, org_with_roles, headers_for):
        resp = await client.get("/api/org/sunset-beach/settings", headers=headers_for(org_with_roles["admin"]))
        assert resp.status_code == 200
        data = resp.json()
        assert data["slug"] == "sunset-beach"
        assert data["joinCode"] == "SAND2026"
        assert data["timezone"] == "America/Los_Angeles"
        assert data["paypalEmail"] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("who", ["scorer", "member", "outsider"])
    async def test_non_admin_forbidden(self, client, org_with_roles, headers_for, who):
        resp = await client.get("/api/org/sunset-beach/settings", headers=headers_for(org_with_roles[who]))
        assert resp.status_code == 403
        assert resp.json() == {"error": "Forbidden"}

    @pytest.mark.asyncio
    async def test_unknown_org(self, client, org_with_roles, headers_for):
        resp = await client.get("/api/org/no-such-org/settings", headers=headers_for(org_with_roles["admin"]))
        assert resp.status_code == 404
        assert resp.json() == {"error": "Organization not found"}

    @pytest.mark.asyncio
    async def test_update_settings(self, client, factory, org_with_roles, headers_for):
        resp = await client.patch(
            "/api/org/sunset-beach/settings",
            json={
                "name": "Sunset Beach Volleyball",
                "timezone": "America/New_York",
                "paypalEmail": "pay@sunset.example.com",
                "website": "https://sunset.example.com",
                "instagramUrl": "",
            },
            headers=headers_for(org_with_roles["admin"]),
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "Sunset Beach Volleyball"
        assert data["paypalEmail"] == "pay@sunset.example.com"
        assert data["instagramUrl"] is None
        assert data["facebookUrl"] is None

        org = await factory.get(Organization, org_with_roles["org"].id)
        assert org.timezone == "America/New_York"
        assert org.website == "https://sunset.example.com"

    @pytest.mark.asyncio
    async def test_absent_optional_fields_are_cleared(self, client, factory, headers_for):
        admin = await factory.user()
        org = await factory.org(website="https://old.example.com", facebook_url="https://fb.example.com")
        await factory.member(admin, org, role="ADMIN")
        resp = await client.patch(
            f"/api/org/{org.slug}/settings",
            json={"name": "Renamed", "timezone": "UTC"},
            headers=headers_for(admin),
        )
        assert resp.status_code == 200
        reloaded = await factory.get(Organization, org.id)
        assert reloaded.website is None
        assert reloaded.facebook_url is None

    @pytest.mark.asyncio
    async def test_name_and_timezone_required(self, client, org_with_roles, headers_for):
        resp = await client.patch(
            "/api/org/sunset-beach/settings",
            json={"name": "  ", "timezone": "UTC"},
            headers=headers_for(org_with_roles["admin"]),
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Name and timezone are required"}

    @pytest.mark.asyncio
    async def test_invalid_paypal_email(self, client, org_with_roles, headers_for):
        resp = await client.patch(
            "/api/org/sunset-beach/settings",
            json={"name": "Sunset", "timezone": "UTC", "paypalEmail": "not-an-email"},
            headers=headers_for(org_with_roles["admin"]),
        )
        assert resp.status_code == 400


class TestJoinCodeRotation:
    @pytest.mark.asyncio
    async def test_regenerate(self, client, factory, org_with_roles, headers_for):
        resp = await client.post("/api/org/sunset-beach/join-code", headers=headers_for(org_with_roles["admin"]))
        assert resp.status_code == 200
        new_code = resp.json()["joinCode"]
        assert new_code != "SAND2026"
        assert len(new_code) == 8

        newcomer = await factory.user()
        old = await client.post("/api/org/join", json={"code": "SAND2026"}, headers=headers_for(newcomer))
        assert old.status_code == 404
        new = await client.post("/api/org/join", json={"code": new_code}, headers=headers_for(newcomer))
        assert new.status_code == 200

    @pytest.mark.asyncio
    async def test_scorer_cannot_regenerate(self, client, org_with_roles, headers_for):
        resp = await client.post("/api/org/sunset-beach/join-code", headers=headers_for(org_with_roles["scorer"]))
        assert resp.status_code == 403


class TestDeleteOrg:
    @pytest.mark.asyncio
    async def test_soft_delete(self, client, factory, org_with_roles, headers_for):
        admin = org_with_roles["admin"]
        resp = await client.delete("/api/org/sunset-beach", headers=headers_for(admin))
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}

        org = await factory.get(Organization, org_with_roles["org"].id)
        assert org.deleted_at is not None

        listed = await client.get("/api/user/orgs", headers=headers_for(admin))
        assert listed.json()["data"] == []
        again = await client.get("/api/org/sunset-beach/settings", headers=headers_for(admin))
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_member_cannot_delete(self, client, factory, org_with_roles, headers_for):
        resp = await client.delete("/api/org/sunset-beach", headers=headers_for(org_with_roles["member"]))
        assert resp.status_code == 403
        org = await factory.get(Organization, org_with_roles["org"].id)
        assert org.deleted_at is None

    @pytest.mark.asyncio
    async def test_admin_of_other_org_cannot_delete(self, client, factory, org_with_roles, headers_for):
        resp = await client.delete("/api/org/sunset-beach", headers=headers_for(org_with_roles["outsider"]))
        assert resp.status_code == 403
