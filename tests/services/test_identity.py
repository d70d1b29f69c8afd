"""Identity & Invitations — token resolution and best-effort invitation delivery."""

from datetime import datetime, timezone
from uuid import uuid4

import httpx
import pytest

from coachtrack.core.domain_types import Role
from coachtrack.core.errors import UnauthenticatedError
from coachtrack.infrastructure.sql_repositories import SqlProfileRepository
from coachtrack.infrastructure.storage_gateway import HttpAuthGateway
from coachtrack.services.identity import IdentityResolver
from coachtrack.services.invitations import send_invitation


@pytest.fixture
def resolver(auth, test_db):
    return IdentityResolver(auth, SqlProfileRepository(test_db))


# ─── IdentityResolver ────────────────────────────────────────────

async def test_role_comes_from_stored_profile(resolver, people):
    principal = await resolver.resolve("coach-token")
    assert principal.id == people.coach.id
    assert principal.role == Role.COACH


@pytest.mark.parametrize("token", [None, "", "unknown-token"])
async def test_missing_or_unknown_token(resolver, people, token):
    with pytest.raises(UnauthenticatedError):
        await resolver.resolve(token)


async def test_token_without_profile(resolver, auth):
    auth.tokens["orphan"] = uuid4()
    with pytest.raises(UnauthenticatedError):
        await resolver.resolve("orphan")


async def test_soft_deleted_profile_cannot_authenticate(resolver, people, test_db):
    await SqlProfileRepository(test_db).soft_delete(
        people.client.id, datetime(2025, 3, 10, tzinfo=timezone.utc),
    )
    with pytest.raises(UnauthenticatedError):
        await resolver.resolve("client-token")


async def test_client_cannot_claim_admin_through_user_metadata(people, test_db):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={
            "id": str(people.client.id),
            "user_metadata": {"profile_id": str(people.admin.id)},
        })

    gateway = HttpAuthGateway(
        "http://auth.test", "service-key", transport=httpx.MockTransport(handler),
    )
    principal = await IdentityResolver(gateway, SqlProfileRepository(test_db)).resolve(
        "client-token",
    )

    assert principal.id == people.client.id
    assert principal.role == Role.CLIENT


# ─── send_invitation ─────────────────────────────────────────────

async def test_invitation_delivered(inviter):
    profile_id = uuid4()
    assert await send_invitation(inviter, profile_id=profile_id, email="a@b.co", phone=None)
    assert inviter.sent == [{"profile_id": profile_id, "email": "a@b.co", "phone": None}]


async def test_invitation_without_channel_skipped(inviter):
    assert not await send_invitation(inviter, profile_id=uuid4(), email=None, phone=None)
    assert inviter.sent == []


async def test_invitation_failure_reported_not_raised(inviter):
    inviter.fail = True
    assert not await send_invitation(inviter, profile_id=uuid4(), email="a@b.co", phone=None)
