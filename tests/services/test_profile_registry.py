"""Profile Registry — registration, uniqueness, updates, soft-delete and rosters.

Tests cover:
    - Role gates on coach and client creation
    - New clients are assigned to their creating coach
    - Email and phone unique among live profiles only
    - Role-specific updates and delegated coach access
    - Roster ordering, pagination and the missing-report filter
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from coachtrack.core.domain_types import Role
from coachtrack.core.errors import (
    ConflictError, ForbiddenError, InputValidationError, ResourceNotFoundError,
)
from coachtrack.core.records import ClientExtension, CoachExtension, Measurements

MONDAY_8AM = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)


# ─── Registration ────────────────────────────────────────────────

async def test_admin_creates_coach(registry, people):
    coach = await registry.create_coach(
        people.admin, "  Nina Coach ", "nina@example.com", MONDAY_8AM, bio="Mobility",
    )
    assert coach.role == Role.COACH
    assert coach.full_name == "Nina Coach"
    assert coach.extension == CoachExtension(bio="Mobility")


async def test_only_admins_create_coaches(registry, people):
    with pytest.raises(ForbiddenError):
        await registry.create_coach(people.coach, "Nina", "nina@example.com", MONDAY_8AM)


async def test_coach_creates_assigned_client(registry, directory, people):
    client = await registry.create_client(
        people.coach, "Bea Client", "+5511900000009", MONDAY_8AM,
        date_of_birth=date(1992, 4, 2), gender="female",
    )
    assert client.role == Role.CLIENT
    assert client.extension == ClientExtension(date(1992, 4, 2), "female")
    assert await directory.is_active(people.coach.id, client.id)


async def test_only_coaches_create_clients(registry, people):
    with pytest.raises(ForbiddenError):
        await registry.create_client(people.admin, "Bea", "+5511900000009", MONDAY_8AM)
    with pytest.raises(ForbiddenError):
        await registry.create_client(people.client, "Bea", "+5511900000009", MONDAY_8AM)


async def test_client_requires_phone(registry, people):
    with pytest.raises(InputValidationError):
        await registry.create_client(people.coach, "Bea", "", MONDAY_8AM)


async def test_duplicate_contact_conflicts(registry, people):
    with pytest.raises(ConflictError) as exc_info:
        await registry.create_coach(people.admin, "Dup", "coach@example.com", MONDAY_8AM)
    assert exc_info.value.code == "PROFILE_CONFLICT"
    with pytest.raises(ConflictError):
        await registry.create_client(people.coach, "Dup", "+5511900000001", MONDAY_8AM)


async def test_soft_deleted_profile_releases_email(registry, people):
    await registry.soft_delete_profile(people.admin, people.other_coach.id, MONDAY_8AM)
    coach = await registry.create_coach(people.admin, "New Olga", "olga@example.com", MONDAY_8AM)
    assert coach.email == "olga@example.com"


# ─── Read / update / delete ──────────────────────────────────────

async def test_client_updates_own_profile(registry, people):
    updated = await registry.update_profile(
        people.client, people.client.id, {"gender": "female", "full_name": "Cleo C."},
    )
    assert updated.full_name == "Cleo C."
    assert updated.extension.gender == "female"


async def test_client_cannot_set_coach_fields(registry, people):
    with pytest.raises(InputValidationError):
        await registry.update_profile(people.client, people.client.id, {"bio": "hi"})


async def test_update_to_taken_email_conflicts(registry, people):
    with pytest.raises(ConflictError):
        await registry.update_profile(
            people.coach, people.coach.id, {"email": "olga@example.com"},
        )


async def test_assigned_coach_updates_client(registry, people):
    updated = await registry.update_profile(
        people.coach, people.client.id, {"phone": "+5511911111111"},
    )
    assert updated.phone == "+5511911111111"


async def test_unassigned_coach_cannot_see_client(registry, people):
    with pytest.raises(ResourceNotFoundError):
        await registry.get_profile(people.other_coach, people.client.id)


async def test_client_cannot_delete_self(registry, people):
    with pytest.raises(ForbiddenError):
        await registry.soft_delete_profile(people.client, people.client.id, MONDAY_8AM)


async def test_coach_soft_deletes_assigned_client(registry, people):
    await registry.soft_delete_profile(people.coach, people.client.id, MONDAY_8AM)
    with pytest.raises(ResourceNotFoundError):
        await registry.get_profile(people.admin, people.client.id)


# ─── Roster ──────────────────────────────────────────────────────

async def test_roster_newest_assignment_first(registry, people):
    newer = await registry.create_client(
        people.coach, "Newer Client", "+5511900000010", MONDAY_8AM + timedelta(hours=1),
    )
    page = await registry.list_clients(people.coach, people.coach.id, MONDAY_8AM)
    assert [p.id for p in page.items] == [newer.id, people.client.id]

    first = await registry.list_clients(people.coach, people.coach.id, MONDAY_8AM, page_size=1)
    assert first.total == 2
    assert first.total_pages == 2


async def test_roster_missing_report_filter(registry, lifecycle, people):
    await lifecycle.submit(
        people.client, people.client.id, Measurements(weight=70.0), MONDAY_8AM,
    )
    idle = await registry.create_client(
        people.coach, "Idle Client", "+5511900000011", MONDAY_8AM,
    )
    page = await registry.list_clients(
        people.coach, people.coach.id, MONDAY_8AM + timedelta(days=1),
        missing_report_for_week=True,
    )
    assert [p.id for p in page.items] == [idle.id]

    next_week = await registry.list_clients(
        people.coach, people.coach.id, MONDAY_8AM + timedelta(weeks=1),
        missing_report_for_week=True,
    )
    assert next_week.total == 2


async def test_roster_hidden_from_other_coach(registry, people):
    with pytest.raises(ResourceNotFoundError):
        await registry.list_clients(people.other_coach, people.coach.id, MONDAY_8AM)
