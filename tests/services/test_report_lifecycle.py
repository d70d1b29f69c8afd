"""Report Lifecycle — submission, edit window, soft-delete and listing against SQLite.

Tests cover:
    - Weekly quota and sequence numbering across a week boundary
    - Soft-deleted reports free their slot
    - Edit window rules for owners, and admin override
    - Existence hiding: strangers see NotFound, assigned coaches see Forbidden on writes
    - Partial updates and list ordering/pagination
    - A lost unique-key race surfaces as ConflictError
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from coachtrack.core.errors import (
    ConflictError, EditWindowClosedError, ForbiddenError, InputValidationError,
    ResourceNotFoundError, WeeklyQuotaExceededError,
)
from coachtrack.core.records import Measurements, Report
from coachtrack.infrastructure.sql_repositories import SqlReportRepository

UTC = timezone.utc
MONDAY_8AM = datetime(2025, 3, 10, 8, 0, tzinfo=UTC)


async def _submit(lifecycle, principal, client_id, when, **values):
    return await lifecycle.submit(principal, client_id, Measurements(**values), when)


# ─── Quota & sequence ────────────────────────────────────────────

async def test_two_reports_per_week_then_quota(lifecycle, people):
    first = await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM, weight=70.0)
    second = await _submit(
        lifecycle, people.client, people.client.id, MONDAY_8AM + timedelta(hours=1), weight=69.8,
    )
    assert (first.year, first.week_number, first.sequence) == (2025, 11, 0)
    assert second.sequence == 1

    with pytest.raises(WeeklyQuotaExceededError):
        await _submit(
            lifecycle, people.client, people.client.id,
            datetime(2025, 3, 11, 8, 0, tzinfo=UTC), weight=69.5,
        )


async def test_next_week_starts_at_sequence_zero(lifecycle, people):
    await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM)
    await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM + timedelta(hours=1))
    following = await _submit(
        lifecycle, people.client, people.client.id, datetime(2025, 3, 17, 0, 0, tzinfo=UTC),
    )
    assert (following.week_number, following.sequence) == (12, 0)


async def test_soft_delete_frees_slot(lifecycle, people):
    first = await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM)
    await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM + timedelta(minutes=10))

    await lifecycle.soft_delete(first.id, people.client, MONDAY_8AM + timedelta(minutes=20))
    replacement = await _submit(
        lifecycle, people.client, people.client.id, MONDAY_8AM + timedelta(minutes=30),
    )
    assert replacement.sequence == 0

    with pytest.raises(ResourceNotFoundError):
        await lifecycle.get(first.id, people.client)


async def test_lost_race_for_week_slot_is_conflict(lifecycle, people, test_db):
    first = await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM)
    await test_db.commit()

    duplicate = Report(
        id=uuid4(), client_id=people.client.id, created_at=MONDAY_8AM,
        year=first.year, week_number=first.week_number, sequence=first.sequence,
    )
    with pytest.raises(ConflictError) as exc_info:
        await SqlReportRepository(test_db).create(duplicate)
    assert exc_info.value.code == "REPORT_SLOT_TAKEN"


async def test_invalid_values_rejected(lifecycle, people):
    with pytest.raises(InputValidationError):
        await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM, weight=-1.0)


async def test_admin_cannot_submit_for_non_client(lifecycle, people):
    with pytest.raises(ResourceNotFoundError):
        await _submit(lifecycle, people.admin, people.coach.id, MONDAY_8AM, weight=80.0)


async def test_admin_can_submit_for_client(lifecycle, people):
    report = await _submit(lifecycle, people.admin, people.client.id, MONDAY_8AM, weight=80.0)
    assert report.client_id == people.client.id


# ─── Access ──────────────────────────────────────────────────────

async def test_coach_cannot_submit_for_assigned_client(lifecycle, people):
    with pytest.raises(ForbiddenError):
        await _submit(lifecycle, people.coach, people.client.id, MONDAY_8AM, weight=70.0)


async def test_stranger_sees_not_found(lifecycle, people):
    report = await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM, weight=70.0)
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.get(report.id, people.other_coach)
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.get(report.id, people.other_client)


async def test_assigned_coach_reads_but_cannot_edit(lifecycle, people):
    report = await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM, weight=70.0)
    fetched = await lifecycle.get(report.id, people.coach)
    assert fetched.weight == 70.0

    with pytest.raises(ForbiddenError):
        await lifecycle.edit(
            report.id, {"weight": 71.0}, people.coach, MONDAY_8AM + timedelta(minutes=5),
        )


# ─── Edit ────────────────────────────────────────────────────────

async def test_owner_edits_inside_window(lifecycle, people):
    report = await _submit(
        lifecycle, people.client, people.client.id, MONDAY_8AM, weight=70.0, note="tired",
    )
    edited = await lifecycle.edit(
        report.id, {"weight": 69.5}, people.client, MONDAY_8AM + timedelta(minutes=59),
    )
    assert edited.weight == 69.5
    assert edited.note == "tired"


async def test_owner_edit_at_one_hour_rejected(lifecycle, people):
    report = await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM, weight=70.0)
    with pytest.raises(EditWindowClosedError):
        await lifecycle.edit(
            report.id, {"weight": 69.5}, people.client, MONDAY_8AM + timedelta(hours=1),
        )


async def test_first_report_locked_after_second_submitted(lifecycle, people):
    first = await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM)
    second = await _submit(
        lifecycle, people.client, people.client.id, MONDAY_8AM + timedelta(minutes=10),
    )
    for report in (first, second):
        with pytest.raises(EditWindowClosedError):
            await lifecycle.edit(
                report.id, {"cardio_days": 3}, people.client,
                MONDAY_8AM + timedelta(minutes=15),
            )


async def test_admin_edits_any_time(lifecycle, people):
    report = await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM, weight=70.0)
    edited = await lifecycle.edit(
        report.id, {"weight": 72.0}, people.admin, MONDAY_8AM + timedelta(days=40),
    )
    assert edited.weight == 72.0


async def test_null_note_clears_only_note(lifecycle, people):
    report = await _submit(
        lifecycle, people.client, people.client.id, MONDAY_8AM, weight=70.0, note="sore",
    )
    edited = await lifecycle.edit(
        report.id, {"note": None}, people.client, MONDAY_8AM + timedelta(minutes=1),
    )
    assert edited.note is None
    assert edited.weight == 70.0


async def test_null_measurement_rejected(lifecycle, people):
    report = await _submit(lifecycle, people.client, people.client.id, MONDAY_8AM, weight=70.0)
    with pytest.raises(InputValidationError):
        await lifecycle.edit(
            report.id, {"weight": None}, people.client, MONDAY_8AM + timedelta(minutes=1),
        )


# ─── List ────────────────────────────────────────────────────────

async def test_list_newest_first_with_pagination(lifecycle, people):
    for week in range(3):
        await _submit(
            lifecycle, people.client, people.client.id,
            MONDAY_8AM + timedelta(weeks=week), weight=70.0 - week,
        )

    page = await lifecycle.list(people.client.id, people.coach, page=1, page_size=2)
    assert page.total == 3
    assert page.total_pages == 2
    assert [r.week_number for r in page.items] == [13, 12]

    last = await lifecycle.list(people.client.id, people.client, page=2, page_size=2)
    assert [r.week_number for r in last.items] == [11]


async def test_list_rejects_bad_page(lifecycle, people):
    with pytest.raises(InputValidationError):
        await lifecycle.list(people.client.id, people.client, page=0)


async def test_list_hidden_from_unassigned_coach(lifecycle, people):
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.list(people.client.id, people.other_coach)
