"""Access Policy — tests for the pure decision matrix.

Tests cover:
    - Admin override on every operation
    - Self grants per role
    - Delegated coach access only with an active assignment, never report writes
    - requires_assignment_lookup only when delegation can decide
"""

from uuid import uuid4

import pytest

from coachtrack.core.access_policy import (
    DELEGATED_GRANTS, decide_access, requires_assignment_lookup,
)
from coachtrack.core.domain_types import AccessDecision, Operation, Role
from coachtrack.core.records import Principal

ALLOW = AccessDecision.ALLOW
DENY = AccessDecision.DENY

REPORT_WRITES = (
    Operation.CREATE_REPORT, Operation.EDIT_REPORT, Operation.DELETE_REPORT,
    Operation.UPLOAD_IMAGE, Operation.DELETE_IMAGE,
)


def _principal(role: Role) -> Principal:
    return Principal(id=uuid4(), role=role)


# ─── Admin ───────────────────────────────────────────────────────

@pytest.mark.parametrize("operation", list(Operation))
def test_admin_allowed_everything_on_anyone(operation):
    admin = _principal(Role.ADMIN)
    assert decide_access(admin, uuid4(), operation) == ALLOW


# ─── Self ────────────────────────────────────────────────────────

@pytest.mark.parametrize("operation", [
    Operation.READ, *REPORT_WRITES, Operation.UPDATE_PROFILE,
])
def test_client_self_grants(operation):
    client = _principal(Role.CLIENT)
    assert decide_access(client, client.id, operation) == ALLOW


def test_client_cannot_delete_own_profile_or_manage_assignments():
    client = _principal(Role.CLIENT)
    assert decide_access(client, client.id, Operation.DELETE_PROFILE) == DENY
    assert decide_access(client, client.id, Operation.MANAGE_ASSIGNMENT) == DENY


def test_client_cannot_touch_another_client():
    client = _principal(Role.CLIENT)
    for operation in Operation:
        assert decide_access(client, uuid4(), operation) == DENY


def test_coach_self_grants():
    coach = _principal(Role.COACH)
    assert decide_access(coach, coach.id, Operation.READ) == ALLOW
    assert decide_access(coach, coach.id, Operation.UPDATE_PROFILE) == ALLOW
    assert decide_access(coach, coach.id, Operation.MANAGE_ASSIGNMENT) == ALLOW
    assert decide_access(coach, coach.id, Operation.CREATE_REPORT) == DENY


# ─── Delegated coach access ──────────────────────────────────────

@pytest.mark.parametrize("operation", sorted(DELEGATED_GRANTS, key=lambda o: o.value))
def test_assigned_coach_gets_delegated_grants(operation):
    coach = _principal(Role.COACH)
    assert decide_access(
        coach, uuid4(), operation, has_active_assignment=True,
    ) == ALLOW


@pytest.mark.parametrize("operation", REPORT_WRITES)
def test_assigned_coach_never_writes_report_content(operation):
    coach = _principal(Role.COACH)
    assert decide_access(
        coach, uuid4(), operation, has_active_assignment=True,
    ) == DENY


def test_unassigned_coach_denied_read():
    coach = _principal(Role.COACH)
    assert decide_access(coach, uuid4(), Operation.READ) == DENY


def test_assignment_flag_ignored_for_clients():
    client = _principal(Role.CLIENT)
    assert decide_access(
        client, uuid4(), Operation.READ, has_active_assignment=True,
    ) == DENY


# ─── requires_assignment_lookup ──────────────────────────────────

def test_lookup_needed_for_coach_reading_someone_else():
    coach = _principal(Role.COACH)
    assert requires_assignment_lookup(coach, uuid4(), Operation.READ)


def test_no_lookup_for_report_writes_or_self():
    coach = _principal(Role.COACH)
    assert not requires_assignment_lookup(coach, uuid4(), Operation.EDIT_REPORT)
    assert not requires_assignment_lookup(coach, coach.id, Operation.READ)


def test_no_lookup_for_admin_or_client():
    assert not requires_assignment_lookup(_principal(Role.ADMIN), uuid4(), Operation.READ)
    assert not requires_assignment_lookup(_principal(Role.CLIENT), uuid4(), Operation.READ)
