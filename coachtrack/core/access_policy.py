"""Access Policy — pure decision engine over (principal, target owner, operation).

Invariants:
    - decide_access is PURE: the caller supplies whether a delegating assignment is active
    - Precedence: admin override > self access > delegated coach access > deny
    - Coaches never receive report-content writes through delegation
    - requires_assignment_lookup tells the shell when the assignment lookup can change
      the outcome, so IO is only performed when needed

Design Decisions:
    - Grants as frozensets keyed by role: the whole matrix is readable in one screen
    - Separate pure predicate from the async shell (services/access_control.py) that
      performs the assignment lookup (ADR: functional core, imperative shell)
"""

from uuid import UUID

from coachtrack.core.domain_types import AccessDecision, Operation, Role
from coachtrack.core.records import Principal


SELF_GRANTS: dict[Role, frozenset[Operation]] = {
    Role.CLIENT: frozenset({
        Operation.READ,
        Operation.CREATE_REPORT,
        Operation.EDIT_REPORT,
        Operation.DELETE_REPORT,
        Operation.UPLOAD_IMAGE,
        Operation.DELETE_IMAGE,
        Operation.UPDATE_PROFILE,
    }),
    Role.COACH: frozenset({
        Operation.READ,
        Operation.UPDATE_PROFILE,
        Operation.MANAGE_ASSIGNMENT,
    }),
    Role.ADMIN: frozenset(Operation),
}

# Granted to a coach over a client they are actively assigned to.
DELEGATED_GRANTS: frozenset[Operation] = frozenset({
    Operation.READ,
    Operation.UPDATE_PROFILE,
    Operation.DELETE_PROFILE,
})


def is_self(principal: Principal, target_owner_id: UUID) -> bool:
    return principal.id == target_owner_id


def requires_assignment_lookup(
    principal: Principal, target_owner_id: UUID, operation: Operation,
) -> bool:
    """True only when rule 3 (delegated coach access) could decide the outcome."""
    if principal.role != Role.COACH:
        return False
    if is_self(principal, target_owner_id) and operation in SELF_GRANTS[Role.COACH]:
        return False
    return operation in DELEGATED_GRANTS


def decide_access(
    principal: Principal,
    target_owner_id: UUID,
    operation: Operation,
    *,
    has_active_assignment: bool = False,
) -> AccessDecision:
    """Evaluate the access matrix. Pure — no IO, no side effects."""
    if principal.role == Role.ADMIN:
        return AccessDecision.ALLOW

    if is_self(principal, target_owner_id) and operation in SELF_GRANTS[principal.role]:
        return AccessDecision.ALLOW

    if (
        principal.role == Role.COACH
        and has_active_assignment
        and not is_self(principal, target_owner_id)
        and operation in DELEGATED_GRANTS
    ):
        return AccessDecision.ALLOW

    return AccessDecision.DENY
