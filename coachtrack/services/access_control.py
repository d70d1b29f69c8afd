"""Access Control — async shell around the pure access policy.

Invariants:
    - Assignment lookup only when requires_assignment_lookup() says rule 3 can apply
    - authorize() raises ResourceNotFoundError when the principal cannot read the owner at all,
      ForbiddenError when it can read but not perform the operation
    - Every mutating service calls authorize() before touching state

Design Decisions:
    - Existence hiding: out-of-scope resources look absent (ADR: no probing of foreign ids)
"""

import logging
from uuid import UUID

from coachtrack.core.access_policy import decide_access, requires_assignment_lookup
from coachtrack.core.domain_types import AccessDecision, Operation
from coachtrack.core.errors import ErrorContext, ForbiddenError, ResourceNotFoundError
from coachtrack.core.records import Principal
from coachtrack.core.repository_protocols import AssignmentRepository

logger = logging.getLogger(__name__)


class AccessControl:
    """Resolves access decisions, fetching assignment state when needed."""

    def __init__(self, assignments: AssignmentRepository):
        self.assignments = assignments

    async def can_access(
        self, principal: Principal, target_owner_id: UUID, operation: Operation,
    ) -> AccessDecision:
        has_assignment = False
        if requires_assignment_lookup(principal, target_owner_id, operation):
            assignment = await self.assignments.get(principal.id, target_owner_id)
            has_assignment = assignment is not None and assignment.is_active
        return decide_access(
            principal, target_owner_id, operation,
            has_active_assignment=has_assignment,
        )

    async def authorize(
        self,
        principal: Principal,
        target_owner_id: UUID,
        operation: Operation,
        *,
        resource_type: str,
        resource_id: UUID | str | None = None,
    ) -> None:
        """Raise unless `principal` may perform `operation` on the owner's resource."""
        decision = await self.can_access(principal, target_owner_id, operation)
        if decision == AccessDecision.ALLOW:
            return

        rid = str(resource_id if resource_id is not None else target_owner_id)
        readable = (
            operation != Operation.READ
            and await self.can_access(principal, target_owner_id, Operation.READ)
            == AccessDecision.ALLOW
        )
        logger.info(
            f"Access denied: {operation.value} on {resource_type}",
            extra={"principal_id": str(principal.id), "path": f"{resource_type}/{rid}"},
        )
        if not readable:
            raise ResourceNotFoundError(resource_type, rid)
        raise ForbiddenError(
            f"Not allowed to {operation.value.replace('_', ' ')}",
            context=ErrorContext(
                principal_id=str(principal.id),
                resource_type=resource_type,
                resource_id=rid,
            ),
        )
