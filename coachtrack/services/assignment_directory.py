"""Assignment Directory — coach-client relationship state.

Invariants:
    - At most one row per (coach_id, client_id); rows are never hard-deleted
    - activate() is idempotent: insert if absent, else is_active=True and started_at=now
    - deactivate() requires an existing row (ResourceNotFoundError otherwise)
    - activate_for()/deactivate_for() require MANAGE_ASSIGNMENT on the coach
      and a live coach and a live client

Design Decisions:
    - Raw activate/deactivate stay principal-free for internal callers (client
      creation, tests); the API goes through the *_for wrappers
"""

import logging
from datetime import datetime
from uuid import UUID

from coachtrack.core.domain_types import Operation, ProfileId, Role
from coachtrack.core.errors import ResourceNotFoundError
from coachtrack.core.iso_week import ensure_utc
from coachtrack.core.records import Assignment, Principal
from coachtrack.core.repository_protocols import AssignmentRepository, ProfileRepository
from coachtrack.services.access_control import AccessControl

logger = logging.getLogger(__name__)


class AssignmentDirectory:
    """Answers and mutates coach-client responsibility."""

    def __init__(
        self,
        assignments: AssignmentRepository,
        profiles: ProfileRepository,
        access: AccessControl,
    ):
        self.assignments = assignments
        self.profiles = profiles
        self.access = access

    async def is_active(self, coach_id: UUID, client_id: UUID) -> bool:
        assignment = await self.assignments.get(coach_id, client_id)
        return assignment is not None and assignment.is_active

    async def activate(
        self, coach_id: UUID, client_id: UUID, now: datetime,
    ) -> Assignment:
        started_at = ensure_utc(now)
        existing = await self.assignments.get(coach_id, client_id)
        if existing is None:
            await self.assignments.insert(Assignment(
                coach_id=coach_id, client_id=client_id,
                started_at=started_at, is_active=True,
            ))
        else:
            await self.assignments.set_state(
                coach_id, client_id, is_active=True, started_at=started_at,
            )
        logger.info(
            "Assignment activated",
            extra={"principal_id": str(coach_id), "client_id": str(client_id)},
        )
        return Assignment(coach_id, client_id, started_at, True)

    async def deactivate(self, coach_id: UUID, client_id: UUID) -> Assignment:
        existing = await self.assignments.get(coach_id, client_id)
        if existing is None:
            raise ResourceNotFoundError("assignment", f"{coach_id}/{client_id}")
        await self.assignments.set_state(coach_id, client_id, is_active=False)
        logger.info(
            "Assignment deactivated",
            extra={"principal_id": str(coach_id), "client_id": str(client_id)},
        )
        existing.is_active = False
        return existing

    # ─── Principal-gated ─────────────────────────────────────────

    async def activate_for(
        self, principal: Principal, coach_id: UUID, client_id: UUID, now: datetime,
    ) -> Assignment:
        await self._check_parties(principal, coach_id, client_id)
        return await self.activate(coach_id, client_id, now)

    async def deactivate_for(
        self, principal: Principal, coach_id: UUID, client_id: UUID,
    ) -> Assignment:
        await self._check_parties(principal, coach_id, client_id)
        return await self.deactivate(coach_id, client_id)

    async def _check_parties(
        self, principal: Principal, coach_id: UUID, client_id: UUID,
    ) -> None:
        await self.access.authorize(
            principal, coach_id, Operation.MANAGE_ASSIGNMENT,
            resource_type="coach",
        )
        coach = await self.profiles.get(ProfileId(coach_id))
        if coach is None or coach.role != Role.COACH:
            raise ResourceNotFoundError("coach", str(coach_id))
        client = await self.profiles.get(ProfileId(client_id))
        if client is None or client.role != Role.CLIENT:
            raise ResourceNotFoundError("client", str(client_id))
