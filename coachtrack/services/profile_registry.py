"""Profile Registry — coach/client registration, profile updates, soft-delete, coach rosters.

Invariants:
    - Only admins create coaches; only coaches create clients
    - A new client is immediately assigned (active) to the coach that created it
    - Email and phone are unique among live profiles (ConflictError otherwise)
    - Reads and updates go through AccessControl; out-of-scope profiles look absent
    - Clients cannot soft-delete themselves; admins and actively assigned coaches can
    - Roster lists live, actively assigned clients ordered by started_at descending

Design Decisions:
    - Invitation delivery is NOT done here: the API schedules it as a background task
      after commit, so a failing mailer never rolls back registration
"""

import logging
from datetime import date, datetime
from typing import Any
from uuid import UUID, uuid4

from coachtrack.core.domain_types import Operation, ProfileId, Role
from coachtrack.core.errors import (
    ConflictError, ForbiddenError, InputValidationError, ResourceNotFoundError,
)
from coachtrack.core.iso_week import ensure_utc, iso_week_of
from coachtrack.core.pagination import validate_page
from coachtrack.core.profile_rules import build_profile_changes, validate_profile_fields
from coachtrack.core.records import (
    ClientExtension, CoachExtension, Page, Principal, Profile,
)
from coachtrack.core.repository_protocols import ProfileRepository
from coachtrack.services.access_control import AccessControl
from coachtrack.services.assignment_directory import AssignmentDirectory

logger = logging.getLogger(__name__)


class ProfileRegistry:
    """Registration and maintenance of coach and client profiles."""

    def __init__(
        self,
        profiles: ProfileRepository,
        directory: AssignmentDirectory,
        access: AccessControl,
    ):
        self.profiles = profiles
        self.directory = directory
        self.access = access

    async def create_coach(
        self,
        principal: Principal,
        full_name: str,
        email: str,
        now: datetime,
        bio: str | None = None,
    ) -> Profile:
        if principal.role != Role.ADMIN:
            raise ForbiddenError("Only administrators can create coaches")
        if not email:
            raise InputValidationError("email is required", field="email")
        fields = validate_profile_fields({"full_name": full_name, "email": email, "bio": bio})
        await self._ensure_unique(email=email, phone=None)

        profile = await self.profiles.create(Profile(
            id=uuid4(),
            role=Role.COACH,
            full_name=fields["full_name"],
            email=email,
            created_at=ensure_utc(now),
            extension=CoachExtension(bio=bio),
        ))
        logger.info("Coach created", extra={"principal_id": str(principal.id)})
        return profile

    async def create_client(
        self,
        principal: Principal,
        full_name: str,
        phone: str,
        now: datetime,
        email: str | None = None,
        date_of_birth: date | None = None,
        gender: str | None = None,
    ) -> Profile:
        if principal.role != Role.COACH:
            raise ForbiddenError("Only coaches can create clients")
        if not phone:
            raise InputValidationError("phone is required", field="phone")
        fields = validate_profile_fields({
            "full_name": full_name, "email": email, "phone": phone,
            "date_of_birth": date_of_birth, "gender": gender,
        })
        await self._ensure_unique(email=email, phone=phone)

        profile = await self.profiles.create(Profile(
            id=uuid4(),
            role=Role.CLIENT,
            full_name=fields["full_name"],
            email=email,
            phone=phone,
            created_at=ensure_utc(now),
            extension=ClientExtension(date_of_birth=date_of_birth, gender=gender),
        ))
        await self.directory.activate(principal.id, profile.id, now)
        logger.info(
            "Client created",
            extra={"principal_id": str(principal.id), "client_id": str(profile.id)},
        )
        return profile

    async def get_profile(self, principal: Principal, profile_id: UUID) -> Profile:
        return await self._load_for(principal, profile_id, Operation.READ)

    async def update_profile(
        self, principal: Principal, profile_id: UUID, patch: dict[str, Any],
    ) -> Profile:
        profile = await self._load_for(principal, profile_id, Operation.UPDATE_PROFILE)
        changes = build_profile_changes(profile.role, patch)
        if changes.get("email") is not None or changes.get("phone") is not None:
            await self._ensure_unique(
                email=changes.get("email"), phone=changes.get("phone"),
                exclude_id=ProfileId(profile_id),
            )
        updated = await self.profiles.update(ProfileId(profile_id), changes)
        logger.info(
            f"Profile updated: {sorted(changes)}",
            extra={"principal_id": str(principal.id), "client_id": str(profile_id)},
        )
        return updated

    async def soft_delete_profile(
        self, principal: Principal, profile_id: UUID, now: datetime,
    ) -> None:
        await self._load_for(principal, profile_id, Operation.DELETE_PROFILE)
        await self.profiles.soft_delete(ProfileId(profile_id), ensure_utc(now))
        logger.info(
            "Profile soft-deleted",
            extra={"principal_id": str(principal.id), "client_id": str(profile_id)},
        )

    async def list_clients(
        self,
        principal: Principal,
        coach_id: UUID,
        now: datetime,
        page: int = 1,
        page_size: int = 20,
        missing_report_for_week: bool = False,
    ) -> Page[Profile]:
        offset = validate_page(page, page_size)
        await self.access.authorize(
            principal, coach_id, Operation.READ, resource_type="coach",
        )
        week = iso_week_of(now) if missing_report_for_week else None
        items, total = await self.profiles.list_assigned_clients(
            ProfileId(coach_id), offset=offset, limit=page_size,
            missing_report_for=week,
        )
        return Page(items=items, total=total, page=page, page_size=page_size)

    # ─── Helpers ─────────────────────────────────────────────────

    async def _load_for(
        self, principal: Principal, profile_id: UUID, operation: Operation,
    ) -> Profile:
        profile = await self.profiles.get(ProfileId(profile_id))
        if profile is None:
            raise ResourceNotFoundError("profile", str(profile_id))
        await self.access.authorize(
            principal, profile_id, operation, resource_type="profile",
        )
        return profile

    async def _ensure_unique(
        self,
        *,
        email: str | None,
        phone: str | None,
        exclude_id: ProfileId | None = None,
    ) -> None:
        clash = await self.profiles.find_conflict(
            email=email, phone=phone, exclude_id=exclude_id,
        )
        if clash is not None:
            raise ConflictError(
                f"A profile with this {clash} already exists",
                code="PROFILE_CONFLICT",
            )
