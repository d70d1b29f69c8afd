"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Repositories return detached records (core/records.py), never ORM rows
    - "Live" means not soft-deleted; get() methods return live records only

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy (ADR: ExMA anti-pattern)
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves —
      the shell orchestrates the async calls around the pure logic
    - ReportRepository.create translates a unique-key race into ConflictError,
      so callers never see driver exceptions
"""

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from coachtrack.core.domain_types import ProfileId, ReportId, ImageId
from coachtrack.core.iso_week import WeekKey
from coachtrack.core.records import (
    Assignment, Profile, Report, ReportImage, ReportSummary,
)


class ProfileRepository(Protocol):
    """Contract for profile persistence (base row + role extension)."""
    async def get(self, profile_id: ProfileId) -> Profile | None: ...
    async def find_conflict(
        self, *, email: str | None, phone: str | None,
        exclude_id: ProfileId | None = None,
    ) -> str | None: ...
    async def create(self, profile: Profile) -> Profile: ...
    async def update(
        self, profile_id: ProfileId, changes: dict[str, Any],
    ) -> Profile: ...
    async def soft_delete(self, profile_id: ProfileId, now: datetime) -> None: ...
    async def list_assigned_clients(
        self, coach_id: ProfileId, *, offset: int, limit: int,
        missing_report_for: WeekKey | None = None,
    ) -> tuple[list[Profile], int]: ...


class AssignmentRepository(Protocol):
    """Contract for coach-client assignment persistence."""
    async def get(self, coach_id: UUID, client_id: UUID) -> Assignment | None: ...
    async def insert(self, assignment: Assignment) -> None: ...
    async def set_state(
        self, coach_id: UUID, client_id: UUID, *,
        is_active: bool, started_at: datetime | None = None,
    ) -> None: ...


class ReportRepository(Protocol):
    """Contract for weekly report persistence."""
    async def get(self, report_id: ReportId) -> Report | None: ...
    async def live_sequences(self, client_id: UUID, week: WeekKey) -> list[int]: ...
    async def create(self, report: Report) -> Report: ...
    async def update(self, report_id: ReportId, changes: dict[str, Any]) -> Report: ...
    async def soft_delete(self, report_id: ReportId, now: datetime) -> None: ...
    async def list_page(
        self, client_id: UUID, *, offset: int, limit: int,
    ) -> tuple[list[ReportSummary], int]: ...
    async def list_chronological(self, client_id: UUID) -> list[ReportSummary]: ...


class ReportImageRepository(Protocol):
    """Contract for report image metadata persistence."""
    async def get(self, image_id: ImageId) -> ReportImage | None: ...
    async def count_live(self, report_id: ReportId) -> int: ...
    async def list_live(self, report_id: ReportId) -> list[ReportImage]: ...
    async def create(self, image: ReportImage) -> ReportImage: ...
    async def discard(self, image_id: ImageId) -> None: ...
    async def mark_deleted(self, image_id: ImageId, now: datetime) -> None: ...
    async def list_expired(self, cutoff: datetime) -> list[ReportImage]: ...


class ObjectStorage(Protocol):
    """Contract for the blob store holding image bytes."""
    async def create_upload_url(self, storage_path: str) -> str: ...
    async def delete(self, storage_paths: list[str]) -> None: ...


class AuthGateway(Protocol):
    """Resolves a bearer token to the authenticated user id."""
    async def resolve_user_id(self, access_token: str) -> UUID | None: ...


class InvitationSender(Protocol):
    """Delivers account invitations. Fire-and-forget from the caller's view."""
    async def invite(
        self, *, profile_id: UUID, email: str | None, phone: str | None,
    ) -> None: ...
