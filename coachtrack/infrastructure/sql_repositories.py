"""SQL Repositories — SQLAlchemy async implementations of the core boundary protocols.

Invariants:
    - Every method returns detached records (core/records.py), never ORM instances
    - Datetimes leave this module timezone-aware UTC (SQLite hands back naive values)
    - Writes flush but never commit: the caller owns the transaction boundary
    - ReportRepository.create maps IntegrityError (live-week unique index) to ConflictError

Design Decisions:
    - Profile extension join done here: the domain sees a tagged variant, not two tables
    - Counts via SELECT count(*) over the same filtered query used for the page
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import delete, exists, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coachtrack.core.domain_types import ImageId, ProfileId, ReportId, Role
from coachtrack.core.errors import ConflictError, ResourceNotFoundError
from coachtrack.core.iso_week import WeekKey
from coachtrack.core.records import (
    REPORT_EDITABLE_FIELDS, REPORT_VALUE_FIELDS,
    Assignment, ClientExtension, CoachExtension, Profile, Report,
    ReportImage, ReportSummary,
)
from coachtrack.models.assignment import CoachClientAssignment
from coachtrack.models.profile import (
    ClientProfile as ClientProfileRow,
    CoachProfile as CoachProfileRow,
    Profile as ProfileRow,
)
from coachtrack.models.report import Report as ReportRow
from coachtrack.models.report_image import ReportImage as ReportImageRow

logger = logging.getLogger(__name__)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ─── Profiles ────────────────────────────────────────────────────

_COACH_FIELDS = ("bio",)
_CLIENT_FIELDS = ("date_of_birth", "gender")


def _to_profile(row: ProfileRow) -> Profile:
    role = Role(row.role)
    extension: CoachExtension | ClientExtension | None = None
    if role == Role.COACH:
        extension = CoachExtension(
            bio=row.coach_profile.bio if row.coach_profile else None,
        )
    elif role == Role.CLIENT:
        ext = row.client_profile
        extension = ClientExtension(
            date_of_birth=ext.date_of_birth if ext else None,
            gender=ext.gender if ext else None,
        )
    return Profile(
        id=row.id,
        role=role,
        full_name=row.full_name,
        email=row.email,
        phone=row.phone,
        created_at=_as_utc(row.created_at),
        deleted_at=_as_utc(row.deleted_at),
        extension=extension,
    )


class SqlProfileRepository:
    """ProfileRepository over profiles + coach_profiles + client_profiles."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _row(self, profile_id: UUID) -> ProfileRow | None:
        result = await self.db.execute(
            select(ProfileRow)
            .where(ProfileRow.id == profile_id)
            .where(ProfileRow.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def get(self, profile_id: ProfileId) -> Profile | None:
        row = await self._row(profile_id)
        return _to_profile(row) if row else None

    async def find_conflict(
        self, *, email: str | None, phone: str | None,
        exclude_id: ProfileId | None = None,
    ) -> str | None:
        for field_name, value in (("email", email), ("phone", phone)):
            if not value:
                continue
            column = getattr(ProfileRow, field_name)
            query = (
                select(ProfileRow.id)
                .where(column == value)
                .where(ProfileRow.deleted_at.is_(None))
            )
            if exclude_id is not None:
                query = query.where(ProfileRow.id != exclude_id)
            result = await self.db.execute(query.limit(1))
            if result.scalar_one_or_none() is not None:
                return field_name
        return None

    async def create(self, profile: Profile) -> Profile:
        row = ProfileRow(
            id=profile.id,
            role=profile.role.value,
            full_name=profile.full_name,
            email=profile.email,
            phone=profile.phone,
            created_at=profile.created_at,
        )
        # Extension rows always exist for coaches and clients, so the mapped
        # relationship is populated without a lazy load after flush.
        if profile.role == Role.COACH:
            ext = profile.extension if isinstance(profile.extension, CoachExtension) else CoachExtension()
            row.coach_profile = CoachProfileRow(id=profile.id, bio=ext.bio)
        elif profile.role == Role.CLIENT:
            ext = profile.extension if isinstance(profile.extension, ClientExtension) else ClientExtension()
            row.client_profile = ClientProfileRow(
                id=profile.id,
                date_of_birth=ext.date_of_birth,
                gender=ext.gender,
            )
        self.db.add(row)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Profile insert conflict: {e.orig}")
            raise ConflictError(
                "A profile with this email or phone already exists",
                code="PROFILE_CONFLICT",
            )
        return _to_profile(row)

    async def update(
        self, profile_id: ProfileId, changes: dict[str, Any],
    ) -> Profile:
        row = await self._row(profile_id)
        if row is None:
            raise ResourceNotFoundError("profile", str(profile_id))
        for name, value in changes.items():
            if name in _COACH_FIELDS:
                if row.coach_profile is None:
                    row.coach_profile = CoachProfileRow(id=row.id)
                setattr(row.coach_profile, name, value)
            elif name in _CLIENT_FIELDS:
                if row.client_profile is None:
                    row.client_profile = ClientProfileRow(id=row.id)
                setattr(row.client_profile, name, value)
            else:
                setattr(row, name, value)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Profile update conflict: {e.orig}")
            raise ConflictError(
                "A profile with this email or phone already exists",
                code="PROFILE_CONFLICT",
            )
        return _to_profile(row)

    async def soft_delete(self, profile_id: ProfileId, now: datetime) -> None:
        await self.db.execute(
            update(ProfileRow)
            .where(ProfileRow.id == profile_id)
            .where(ProfileRow.deleted_at.is_(None))
            .values(deleted_at=now)
        )
        await self.db.flush()

    async def list_assigned_clients(
        self, coach_id: ProfileId, *, offset: int, limit: int,
        missing_report_for: WeekKey | None = None,
    ) -> tuple[list[Profile], int]:
        query = (
            select(ProfileRow)
            .join(
                CoachClientAssignment,
                CoachClientAssignment.client_id == ProfileRow.id,
            )
            .where(CoachClientAssignment.coach_id == coach_id)
            .where(CoachClientAssignment.is_active.is_(True))
            .where(ProfileRow.deleted_at.is_(None))
            .where(ProfileRow.role == Role.CLIENT.value)
        )
        if missing_report_for is not None:
            query = query.where(~exists().where(
                ReportRow.client_id == ProfileRow.id,
                ReportRow.year == missing_report_for.year,
                ReportRow.week_number == missing_report_for.week_number,
                ReportRow.deleted_at.is_(None),
            ))

        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()
        result = await self.db.execute(
            query.order_by(CoachClientAssignment.started_at.desc())
            .offset(offset).limit(limit)
        )
        return [_to_profile(row) for row in result.scalars().all()], total


# ─── Assignments ─────────────────────────────────────────────────

class SqlAssignmentRepository:
    """AssignmentRepository over coach_client_assignments."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, coach_id: UUID, client_id: UUID) -> Assignment | None:
        result = await self.db.execute(
            select(CoachClientAssignment)
            .where(CoachClientAssignment.coach_id == coach_id)
            .where(CoachClientAssignment.client_id == client_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return Assignment(
            coach_id=row.coach_id,
            client_id=row.client_id,
            started_at=_as_utc(row.started_at),
            is_active=row.is_active,
        )

    async def insert(self, assignment: Assignment) -> None:
        self.db.add(CoachClientAssignment(
            coach_id=assignment.coach_id,
            client_id=assignment.client_id,
            started_at=assignment.started_at,
            is_active=assignment.is_active,
        ))
        await self.db.flush()

    async def set_state(
        self, coach_id: UUID, client_id: UUID, *,
        is_active: bool, started_at: datetime | None = None,
    ) -> None:
        values: dict[str, Any] = {"is_active": is_active}
        if started_at is not None:
            values["started_at"] = started_at
        await self.db.execute(
            update(CoachClientAssignment)
            .where(CoachClientAssignment.coach_id == coach_id)
            .where(CoachClientAssignment.client_id == client_id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()


# ─── Reports ─────────────────────────────────────────────────────

def _to_summary(row: ReportRow) -> ReportSummary:
    return ReportSummary(
        id=row.id,
        client_id=row.client_id,
        created_at=_as_utc(row.created_at),
        year=row.year,
        week_number=row.week_number,
        sequence=row.sequence,
        deleted_at=_as_utc(row.deleted_at),
        **{name: getattr(row, name) for name in REPORT_VALUE_FIELDS},
    )


def _to_report(row: ReportRow) -> Report:
    return Report(
        id=row.id,
        client_id=row.client_id,
        created_at=_as_utc(row.created_at),
        year=row.year,
        week_number=row.week_number,
        sequence=row.sequence,
        deleted_at=_as_utc(row.deleted_at),
        note=row.note,
        **{name: getattr(row, name) for name in REPORT_VALUE_FIELDS},
    )


class SqlReportRepository:
    """ReportRepository over reports."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _row(self, report_id: UUID) -> ReportRow | None:
        result = await self.db.execute(
            select(ReportRow)
            .where(ReportRow.id == report_id)
            .where(ReportRow.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def get(self, report_id: ReportId) -> Report | None:
        row = await self._row(report_id)
        return _to_report(row) if row else None

    async def live_sequences(self, client_id: UUID, week: WeekKey) -> list[int]:
        result = await self.db.execute(
            select(ReportRow.sequence)
            .where(ReportRow.client_id == client_id)
            .where(ReportRow.year == week.year)
            .where(ReportRow.week_number == week.week_number)
            .where(ReportRow.deleted_at.is_(None))
            .order_by(ReportRow.sequence)
        )
        return list(result.scalars().all())

    async def create(self, report: Report) -> Report:
        row = ReportRow(
            id=report.id,
            client_id=report.client_id,
            created_at=report.created_at,
            year=report.year,
            week_number=report.week_number,
            sequence=report.sequence,
            note=report.note,
            **{name: getattr(report, name) for name in REPORT_VALUE_FIELDS},
        )
        self.db.add(row)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                f"Concurrent report submission lost the week slot: {e.orig}",
                extra={"client_id": str(report.client_id)},
            )
            raise ConflictError(
                "weekly quota exceeded: a concurrent submission took this slot",
                code="REPORT_SLOT_TAKEN",
            )
        return _to_report(row)

    async def update(self, report_id: ReportId, changes: dict[str, Any]) -> Report:
        row = await self._row(report_id)
        if row is None:
            raise ResourceNotFoundError("report", str(report_id))
        for name, value in changes.items():
            if name in REPORT_EDITABLE_FIELDS:
                setattr(row, name, value)
        await self.db.flush()
        return _to_report(row)

    async def soft_delete(self, report_id: ReportId, now: datetime) -> None:
        await self.db.execute(
            update(ReportRow)
            .where(ReportRow.id == report_id)
            .where(ReportRow.deleted_at.is_(None))
            .values(deleted_at=now)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()

    async def list_page(
        self, client_id: UUID, *, offset: int, limit: int,
    ) -> tuple[list[ReportSummary], int]:
        live = (
            ReportRow.client_id == client_id,
            ReportRow.deleted_at.is_(None),
        )
        total = (await self.db.execute(
            select(func.count(ReportRow.id)).where(*live)
        )).scalar_one()
        result = await self.db.execute(
            select(ReportRow).where(*live)
            .order_by(ReportRow.created_at.desc())
            .offset(offset).limit(limit)
        )
        return [_to_summary(row) for row in result.scalars().all()], total

    async def list_chronological(self, client_id: UUID) -> list[ReportSummary]:
        result = await self.db.execute(
            select(ReportRow)
            .where(ReportRow.client_id == client_id)
            .where(ReportRow.deleted_at.is_(None))
            .order_by(ReportRow.created_at.asc())
        )
        return [_to_summary(row) for row in result.scalars().all()]


# ─── Images ──────────────────────────────────────────────────────

def _to_image(row: ReportImageRow) -> ReportImage:
    return ReportImage(
        id=row.id,
        report_id=row.report_id,
        storage_path=row.storage_path,
        size_bytes=row.size_bytes,
        created_at=_as_utc(row.created_at),
        width=row.width,
        height=row.height,
        is_deleted=row.is_deleted,
        deleted_at=_as_utc(row.deleted_at),
    )


class SqlReportImageRepository:
    """ReportImageRepository over report_images."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, image_id: ImageId) -> ReportImage | None:
        result = await self.db.execute(
            select(ReportImageRow)
            .where(ReportImageRow.id == image_id)
            .where(ReportImageRow.is_deleted.is_(False))
        )
        row = result.scalar_one_or_none()
        return _to_image(row) if row else None

    async def count_live(self, report_id: ReportId) -> int:
        result = await self.db.execute(
            select(func.count(ReportImageRow.id))
            .where(ReportImageRow.report_id == report_id)
            .where(ReportImageRow.is_deleted.is_(False))
        )
        return result.scalar_one()

    async def list_live(self, report_id: ReportId) -> list[ReportImage]:
        result = await self.db.execute(
            select(ReportImageRow)
            .where(ReportImageRow.report_id == report_id)
            .where(ReportImageRow.is_deleted.is_(False))
            .order_by(ReportImageRow.created_at.asc())
        )
        return [_to_image(row) for row in result.scalars().all()]

    async def create(self, image: ReportImage) -> ReportImage:
        row = ReportImageRow(
            id=image.id,
            report_id=image.report_id,
            storage_path=image.storage_path,
            size_bytes=image.size_bytes,
            width=image.width,
            height=image.height,
            created_at=image.created_at,
            is_deleted=False,
        )
        self.db.add(row)
        await self.db.flush()
        return _to_image(row)

    async def discard(self, image_id: ImageId) -> None:
        await self.db.execute(
            delete(ReportImageRow)
            .where(ReportImageRow.id == image_id)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()

    async def mark_deleted(self, image_id: ImageId, now: datetime) -> None:
        await self.db.execute(
            update(ReportImageRow)
            .where(ReportImageRow.id == image_id)
            .where(ReportImageRow.is_deleted.is_(False))
            .values(is_deleted=True, deleted_at=now)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()

    async def list_expired(self, cutoff: datetime) -> list[ReportImage]:
        result = await self.db.execute(
            select(ReportImageRow)
            .where(ReportImageRow.is_deleted.is_(False))
            .where(ReportImageRow.created_at < cutoff)
            .order_by(ReportImageRow.created_at.asc())
        )
        return [_to_image(row) for row in result.scalars().all()]
