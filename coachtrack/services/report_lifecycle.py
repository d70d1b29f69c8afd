"""Report Lifecycle — submit, edit, soft-delete, get and list weekly progress reports.

Invariants:
    - Every operation authorizes against the report owner (client_id) before touching state
    - submit: live client profile, ISO week from `now`, quota 2, lowest free sequence
    - edit: non-admins limited by check_edit_allowed (sequence 0, < 1h, no second report)
    - soft_delete sets deleted_at and does NOT cascade to images
    - get attaches live images ordered by created_at ascending
    - list is ordered by created_at descending and never carries note or images

Design Decisions:
    - Rules live in core/report_rules.py; this module only sequences IO around them
      (ADR: functional core, imperative shell)
    - A concurrent submit that loses the unique-key race surfaces as ConflictError
      from ReportRepository.create, never a silent overwrite
"""

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from coachtrack.core.domain_types import Operation, ProfileId, ReportId, Role
from coachtrack.core.errors import ResourceNotFoundError
from coachtrack.core.iso_week import WeekKey, ensure_utc, iso_week_of
from coachtrack.core.pagination import validate_page
from coachtrack.core.records import (
    Measurements, Page, Principal, Report, ReportSummary,
)
from coachtrack.core.report_rules import (
    build_report_changes, check_edit_allowed, next_sequence, validate_report_values,
)
from coachtrack.core.repository_protocols import (
    ProfileRepository, ReportImageRepository, ReportRepository,
)
from coachtrack.services.access_control import AccessControl

logger = logging.getLogger(__name__)


class ReportLifecycle:
    """State transitions for weekly reports."""

    def __init__(
        self,
        reports: ReportRepository,
        images: ReportImageRepository,
        profiles: ProfileRepository,
        access: AccessControl,
    ):
        self.reports = reports
        self.images = images
        self.profiles = profiles
        self.access = access

    async def submit(
        self,
        principal: Principal,
        client_id: UUID,
        measurements: Measurements,
        now: datetime,
    ) -> Report:
        await self.access.authorize(
            principal, client_id, Operation.CREATE_REPORT, resource_type="client",
        )
        client = await self.profiles.get(ProfileId(client_id))
        if client is None or client.role != Role.CLIENT:
            raise ResourceNotFoundError("client", str(client_id))

        values = asdict(measurements)
        validate_report_values(values)

        created_at = ensure_utc(now)
        week = iso_week_of(created_at)
        live = await self.reports.live_sequences(client_id, week)
        sequence = next_sequence(live, week)

        report = await self.reports.create(Report(
            id=uuid4(),
            client_id=client_id,
            created_at=created_at,
            year=week.year,
            week_number=week.week_number,
            sequence=sequence,
            **values,
        ))
        logger.info(
            f"Report submitted for {week.year}-W{week.week_number:02d} (sequence {sequence})",
            extra={"client_id": str(client_id), "report_id": str(report.id)},
        )
        return report

    async def edit(
        self,
        report_id: UUID,
        patch: dict[str, Any],
        principal: Principal,
        now: datetime,
    ) -> Report:
        report = await self.load_for(report_id, principal, Operation.EDIT_REPORT)
        changes = build_report_changes(patch)
        week = WeekKey(report.year, report.week_number)
        live_in_week = len(await self.reports.live_sequences(report.client_id, week))
        check_edit_allowed(report, principal, now, live_in_week)

        updated = await self.reports.update(ReportId(report_id), changes)
        updated.images = await self.images.list_live(ReportId(report_id))
        logger.info(
            f"Report edited: {sorted(changes)}",
            extra={"principal_id": str(principal.id), "report_id": str(report_id)},
        )
        return updated

    async def soft_delete(
        self, report_id: UUID, principal: Principal, now: datetime,
    ) -> None:
        await self.load_for(report_id, principal, Operation.DELETE_REPORT)
        await self.reports.soft_delete(ReportId(report_id), ensure_utc(now))
        logger.info(
            "Report soft-deleted",
            extra={"principal_id": str(principal.id), "report_id": str(report_id)},
        )

    async def get(self, report_id: UUID, principal: Principal) -> Report:
        report = await self.load_for(report_id, principal, Operation.READ)
        report.images = await self.images.list_live(ReportId(report_id))
        return report

    async def list(
        self, client_id: UUID, principal: Principal, page: int = 1, page_size: int = 20,
    ) -> Page[ReportSummary]:
        offset = validate_page(page, page_size)
        await self.access.authorize(
            principal, client_id, Operation.READ, resource_type="client",
        )
        items, total = await self.reports.list_page(
            client_id, offset=offset, limit=page_size,
        )
        return Page(items=items, total=total, page=page, page_size=page_size)

    async def load_for(
        self, report_id: UUID, principal: Principal, operation: Operation,
    ) -> Report:
        """Fetch a live report and authorize `operation` against its owner."""
        report = await self.reports.get(ReportId(report_id))
        if report is None:
            raise ResourceNotFoundError("report", str(report_id))
        await self.access.authorize(
            principal, report.client_id, operation,
            resource_type="report", resource_id=report_id,
        )
        return report
