"""Trend Aggregator — read-only per-metric series over a client's report history."""

from collections.abc import Iterable
from uuid import UUID

from coachtrack.core.domain_types import Operation
from coachtrack.core.records import Principal
from coachtrack.core.repository_protocols import ReportRepository
from coachtrack.core.trends import build_trends, parse_metrics
from coachtrack.services.access_control import AccessControl


class TrendAggregator:
    """Builds metric series for clients the principal can read."""

    def __init__(self, reports: ReportRepository, access: AccessControl):
        self.reports = reports
        self.access = access

    async def trends(
        self,
        client_id: UUID,
        principal: Principal,
        metric_names: Iterable[str] | None = None,
    ) -> dict[str, list[float | int]]:
        """Chronological values per metric; nulls skipped, empty metrics omitted."""
        metrics = parse_metrics(metric_names)
        await self.access.authorize(
            principal, client_id, Operation.READ, resource_type="client",
        )
        reports = await self.reports.list_chronological(client_id)
        return build_trends(reports, metrics)
