"""Trend Building — per-metric value series from chronologically ordered reports.

Invariants:
    - Input reports are already ordered by created_at ascending and exclude soft-deleted ones
    - None values are skipped, so arrays are NOT index-aligned across metrics
    - Metrics without a single value are omitted from the result
    - Unknown metric names raise InputValidationError before any value is read
"""

from collections.abc import Iterable, Sequence

from coachtrack.core.domain_types import Metric
from coachtrack.core.errors import InputValidationError
from coachtrack.core.records import ReportSummary


DEFAULT_METRICS: tuple[Metric, ...] = tuple(Metric)


def parse_metrics(names: Iterable[str] | None) -> tuple[Metric, ...]:
    if names is None:
        return DEFAULT_METRICS
    parsed: list[Metric] = []
    for name in names:
        try:
            metric = Metric(name)
        except ValueError:
            raise InputValidationError(f"Unknown metric '{name}'", field="metrics")
        if metric not in parsed:
            parsed.append(metric)
    if not parsed:
        return DEFAULT_METRICS
    return tuple(parsed)


def build_trends(
    reports: Sequence[ReportSummary], metrics: Sequence[Metric] = DEFAULT_METRICS,
) -> dict[str, list[float | int]]:
    trends: dict[str, list[float | int]] = {}
    for metric in metrics:
        values = [
            getattr(r, metric.value) for r in reports
            if getattr(r, metric.value) is not None
        ]
        if values:
            trends[metric.value] = values
    return trends
