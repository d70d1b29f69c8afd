"""Trend Routes — per-metric value series for a client."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from coachtrack.api.deps import get_principal, get_trend_aggregator
from coachtrack.core.records import Principal
from coachtrack.schemas.report import TrendsResponse
from coachtrack.services.trend_aggregator import TrendAggregator

router = APIRouter(prefix="/api/v1", tags=["trends"])


@router.get("/clients/{client_id}/trends", response_model=TrendsResponse)
async def get_trends(
    client_id: UUID,
    metrics: list[str] | None = Query(None),
    principal: Principal = Depends(get_principal),
    aggregator: TrendAggregator = Depends(get_trend_aggregator),
):
    """Chronological values; repeat ?metrics= to restrict, omit for all metrics."""
    trends = await aggregator.trends(client_id, principal, metrics)
    return TrendsResponse(client_id=client_id, trends=trends)
