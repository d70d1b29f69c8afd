"""Report Routes — submit, list, get, edit and soft-delete weekly reports.

Invariants:
    - PATCH forwards only the fields present in the body (exclude_unset)
    - Every mutation commits after the service returns; failures roll back in get_db
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from coachtrack.api.deps import get_now, get_principal, get_report_lifecycle
from coachtrack.core.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from coachtrack.core.records import Measurements, Principal
from coachtrack.infrastructure.database import get_db
from coachtrack.schemas.report import (
    ReportCreate, ReportPage, ReportResponse, ReportUpdate,
)
from coachtrack.services.report_lifecycle import ReportLifecycle

router = APIRouter(prefix="/api/v1", tags=["reports"])


@router.post(
    "/clients/{client_id}/reports", response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_report(
    client_id: UUID,
    body: ReportCreate,
    principal: Principal = Depends(get_principal),
    lifecycle: ReportLifecycle = Depends(get_report_lifecycle),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    report = await lifecycle.submit(
        principal, client_id, Measurements(**body.model_dump()), now,
    )
    await db.commit()
    return ReportResponse.from_record(report)


@router.get("/clients/{client_id}/reports", response_model=ReportPage)
async def list_reports(
    client_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    principal: Principal = Depends(get_principal),
    lifecycle: ReportLifecycle = Depends(get_report_lifecycle),
):
    """Newest first; listing omits note and images."""
    result = await lifecycle.list(client_id, principal, page, page_size)
    return ReportPage.from_page(result)


@router.get("/reports/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: UUID,
    principal: Principal = Depends(get_principal),
    lifecycle: ReportLifecycle = Depends(get_report_lifecycle),
):
    return ReportResponse.from_record(await lifecycle.get(report_id, principal))


@router.patch("/reports/{report_id}", response_model=ReportResponse)
async def edit_report(
    report_id: UUID,
    body: ReportUpdate,
    principal: Principal = Depends(get_principal),
    lifecycle: ReportLifecycle = Depends(get_report_lifecycle),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    report = await lifecycle.edit(
        report_id, body.model_dump(exclude_unset=True), principal, now,
    )
    await db.commit()
    return ReportResponse.from_record(report)


@router.delete("/reports/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(
    report_id: UUID,
    principal: Principal = Depends(get_principal),
    lifecycle: ReportLifecycle = Depends(get_report_lifecycle),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    await lifecycle.soft_delete(report_id, principal, now)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
