"""Report Schemas — submission, partial edit, detail/list views, images and trends.

Invariants:
    - Measurements >= 0 with per-field upper bounds (weight 1000, waist/chest 500,
      biceps 200, thigh 300); cardio_days integer 0-7; note <= 1000 chars
    - ReportUpdate is read with exclude_unset: omitted fields stay untouched,
      an explicit null note clears it
    - Listing responses never include note or images

Design Decisions:
    - Bounds duplicated from core/report_rules.py on purpose: Pydantic rejects at the
      boundary with field-level details, the core still re-validates for other callers
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from coachtrack.core.image_rules import MAX_IMAGE_BYTES
from coachtrack.core.records import (
    REPORT_VALUE_FIELDS, Page, Report, ReportImage, ReportSummary, UploadTicket,
)


class ReportValues(BaseModel):
    weight: float | None = Field(None, ge=0, le=1000)
    waist: float | None = Field(None, ge=0, le=500)
    chest: float | None = Field(None, ge=0, le=500)
    biceps_left: float | None = Field(None, ge=0, le=200)
    biceps_right: float | None = Field(None, ge=0, le=200)
    thigh_left: float | None = Field(None, ge=0, le=300)
    thigh_right: float | None = Field(None, ge=0, le=300)
    cardio_days: int | None = Field(None, ge=0, le=7)
    note: str | None = Field(None, max_length=1000)


class ReportCreate(ReportValues):
    """New weekly report; every value is optional."""


class ReportUpdate(ReportValues):
    """Partial edit of a report."""
    model_config = ConfigDict(extra="forbid")


class ImageResponse(BaseModel):
    id: UUID
    storage_path: str
    size_bytes: int
    width: int | None = None
    height: int | None = None
    created_at: datetime

    @classmethod
    def from_record(cls, image: ReportImage) -> "ImageResponse":
        return cls(
            id=image.id,
            storage_path=image.storage_path,
            size_bytes=image.size_bytes,
            width=image.width,
            height=image.height,
            created_at=image.created_at,
        )


class ReportSummaryResponse(BaseModel):
    id: UUID
    client_id: UUID
    created_at: datetime
    year: int
    week_number: int
    sequence: int
    weight: float | None = None
    waist: float | None = None
    chest: float | None = None
    biceps_left: float | None = None
    biceps_right: float | None = None
    thigh_left: float | None = None
    thigh_right: float | None = None
    cardio_days: int | None = None

    @classmethod
    def from_record(cls, report: ReportSummary) -> "ReportSummaryResponse":
        return cls(
            id=report.id,
            client_id=report.client_id,
            created_at=report.created_at,
            year=report.year,
            week_number=report.week_number,
            sequence=report.sequence,
            **{name: getattr(report, name) for name in REPORT_VALUE_FIELDS},
        )


class ReportResponse(ReportSummaryResponse):
    note: str | None = None
    images: list[ImageResponse] = []

    @classmethod
    def from_record(cls, report: Report) -> "ReportResponse":
        base = ReportSummaryResponse.from_record(report)
        return cls(
            **base.model_dump(),
            note=report.note,
            images=[ImageResponse.from_record(i) for i in report.images],
        )


class ReportPage(BaseModel):
    items: list[ReportSummaryResponse]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page[ReportSummary]) -> "ReportPage":
        return cls(
            items=[ReportSummaryResponse.from_record(r) for r in page.items],
            total=page.total,
            page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
        )


# ─── Images ──────────────────────────────────────────────────────

class UploadRequest(BaseModel):
    """Image upload request; the core checks content type and the per-report ceiling."""
    content_type: str = Field(min_length=1, max_length=100)
    size_bytes: int = Field(ge=1, le=MAX_IMAGE_BYTES)
    width: int | None = Field(None, ge=1)
    height: int | None = Field(None, ge=1)


class UploadResponse(BaseModel):
    image_id: UUID
    storage_path: str
    upload_url: str

    @classmethod
    def from_ticket(cls, ticket: UploadTicket) -> "UploadResponse":
        return cls(
            image_id=ticket.image_id,
            storage_path=ticket.storage_path,
            upload_url=ticket.upload_url,
        )


# ─── Trends ──────────────────────────────────────────────────────

class TrendsResponse(BaseModel):
    client_id: UUID
    trends: dict[str, list[int | float]]
