"""Domain Records — plain dataclasses exchanged between core, services and repositories.

Invariants:
    - Records are detached from the ORM: repositories map rows to these before returning
    - Principal is immutable per request
    - Profile extension is a tagged variant keyed by role: CoachExtension for coaches,
      ClientExtension for clients, None for admins
    - All datetimes are timezone-aware UTC

Design Decisions:
    - Dataclasses over ORM objects in the core: rules stay testable without a database
    - ReportSummary/Report split mirrors list vs detail views (list omits note and images)
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Generic, TypeVar
from uuid import UUID

from coachtrack.core.domain_types import Role

T = TypeVar("T")

MEASUREMENT_FIELDS: tuple[str, ...] = (
    "weight", "waist", "chest",
    "biceps_left", "biceps_right",
    "thigh_left", "thigh_right",
)
REPORT_VALUE_FIELDS: tuple[str, ...] = MEASUREMENT_FIELDS + ("cardio_days",)
REPORT_EDITABLE_FIELDS: tuple[str, ...] = REPORT_VALUE_FIELDS + ("note",)


@dataclass(frozen=True)
class Principal:
    """The authenticated actor making a request."""
    id: UUID
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# ─── Profiles ────────────────────────────────────────────────────

@dataclass
class CoachExtension:
    bio: str | None = None


@dataclass
class ClientExtension:
    date_of_birth: date | None = None
    gender: str | None = None


@dataclass
class Profile:
    id: UUID
    role: Role
    full_name: str
    created_at: datetime
    email: str | None = None
    phone: str | None = None
    deleted_at: datetime | None = None
    extension: CoachExtension | ClientExtension | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


# ─── Assignments ─────────────────────────────────────────────────

@dataclass
class Assignment:
    coach_id: UUID
    client_id: UUID
    started_at: datetime
    is_active: bool = True


# ─── Reports ─────────────────────────────────────────────────────

@dataclass
class Measurements:
    """Report values supplied at submission time."""
    weight: float | None = None
    waist: float | None = None
    chest: float | None = None
    biceps_left: float | None = None
    biceps_right: float | None = None
    thigh_left: float | None = None
    thigh_right: float | None = None
    cardio_days: int | None = None
    note: str | None = None


@dataclass
class ReportImage:
    id: UUID
    report_id: UUID
    storage_path: str
    size_bytes: int
    created_at: datetime
    width: int | None = None
    height: int | None = None
    is_deleted: bool = False
    deleted_at: datetime | None = None


@dataclass
class ReportSummary:
    """Report as shown in listings — no note, no images."""
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
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass
class Report(ReportSummary):
    """Full report detail."""
    note: str | None = None
    images: list[ReportImage] = field(default_factory=list)

    def summary(self) -> ReportSummary:
        return ReportSummary(
            id=self.id,
            client_id=self.client_id,
            created_at=self.created_at,
            year=self.year,
            week_number=self.week_number,
            sequence=self.sequence,
            deleted_at=self.deleted_at,
            **{name: getattr(self, name) for name in REPORT_VALUE_FIELDS},
        )


@dataclass(frozen=True)
class UploadTicket:
    """Result of a successful upload request."""
    image_id: UUID
    storage_path: str
    upload_url: str


# ─── Pagination ──────────────────────────────────────────────────

@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.page_size) if self.page_size else 0
