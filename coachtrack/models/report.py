"""Report ORM — weekly progress report.

Invariants:
    - (year, week_number) is the ISO week of created_at, stored at insert time
    - sequence ∈ {0, 1}; unique per (client_id, year, week_number) among live rows
    - Measurements are non-negative; cardio_days ∈ [0, 7]
    - deleted_at set = soft-deleted

Design Decisions:
    - Partial unique index WHERE deleted_at IS NULL backstops the racy quota check:
      a soft-deleted report frees its slot, a concurrent duplicate fails the insert
    - Numeric(asdecimal=False): exact storage, floats in Python
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric,
    SmallInteger, Text, text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from coachtrack.db.base import Base


def _measurement():
    return mapped_column(Numeric(6, 2, asdecimal=False), nullable=True)


class Report(Base):
    """Weekly progress report submitted by a client."""
    __tablename__ = "reports"
    __table_args__ = (
        CheckConstraint("sequence IN (0, 1)", name="ck_reports_sequence"),
        CheckConstraint(
            "cardio_days IS NULL OR (cardio_days >= 0 AND cardio_days <= 7)",
            name="ck_reports_cardio_days",
        ),
        Index(
            "uq_reports_live_week_sequence",
            "client_id", "year", "week_number", "sequence",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
        Index("ix_reports_client_created", "client_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    week_number: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    sequence: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    weight: Mapped[float | None] = _measurement()
    waist: Mapped[float | None] = _measurement()
    chest: Mapped[float | None] = _measurement()
    biceps_left: Mapped[float | None] = _measurement()
    biceps_right: Mapped[float | None] = _measurement()
    thigh_left: Mapped[float | None] = _measurement()
    thigh_right: Mapped[float | None] = _measurement()
    cardio_days: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
