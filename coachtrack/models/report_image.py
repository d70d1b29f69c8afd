"""ReportImage ORM — metadata for an image attached to a report.

Invariants:
    - Always belongs to a Report (report_id FK)
    - storage_path = reports/{report_id}/{image_id}.{jpg|png}
    - size_bytes <= 5 MB
    - is_deleted/deleted_at set together; rows are never removed except discarded pending uploads
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from coachtrack.db.base import Base


class ReportImage(Base):
    """Image attached to a weekly report."""
    __tablename__ = "report_images"
    __table_args__ = (
        CheckConstraint(
            "size_bytes > 0 AND size_bytes <= 5242880", name="ck_report_images_size",
        ),
        Index("ix_report_images_report_id", "report_id"),
        Index("ix_report_images_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    report_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("reports.id"), nullable=False,
    )
    storage_path: Mapped[str] = mapped_column(String(255), nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
