"""Assignment ORM — coach-client responsibility.

Invariants:
    - Composite primary key (coach_id, client_id): one row per pair
    - Deactivation flips is_active; rows are never deleted
    - Reactivation restarts started_at on the same row
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from coachtrack.db.base import Base


class CoachClientAssignment(Base):
    """Link between a coach and a client."""
    __tablename__ = "coach_client_assignments"
    __table_args__ = (
        Index("ix_assignments_client_id", "client_id"),
    )

    coach_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), primary_key=True,
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), primary_key=True,
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
