"""Profile ORM — base profile row plus one role-specific extension table.

Invariants:
    - id is the authenticated user id (UUID primary key)
    - role is one of admin / coach / client
    - coach_profiles and client_profiles share the base id (one-to-one, same PK)
    - email and phone are unique among live profiles (partial unique indexes)
    - deleted_at set = soft-deleted; rows are never removed

Design Decisions:
    - Extension tables over single-table nullable columns: keeps role-specific
      fields out of admin rows (ADR: tagged variant in the domain, join in the adapter)
    - lazy="selectin" on extensions: one extra query, no async lazy-load surprises
"""

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, String, Date, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from coachtrack.db.base import Base


class Profile(Base):
    """Base profile shared by every role."""
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'coach', 'client')", name="ck_profiles_role"),
        Index(
            "uq_profiles_live_email", "email", unique=True,
            postgresql_where=text("deleted_at IS NULL AND email IS NOT NULL"),
            sqlite_where=text("deleted_at IS NULL AND email IS NOT NULL"),
        ),
        Index(
            "uq_profiles_live_phone", "phone", unique=True,
            postgresql_where=text("deleted_at IS NULL AND phone IS NOT NULL"),
            sqlite_where=text("deleted_at IS NULL AND phone IS NOT NULL"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    role: Mapped[str] = mapped_column(String(10), nullable=False)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    coach_profile: Mapped[Optional["CoachProfile"]] = relationship(
        "CoachProfile", uselist=False, lazy="selectin",
        cascade="all, delete-orphan",
    )
    client_profile: Mapped[Optional["ClientProfile"]] = relationship(
        "ClientProfile", uselist=False, lazy="selectin",
        cascade="all, delete-orphan",
    )


class CoachProfile(Base):
    """Coach extension."""
    __tablename__ = "coach_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True,
    )
    bio: Mapped[str | None] = mapped_column(String(500), nullable=True)


class ClientProfile(Base):
    """Client extension."""
    __tablename__ = "client_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True,
    )
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
