"""Initial schema — profiles, role extensions, assignments, reports, report images.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _measurement(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(6, 2), nullable=True)


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("role", sa.String(10), nullable=False),
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("role IN ('admin', 'coach', 'client')", name="ck_profiles_role"),
    )
    op.create_index(
        "uq_profiles_live_email", "profiles", ["email"], unique=True,
        postgresql_where=sa.text("deleted_at IS NULL AND email IS NOT NULL"),
    )
    op.create_index(
        "uq_profiles_live_phone", "profiles", ["phone"], unique=True,
        postgresql_where=sa.text("deleted_at IS NULL AND phone IS NOT NULL"),
    )

    op.create_table(
        "coach_profiles",
        sa.Column("id", UUID(as_uuid=True), sa.ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("bio", sa.String(500), nullable=True),
    )

    op.create_table(
        "client_profiles",
        sa.Column("id", UUID(as_uuid=True), sa.ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
    )

    op.create_table(
        "coach_client_assignments",
        sa.Column("coach_id", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), primary_key=True),
        sa.Column("client_id", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), primary_key=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
    )
    op.create_index("ix_assignments_client_id", "coach_client_assignments", ["client_id"])

    op.create_table(
        "reports",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("client_id", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("week_number", sa.SmallInteger, nullable=False),
        sa.Column("sequence", sa.SmallInteger, nullable=False),
        _measurement("weight"),
        _measurement("waist"),
        _measurement("chest"),
        _measurement("biceps_left"),
        _measurement("biceps_right"),
        _measurement("thigh_left"),
        _measurement("thigh_right"),
        sa.Column("cardio_days", sa.SmallInteger, nullable=True),
        sa.Column("note", sa.Text, nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("sequence IN (0, 1)", name="ck_reports_sequence"),
        sa.CheckConstraint(
            "cardio_days IS NULL OR (cardio_days >= 0 AND cardio_days <= 7)",
            name="ck_reports_cardio_days",
        ),
    )
    op.create_index(
        "uq_reports_live_week_sequence", "reports",
        ["client_id", "year", "week_number", "sequence"], unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
    )
    op.create_index("ix_reports_client_created", "reports", ["client_id", "created_at"])

    op.create_table(
        "report_images",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("report_id", UUID(as_uuid=True), sa.ForeignKey("reports.id"), nullable=False),
        sa.Column("storage_path", sa.String(255), nullable=False),
        sa.Column("size_bytes", sa.Integer, nullable=False),
        sa.Column("width", sa.Integer, nullable=True),
        sa.Column("height", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "size_bytes > 0 AND size_bytes <= 5242880", name="ck_report_images_size",
        ),
    )
    op.create_index("ix_report_images_report_id", "report_images", ["report_id"])
    op.create_index("ix_report_images_created_at", "report_images", ["created_at"])


def downgrade() -> None:
    op.drop_table("report_images")
    op.drop_table("reports")
    op.drop_table("coach_client_assignments")
    op.drop_table("client_profiles")
    op.drop_table("coach_profiles")
    op.drop_table("profiles")
