"""API Dependencies — per-request wiring of repositories, gateways and services.

Invariants:
    - One AsyncSession per request (FastAPI caches Depends(get_db) within a request),
      shared by every repository the request touches
    - get_principal raises UnauthenticatedError; it never returns an anonymous principal
    - get_now is the only clock the routes read, so tests can pin time

Design Decisions:
    - Gateways built from settings in small factories: tests swap them through
      app.dependency_overrides instead of monkeypatching modules
"""

from datetime import datetime, timezone

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from coachtrack.config import get_settings
from coachtrack.core.records import Principal
from coachtrack.core.repository_protocols import AuthGateway, InvitationSender, ObjectStorage
from coachtrack.infrastructure.database import get_db
from coachtrack.infrastructure.sql_repositories import (
    SqlAssignmentRepository, SqlProfileRepository,
    SqlReportImageRepository, SqlReportRepository,
)
from coachtrack.infrastructure.storage_gateway import (
    HttpAuthGateway, HttpInvitationSender, HttpObjectStorage,
)
from coachtrack.services.access_control import AccessControl
from coachtrack.services.assignment_directory import AssignmentDirectory
from coachtrack.services.identity import IdentityResolver
from coachtrack.services.image_attachments import ImageAttachments
from coachtrack.services.profile_registry import ProfileRegistry
from coachtrack.services.report_lifecycle import ReportLifecycle
from coachtrack.services.trend_aggregator import TrendAggregator


def get_now() -> datetime:
    return datetime.now(timezone.utc)


# ─── Gateways ────────────────────────────────────────────────────

def get_object_storage() -> ObjectStorage:
    settings = get_settings()
    return HttpObjectStorage(
        settings.storage_base_url,
        settings.storage_service_key,
        settings.storage_bucket,
        timeout_seconds=settings.gateway_timeout_seconds,
    )


def get_auth_gateway() -> AuthGateway:
    settings = get_settings()
    return HttpAuthGateway(
        settings.auth_base_url,
        settings.storage_service_key,
        timeout_seconds=settings.gateway_timeout_seconds,
    )


def get_invitation_sender() -> InvitationSender:
    settings = get_settings()
    return HttpInvitationSender(
        settings.auth_base_url,
        settings.storage_service_key,
        timeout_seconds=settings.gateway_timeout_seconds,
    )


# ─── Identity ────────────────────────────────────────────────────

def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_principal(
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
    auth: AuthGateway = Depends(get_auth_gateway),
) -> Principal:
    resolver = IdentityResolver(auth, SqlProfileRepository(db))
    return await resolver.resolve(_bearer_token(authorization))


# ─── Services ────────────────────────────────────────────────────

def get_access_control(db: AsyncSession = Depends(get_db)) -> AccessControl:
    return AccessControl(SqlAssignmentRepository(db))


def get_assignment_directory(
    db: AsyncSession = Depends(get_db),
    access: AccessControl = Depends(get_access_control),
) -> AssignmentDirectory:
    return AssignmentDirectory(
        SqlAssignmentRepository(db), SqlProfileRepository(db), access,
    )


def get_report_lifecycle(
    db: AsyncSession = Depends(get_db),
    access: AccessControl = Depends(get_access_control),
) -> ReportLifecycle:
    return ReportLifecycle(
        SqlReportRepository(db), SqlReportImageRepository(db),
        SqlProfileRepository(db), access,
    )


def get_image_attachments(
    db: AsyncSession = Depends(get_db),
    reports: ReportLifecycle = Depends(get_report_lifecycle),
    storage: ObjectStorage = Depends(get_object_storage),
) -> ImageAttachments:
    return ImageAttachments(reports, SqlReportImageRepository(db), storage)


def get_trend_aggregator(
    db: AsyncSession = Depends(get_db),
    access: AccessControl = Depends(get_access_control),
) -> TrendAggregator:
    return TrendAggregator(SqlReportRepository(db), access)


def get_profile_registry(
    db: AsyncSession = Depends(get_db),
    directory: AssignmentDirectory = Depends(get_assignment_directory),
    access: AccessControl = Depends(get_access_control),
) -> ProfileRegistry:
    return ProfileRegistry(SqlProfileRepository(db), directory, access)
