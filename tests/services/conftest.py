"""Service test fixtures — async DB, gateway fakes, seeded people, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - db_manager patched so the readiness probe sees the test engine
    - Gateways (storage, auth, invitations) replaced by in-memory fakes; no network
    - The clock is pinned: get_now returns clock.now, tests advance it explicitly

Design Decisions:
    - SQLite in-memory: fast, no external dependency, partial unique indexes are
      declared for SQLite too so the live-week constraint is exercised here
    - Seeded profiles committed before the test body runs: a rollback inside a
      service (unique-key race) never wipes the fixtures
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from coachtrack.api.deps import (
    get_auth_gateway, get_invitation_sender, get_now, get_object_storage,
)
from coachtrack.core.domain_types import Role
from coachtrack.core.records import (
    Assignment, ClientExtension, CoachExtension, Principal, Profile,
)
from coachtrack.db.base import Base
from coachtrack.infrastructure.database import get_db, DatabaseSessionManager
from coachtrack.infrastructure.sql_repositories import (
    SqlAssignmentRepository, SqlProfileRepository,
    SqlReportImageRepository, SqlReportRepository,
)
from coachtrack.services.access_control import AccessControl
from coachtrack.services.assignment_directory import AssignmentDirectory
from coachtrack.services.image_attachments import ImageAttachments
from coachtrack.services.profile_registry import ProfileRegistry
from coachtrack.services.report_lifecycle import ReportLifecycle
from coachtrack.services.trend_aggregator import TrendAggregator
import coachtrack.infrastructure.database as db_module
import coachtrack.models  # noqa: F401  (registers every table on Base.metadata)
from coachtrack.main import app

MONDAY_8AM = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)


# ─── Gateway fakes ───────────────────────────────────────────────

class FakeStorage:
    """ObjectStorage that records calls; deletes can be made to fail."""

    def __init__(self):
        self.signed: list[str] = []
        self.deleted: list[str] = []
        self.fail_deletes = False

    async def create_upload_url(self, storage_path: str) -> str:
        self.signed.append(storage_path)
        return f"https://storage.test/upload/{storage_path}?token=signed"

    async def delete(self, storage_paths: list[str]) -> None:
        if self.fail_deletes:
            raise ConnectionError("storage unreachable")
        self.deleted.extend(storage_paths)


class FakeAuth:
    """AuthGateway over a token → user id mapping."""

    def __init__(self):
        self.tokens: dict[str, UUID] = {}

    async def resolve_user_id(self, access_token: str) -> UUID | None:
        return self.tokens.get(access_token)


class FakeInviter:
    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    async def invite(self, *, profile_id, email, phone) -> None:
        if self.fail:
            raise RuntimeError("mailer down")
        self.sent.append({"profile_id": profile_id, "email": email, "phone": phone})


@dataclass
class Clock:
    now: datetime = MONDAY_8AM


@dataclass
class People:
    """Seeded principals. coach manages client; other_coach manages other_client."""
    admin: Principal
    coach: Principal
    client: Principal
    other_coach: Principal
    other_client: Principal
    tokens: dict[str, str] = field(default_factory=dict)

    def auth(self, name: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.tokens[name]}"}


# ─── Database ────────────────────────────────────────────────────

@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


# ─── Fakes & clock ───────────────────────────────────────────────

@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def auth():
    return FakeAuth()


@pytest.fixture
def inviter():
    return FakeInviter()


@pytest.fixture
def clock():
    return Clock()


# ─── Seeded people ───────────────────────────────────────────────

async def _seed_profile(
    db: AsyncSession, role: Role, name: str, *,
    email: str | None = None, phone: str | None = None,
) -> Principal:
    extension = None
    if role == Role.COACH:
        extension = CoachExtension()
    elif role == Role.CLIENT:
        extension = ClientExtension()
    profile = await SqlProfileRepository(db).create(Profile(
        id=uuid4(), role=role, full_name=name, email=email, phone=phone,
        created_at=MONDAY_8AM, extension=extension,
    ))
    return Principal(id=profile.id, role=role)


@pytest.fixture
async def people(test_db, auth) -> People:
    admin = await _seed_profile(test_db, Role.ADMIN, "Ada Admin", email="admin@example.com")
    coach = await _seed_profile(test_db, Role.COACH, "Carl Coach", email="coach@example.com")
    other_coach = await _seed_profile(
        test_db, Role.COACH, "Olga Coach", email="olga@example.com",
    )
    client = await _seed_profile(test_db, Role.CLIENT, "Cleo Client", phone="+5511900000001")
    other_client = await _seed_profile(
        test_db, Role.CLIENT, "Otto Client", phone="+5511900000002",
    )
    assignments = SqlAssignmentRepository(test_db)
    await assignments.insert(Assignment(coach.id, client.id, MONDAY_8AM, True))
    await assignments.insert(Assignment(other_coach.id, other_client.id, MONDAY_8AM, True))
    await test_db.commit()

    seeded = People(
        admin=admin, coach=coach, client=client,
        other_coach=other_coach, other_client=other_client,
    )
    for name in ("admin", "coach", "client", "other_coach", "other_client"):
        token = f"{name}-token"
        seeded.tokens[name] = token
        auth.tokens[token] = getattr(seeded, name).id
    return seeded


# ─── Services over the test session ──────────────────────────────

@pytest.fixture
def access(test_db):
    return AccessControl(SqlAssignmentRepository(test_db))


@pytest.fixture
def directory(test_db, access):
    return AssignmentDirectory(
        SqlAssignmentRepository(test_db), SqlProfileRepository(test_db), access,
    )


@pytest.fixture
def lifecycle(test_db, access):
    return ReportLifecycle(
        SqlReportRepository(test_db), SqlReportImageRepository(test_db),
        SqlProfileRepository(test_db), access,
    )


@pytest.fixture
def attachments(test_db, lifecycle, storage):
    return ImageAttachments(lifecycle, SqlReportImageRepository(test_db), storage)


@pytest.fixture
def aggregator(test_db, access):
    return TrendAggregator(SqlReportRepository(test_db), access)


@pytest.fixture
def registry(test_db, directory, access):
    return ProfileRegistry(SqlProfileRepository(test_db), directory, access)


# ─── API client ──────────────────────────────────────────────────

@pytest.fixture
async def client(test_engine, test_session_factory, storage, auth, inviter, clock):
    """FastAPI test client with DB, gateways and clock overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_object_storage] = lambda: storage
    app.dependency_overrides[get_auth_gateway] = lambda: auth
    app.dependency_overrides[get_invitation_sender] = lambda: inviter
    app.dependency_overrides[get_now] = lambda: clock.now

    # Patch db_manager for the readiness probe
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
