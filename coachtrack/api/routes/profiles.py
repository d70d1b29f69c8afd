"""Profile Routes — coach/client registration, profile CRUD, coach rosters.

Invariants:
    - Registration commits before the invitation is scheduled (background task)
    - Routes never decide access; ProfileRegistry raises CoachTrackError subclasses
      and api/error_handlers.py maps them to status codes
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from coachtrack.api.deps import (
    get_invitation_sender, get_now, get_principal, get_profile_registry,
)
from coachtrack.core.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from coachtrack.core.records import Principal
from coachtrack.core.repository_protocols import InvitationSender
from coachtrack.infrastructure.database import get_db
from coachtrack.schemas.profile import (
    ClientCreate, CoachCreate, ProfilePage, ProfileResponse, ProfileUpdate,
)
from coachtrack.services.invitations import send_invitation
from coachtrack.services.profile_registry import ProfileRegistry

router = APIRouter(prefix="/api/v1", tags=["profiles"])


@router.post(
    "/coaches", response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_coach(
    body: CoachCreate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(get_principal),
    registry: ProfileRegistry = Depends(get_profile_registry),
    sender: InvitationSender = Depends(get_invitation_sender),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    """Register a coach (admin only) and invite them by email."""
    profile = await registry.create_coach(
        principal, body.full_name, body.email, now, bio=body.bio,
    )
    await db.commit()
    background_tasks.add_task(
        send_invitation, sender, profile_id=profile.id, email=profile.email, phone=None,
    )
    return ProfileResponse.from_record(profile)


@router.post(
    "/clients", response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_client(
    body: ClientCreate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(get_principal),
    registry: ProfileRegistry = Depends(get_profile_registry),
    sender: InvitationSender = Depends(get_invitation_sender),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    """Register a client for the calling coach and invite them."""
    profile = await registry.create_client(
        principal, body.full_name, body.phone, now,
        email=body.email, date_of_birth=body.date_of_birth, gender=body.gender,
    )
    await db.commit()
    background_tasks.add_task(
        send_invitation, sender,
        profile_id=profile.id, email=profile.email, phone=profile.phone,
    )
    return ProfileResponse.from_record(profile)


@router.get("/me", response_model=ProfileResponse)
async def get_me(
    principal: Principal = Depends(get_principal),
    registry: ProfileRegistry = Depends(get_profile_registry),
):
    return ProfileResponse.from_record(
        await registry.get_profile(principal, principal.id),
    )


@router.get("/profiles/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: UUID,
    principal: Principal = Depends(get_principal),
    registry: ProfileRegistry = Depends(get_profile_registry),
):
    return ProfileResponse.from_record(
        await registry.get_profile(principal, profile_id),
    )


@router.patch("/profiles/{profile_id}", response_model=ProfileResponse)
async def update_profile(
    profile_id: UUID,
    body: ProfileUpdate,
    principal: Principal = Depends(get_principal),
    registry: ProfileRegistry = Depends(get_profile_registry),
    db: AsyncSession = Depends(get_db),
):
    profile = await registry.update_profile(
        principal, profile_id, body.model_dump(exclude_unset=True),
    )
    await db.commit()
    return ProfileResponse.from_record(profile)


@router.delete("/profiles/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_profile(
    profile_id: UUID,
    principal: Principal = Depends(get_principal),
    registry: ProfileRegistry = Depends(get_profile_registry),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    await registry.soft_delete_profile(principal, profile_id, now)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/coaches/{coach_id}/clients", response_model=ProfilePage)
async def list_clients(
    coach_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    missing_report_for_week: bool = Query(False),
    principal: Principal = Depends(get_principal),
    registry: ProfileRegistry = Depends(get_profile_registry),
    now: datetime = Depends(get_now),
):
    """A coach's active clients, newest assignment first."""
    result = await registry.list_clients(
        principal, coach_id, now,
        page=page, page_size=page_size,
        missing_report_for_week=missing_report_for_week,
    )
    return ProfilePage(
        items=[ProfileResponse.from_record(p) for p in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )
