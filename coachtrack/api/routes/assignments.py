"""Assignment Routes — activate/deactivate a coach-client link.

Invariants:
    - PUT is idempotent (activate restarts started_at); DELETE deactivates, never removes
    - Only the coach themself or an admin may manage a coach's assignments
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coachtrack.api.deps import get_assignment_directory, get_now, get_principal
from coachtrack.core.records import Principal
from coachtrack.infrastructure.database import get_db
from coachtrack.schemas.assignment import AssignmentResponse
from coachtrack.services.assignment_directory import AssignmentDirectory

router = APIRouter(prefix="/api/v1/assignments", tags=["assignments"])


@router.put("/{coach_id}/{client_id}", response_model=AssignmentResponse)
async def activate_assignment(
    coach_id: UUID,
    client_id: UUID,
    principal: Principal = Depends(get_principal),
    directory: AssignmentDirectory = Depends(get_assignment_directory),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    assignment = await directory.activate_for(principal, coach_id, client_id, now)
    await db.commit()
    return AssignmentResponse.from_record(assignment)


@router.delete("/{coach_id}/{client_id}", response_model=AssignmentResponse)
async def deactivate_assignment(
    coach_id: UUID,
    client_id: UUID,
    principal: Principal = Depends(get_principal),
    directory: AssignmentDirectory = Depends(get_assignment_directory),
    db: AsyncSession = Depends(get_db),
):
    assignment = await directory.deactivate_for(principal, coach_id, client_id)
    await db.commit()
    return AssignmentResponse.from_record(assignment)
