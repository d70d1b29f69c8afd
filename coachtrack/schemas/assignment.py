"""Assignment Schemas — coach-client link state."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from coachtrack.core.records import Assignment


class AssignmentResponse(BaseModel):
    coach_id: UUID
    client_id: UUID
    started_at: datetime
    is_active: bool

    @classmethod
    def from_record(cls, assignment: Assignment) -> "AssignmentResponse":
        return cls(
            coach_id=assignment.coach_id,
            client_id=assignment.client_id,
            started_at=assignment.started_at,
            is_active=assignment.is_active,
        )
