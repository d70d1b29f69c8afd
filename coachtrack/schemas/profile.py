"""Profile Schemas — Pydantic models for coach/client registration and profile views.

Invariants:
    - full_name: 1-100 chars, stripped, non-empty
    - phone <= 20, gender <= 20, bio <= 500 chars; date_of_birth is an ISO date
    - ProfileUpdate forbids unknown fields; role-specific fields are checked by the core

Design Decisions:
    - Email checked with a simple pattern: delivery is verified by the invitation itself
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from coachtrack.core.domain_types import Role
from coachtrack.core.records import ClientExtension, CoachExtension, Profile

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _strip_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("full_name cannot be empty or whitespace")
    return v


class CoachCreate(BaseModel):
    """Coach registration (admin only)."""
    full_name: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    bio: str | None = Field(None, max_length=500)

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, v: str) -> str:
        return _strip_name(v)


class ClientCreate(BaseModel):
    """Client registration (coach only); the creating coach is assigned."""
    full_name: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=20)
    email: str | None = Field(None, pattern=EMAIL_PATTERN, max_length=255)
    date_of_birth: date | None = None
    gender: str | None = Field(None, max_length=20)

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, v: str) -> str:
        return _strip_name(v)


class ProfileUpdate(BaseModel):
    """Partial profile update — only fields present in the body are applied."""
    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(None, min_length=1, max_length=100)
    email: str | None = Field(None, pattern=EMAIL_PATTERN, max_length=255)
    phone: str | None = Field(None, max_length=20)
    bio: str | None = Field(None, max_length=500)
    date_of_birth: date | None = None
    gender: str | None = Field(None, max_length=20)


class ProfileResponse(BaseModel):
    """Profile with its role extension flattened."""
    id: UUID
    role: Role
    full_name: str
    email: str | None = None
    phone: str | None = None
    created_at: datetime
    bio: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None

    @classmethod
    def from_record(cls, profile: Profile) -> "ProfileResponse":
        extra: dict = {}
        if isinstance(profile.extension, CoachExtension):
            extra["bio"] = profile.extension.bio
        elif isinstance(profile.extension, ClientExtension):
            extra["date_of_birth"] = profile.extension.date_of_birth
            extra["gender"] = profile.extension.gender
        return cls(
            id=profile.id,
            role=profile.role,
            full_name=profile.full_name,
            email=profile.email,
            phone=profile.phone,
            created_at=profile.created_at,
            **extra,
        )


class ProfilePage(BaseModel):
    items: list[ProfileResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
