"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ProfileId, ReportId, ImageId wrap UUIDs — never use bare UUID in domain logic
    - All valid states encoded as Enums — no raw string matching
    - Metric lists the seven body measurements plus cardio_days, in display order

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

ProfileId = NewType("ProfileId", UUID)
ReportId = NewType("ReportId", UUID)
ImageId = NewType("ImageId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Principal roles — maps to DB `profiles.role` column."""
    ADMIN = "admin"
    COACH = "coach"
    CLIENT = "client"


class Operation(str, Enum):
    """Operations the access policy decides on."""
    READ = "read"
    CREATE_REPORT = "create_report"
    EDIT_REPORT = "edit_report"
    DELETE_REPORT = "delete_report"
    UPLOAD_IMAGE = "upload_image"
    DELETE_IMAGE = "delete_image"
    UPDATE_PROFILE = "update_profile"
    DELETE_PROFILE = "delete_profile"
    MANAGE_ASSIGNMENT = "manage_assignment"


class AccessDecision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


class Metric(str, Enum):
    """Trend-able report fields."""
    WEIGHT = "weight"
    WAIST = "waist"
    CHEST = "chest"
    BICEPS_LEFT = "biceps_left"
    BICEPS_RIGHT = "biceps_right"
    THIGH_LEFT = "thigh_left"
    THIGH_RIGHT = "thigh_right"
    CARDIO_DAYS = "cardio_days"


class ImageContentType(str, Enum):
    """Accepted upload content types, mapped to storage file extensions."""
    JPEG = "image/jpeg"
    PNG = "image/png"

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageContentType.JPEG else "png"
