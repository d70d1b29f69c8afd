"""Profile Rules — field bounds and role-specific update whitelists.

Invariants:
    - full_name is 1..100 characters after trimming
    - phone <= 20, gender <= 20, bio <= 500 characters
    - Role-specific fields only for the matching role: bio (coach), date_of_birth/gender (client)
    - Empty update → InputValidationError
    - Updates never null a required field: full_name, email (coach), phone (client)
"""

from collections.abc import Mapping
from datetime import date
from typing import Any

from coachtrack.core.domain_types import Role
from coachtrack.core.errors import InputValidationError


FULL_NAME_MAX_LENGTH: int = 100
PHONE_MAX_LENGTH: int = 20
GENDER_MAX_LENGTH: int = 20
BIO_MAX_LENGTH: int = 500

BASE_FIELDS: frozenset[str] = frozenset({"full_name", "email", "phone"})
EXTENSION_FIELDS: dict[Role, frozenset[str]] = {
    Role.ADMIN: frozenset(),
    Role.COACH: frozenset({"bio"}),
    Role.CLIENT: frozenset({"date_of_birth", "gender"}),
}
# Fields registration requires; an update may change them but never clear them.
REQUIRED_FIELDS: dict[Role, frozenset[str]] = {
    Role.ADMIN: frozenset({"full_name"}),
    Role.COACH: frozenset({"full_name", "email"}),
    Role.CLIENT: frozenset({"full_name", "phone"}),
}

_MAX_LENGTHS: dict[str, int] = {
    "phone": PHONE_MAX_LENGTH,
    "gender": GENDER_MAX_LENGTH,
    "bio": BIO_MAX_LENGTH,
}


def normalize_full_name(full_name: Any) -> str:
    if not isinstance(full_name, str) or not full_name.strip():
        raise InputValidationError("full_name is required", field="full_name")
    name = full_name.strip()
    if len(name) > FULL_NAME_MAX_LENGTH:
        raise InputValidationError(
            f"full_name cannot exceed {FULL_NAME_MAX_LENGTH} characters", field="full_name",
        )
    return name


def _validate_optional_text(name: str, value: Any) -> None:
    if value is None:
        return
    if not isinstance(value, str):
        raise InputValidationError(f"{name} must be a string", field=name)
    limit = _MAX_LENGTHS.get(name)
    if limit is not None and len(value) > limit:
        raise InputValidationError(f"{name} cannot exceed {limit} characters", field=name)


def _validate_email(value: Any) -> None:
    if value is None:
        return
    if not isinstance(value, str) or "@" not in value:
        raise InputValidationError("email must be a valid address", field="email")


def validate_profile_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Validate known profile fields; returns a copy with full_name normalized."""
    cleaned = dict(fields)
    if "full_name" in cleaned:
        cleaned["full_name"] = normalize_full_name(cleaned["full_name"])
    _validate_email(cleaned.get("email"))
    for name in ("phone", "gender", "bio"):
        _validate_optional_text(name, cleaned.get(name))
    dob = cleaned.get("date_of_birth")
    if dob is not None and not isinstance(dob, date):
        raise InputValidationError("date_of_birth must be a date", field="date_of_birth")
    return cleaned


def build_profile_changes(role: Role, patch: Mapping[str, Any]) -> dict[str, Any]:
    """Whitelist and validate a partial profile update for a profile of `role`."""
    if not patch:
        raise InputValidationError("No valid fields provided for update")
    allowed = BASE_FIELDS | EXTENSION_FIELDS[role]
    rejected = sorted(set(patch) - allowed)
    if rejected:
        raise InputValidationError(
            f"Field '{rejected[0]}' cannot be updated on a {role.value} profile",
            field=rejected[0],
        )
    for name in sorted(REQUIRED_FIELDS[role]):
        if name in patch and patch[name] is None:
            raise InputValidationError(f"{name} cannot be null", field=name)
    return validate_profile_fields(patch)
