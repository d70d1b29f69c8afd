"""Report Rules — weekly quota, sequence numbering, edit window, value validation.

Invariants:
    - At most WEEKLY_REPORT_QUOTA (2) live reports per client per ISO week
    - New sequence = lowest free slot among live reports of the week (0 then 1)
    - Non-admin edits require sequence == 0, no second live report that week,
      and now - created_at < EDIT_WINDOW (1h); exactly 1h00m00s is already closed
    - Partial updates: omitted fields untouched, explicit None only clears the note
    - All functions are pure; the shell supplies counts and timestamps

Design Decisions:
    - Quota counts live reports only, so a soft-deleted report frees its slot
    - Upper bounds mirror the request validation of the reporting form; they are
      enforced here too so every entry point shares them
"""

from collections.abc import Collection, Mapping
from datetime import datetime, timedelta
from numbers import Real
from typing import Any

from coachtrack.core.errors import (
    EditWindowClosedError, InputValidationError, WeeklyQuotaExceededError,
)
from coachtrack.core.iso_week import WeekKey, ensure_utc
from coachtrack.core.records import (
    MEASUREMENT_FIELDS, REPORT_EDITABLE_FIELDS, Principal, Report,
)


WEEKLY_REPORT_QUOTA: int = 2
EDIT_WINDOW: timedelta = timedelta(hours=1)
CARDIO_DAYS_MIN: int = 0
CARDIO_DAYS_MAX: int = 7
NOTE_MAX_LENGTH: int = 1000

MEASUREMENT_UPPER_BOUNDS: dict[str, float] = {
    "weight": 1000,
    "waist": 500,
    "chest": 500,
    "biceps_left": 200,
    "biceps_right": 200,
    "thigh_left": 300,
    "thigh_right": 300,
}


# ─── Values ──────────────────────────────────────────────────────

def _validate_measurement(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InputValidationError(f"{name} must be a number", field=name)
    if value < 0:
        raise InputValidationError(f"{name} must be non-negative", field=name)
    if value > MEASUREMENT_UPPER_BOUNDS[name]:
        raise InputValidationError(
            f"{name} cannot exceed {MEASUREMENT_UPPER_BOUNDS[name]}", field=name,
        )


def _validate_cardio_days(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InputValidationError("cardio_days must be an integer", field="cardio_days")
    if not CARDIO_DAYS_MIN <= value <= CARDIO_DAYS_MAX:
        raise InputValidationError(
            f"cardio_days must be between {CARDIO_DAYS_MIN} and {CARDIO_DAYS_MAX}",
            field="cardio_days",
        )


def _validate_note(value: Any) -> None:
    if not isinstance(value, str):
        raise InputValidationError("note must be a string", field="note")
    if len(value) > NOTE_MAX_LENGTH:
        raise InputValidationError(
            f"note cannot exceed {NOTE_MAX_LENGTH} characters", field="note",
        )


def validate_report_values(values: Mapping[str, Any]) -> None:
    """Validate every non-None report value. Raises InputValidationError."""
    for name, value in values.items():
        if value is None:
            continue
        if name in MEASUREMENT_FIELDS:
            _validate_measurement(name, value)
        elif name == "cardio_days":
            _validate_cardio_days(value)
        elif name == "note":
            _validate_note(value)
        else:
            raise InputValidationError(f"Unknown report field '{name}'", field=name)


def build_report_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize a partial update. Only keys present in `changes` are touched."""
    if not changes:
        raise InputValidationError("No valid fields provided for update")
    unknown = set(changes) - set(REPORT_EDITABLE_FIELDS)
    if unknown:
        name = sorted(unknown)[0]
        raise InputValidationError(f"Unknown report field '{name}'", field=name)
    for name, value in changes.items():
        if value is None and name != "note":
            raise InputValidationError(f"{name} cannot be null", field=name)
    validate_report_values(changes)
    return dict(changes)


# ─── Quota & sequence ────────────────────────────────────────────

def next_sequence(live_sequences: Collection[int], week: WeekKey) -> int:
    """Sequence for a new report given the sequences already live that week."""
    if len(live_sequences) >= WEEKLY_REPORT_QUOTA:
        raise WeeklyQuotaExceededError(week.year, week.week_number)
    free = [s for s in range(WEEKLY_REPORT_QUOTA) if s not in live_sequences]
    return free[0]


# ─── Edit window ─────────────────────────────────────────────────

def edit_window_open(created_at: datetime, now: datetime) -> bool:
    return ensure_utc(now) - ensure_utc(created_at) < EDIT_WINDOW


def check_edit_allowed(
    report: Report, principal: Principal, now: datetime, live_reports_in_week: int,
) -> None:
    """Rule: owner edits only the first report of the week, within the window.

    Admins bypass time and sequence restrictions.
    """
    if principal.is_admin:
        return
    if report.sequence != 0:
        raise EditWindowClosedError("only the first report of the week is editable")
    if live_reports_in_week > 1:
        raise EditWindowClosedError("a second report exists for this week")
    if not edit_window_open(report.created_at, now):
        raise EditWindowClosedError(
            f"reports are editable for {int(EDIT_WINDOW.total_seconds() // 60)} minutes after creation",
        )
