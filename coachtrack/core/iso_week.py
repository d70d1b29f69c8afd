"""ISO Week Derivation — single source of truth for report week boundaries.

Invariants:
    - Weeks follow ISO 8601: Monday start, week 1 contains the first Thursday
    - year is the ISO week-numbering year, which differs from the calendar year
      around New Year (2024-12-30 is 2025-W01, 2027-01-01 is 2026-W53)
    - Naive datetimes are rejected; aware datetimes are normalized to UTC first

Design Decisions:
    - One pure function shared by submission, trends and roster filters so query-time
      and submission-time week boundaries cannot drift
"""

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True, order=True)
class WeekKey:
    year: int
    week_number: int


def ensure_utc(moment: datetime) -> datetime:
    """Return an aware UTC datetime; naive input is a programming error."""
    if moment.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return moment.astimezone(timezone.utc)


def iso_week_of(moment: datetime) -> WeekKey:
    """(ISO year, ISO week) containing `moment`, evaluated in UTC."""
    iso = ensure_utc(moment).isocalendar()
    return WeekKey(year=iso[0], week_number=iso[1])
