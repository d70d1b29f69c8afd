"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Profile is the root; assignments and reports reference profiles.id

Design Decisions:
    - One file per entity for locality (ADR: ExMA max 3-4 files to understand a feature)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from coachtrack.models.profile import Profile, CoachProfile, ClientProfile  # noqa: F401
from coachtrack.models.assignment import CoachClientAssignment  # noqa: F401
from coachtrack.models.report import Report  # noqa: F401
from coachtrack.models.report_image import ReportImage  # noqa: F401
