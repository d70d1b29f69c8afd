"""Image Rules — upload validation, per-report ceiling, storage paths, retention cutoff.

Invariants:
    - At most MAX_IMAGES_PER_REPORT (3) live images per report; soft-deleted images never count
    - 1 <= size_bytes <= MAX_IMAGE_BYTES (5 MB)
    - Content type is image/jpeg or image/png; the extension follows the content type
    - Storage path is always reports/{report_id}/{image_id}.{jpg|png}

Design Decisions:
    - Ceiling checked twice by the shell (before upload URL, after registration);
      both checks share check_image_ceiling so the limit cannot drift
"""

from datetime import datetime, timedelta
from uuid import UUID

from coachtrack.core.domain_types import ImageContentType
from coachtrack.core.errors import ImageLimitExceededError, InputValidationError
from coachtrack.core.iso_week import ensure_utc


MAX_IMAGES_PER_REPORT: int = 3
MAX_IMAGE_BYTES: int = 5 * 1024 * 1024
DEFAULT_RETENTION_DAYS: int = 180


def parse_content_type(content_type: str) -> ImageContentType:
    try:
        return ImageContentType(content_type.strip().lower())
    except ValueError:
        accepted = ", ".join(t.value for t in ImageContentType)
        raise InputValidationError(
            f"Unsupported content type '{content_type}'. Accepted: {accepted}",
            field="content_type",
        )


def validate_upload(content_type: str, size_bytes: int) -> ImageContentType:
    """Validate an upload request. Returns the parsed content type."""
    parsed = parse_content_type(content_type)
    if isinstance(size_bytes, bool) or not isinstance(size_bytes, int):
        raise InputValidationError("size_bytes must be an integer", field="size_bytes")
    if size_bytes < 1:
        raise InputValidationError("size_bytes must be at least 1", field="size_bytes")
    if size_bytes > MAX_IMAGE_BYTES:
        raise InputValidationError(
            f"image exceeds {MAX_IMAGE_BYTES // (1024 * 1024)} MB", field="size_bytes",
        )
    return parsed


def check_image_ceiling(live_image_count: int) -> None:
    """Raise when a report cannot take another image."""
    if live_image_count >= MAX_IMAGES_PER_REPORT:
        raise ImageLimitExceededError(MAX_IMAGES_PER_REPORT)


def exceeds_image_ceiling(live_image_count: int) -> bool:
    """Post-registration recount: the pending record is already included."""
    return live_image_count > MAX_IMAGES_PER_REPORT


def build_storage_path(
    report_id: UUID, image_id: UUID, content_type: ImageContentType,
) -> str:
    return f"reports/{report_id}/{image_id}.{content_type.extension}"


def retention_cutoff(now: datetime, retention_days: int = DEFAULT_RETENTION_DAYS) -> datetime:
    """Images created strictly before the cutoff are expired."""
    if retention_days < 1:
        raise ValueError("retention_days must be positive")
    return ensure_utc(now) - timedelta(days=retention_days)
