"""Image Attachments — upload tickets and soft-deletion for report images.

Invariants:
    - Only the owning client (or an admin) may upload to or delete from a report
    - Upload requires a live report, accepted content type, 1 byte..5 MB, and < 3 live images
    - The pending record is registered only after object storage issued the upload URL
    - Post-registration recount: if a concurrent upload pushed the report past the ceiling,
      the pending record is discarded and ImageLimitExceededError raised
    - Deletion inside the transaction is logical only; blobs are reclaimed by
      reclaim_storage() after the caller commits
    - Physical deletion is best-effort: storage failures are logged, never raised

Design Decisions:
    - retire_image() is shared with the retention sweep so manual and scheduled
      deletion have identical semantics
    - A rolled-back soft-delete leaves a live record pointing at an intact blob
      (ADR: reclamation follows the logical delete)
"""

import logging
from datetime import datetime
from uuid import UUID, uuid4

from coachtrack.core.domain_types import ImageId, Operation, ReportId
from coachtrack.core.errors import ImageLimitExceededError, ResourceNotFoundError
from coachtrack.core.image_rules import (
    MAX_IMAGES_PER_REPORT, build_storage_path, check_image_ceiling,
    exceeds_image_ceiling, validate_upload,
)
from coachtrack.core.iso_week import ensure_utc
from coachtrack.core.records import Principal, ReportImage, UploadTicket
from coachtrack.core.repository_protocols import ObjectStorage, ReportImageRepository
from coachtrack.services.report_lifecycle import ReportLifecycle

logger = logging.getLogger(__name__)


async def retire_image(
    images: ReportImageRepository, image: ReportImage, now: datetime,
) -> None:
    """Soft-delete the record. The blob stays until reclaim_storage() runs."""
    await images.mark_deleted(ImageId(image.id), ensure_utc(now))


async def reclaim_storage(storage: ObjectStorage, storage_paths: list[str]) -> bool:
    """Delete committed-retired blobs. Returns False (and logs) on storage failure."""
    if not storage_paths:
        return True
    joined = ", ".join(storage_paths)
    try:
        await storage.delete(storage_paths)
    except Exception as e:
        logger.warning(f"Storage delete failed for {joined}: {e}", extra={"path": joined})
        return False
    return True


class ImageAttachments:
    """Per-report image ceiling and image lifecycle."""

    def __init__(
        self,
        reports: ReportLifecycle,
        images: ReportImageRepository,
        storage: ObjectStorage,
    ):
        self.reports = reports
        self.images = images
        self.storage = storage

    async def request_upload(
        self,
        report_id: UUID,
        principal: Principal,
        content_type: str,
        size_bytes: int,
        now: datetime,
        width: int | None = None,
        height: int | None = None,
    ) -> UploadTicket:
        await self.reports.load_for(report_id, principal, Operation.UPLOAD_IMAGE)
        parsed = validate_upload(content_type, size_bytes)
        check_image_ceiling(await self.images.count_live(ReportId(report_id)))

        image_id = uuid4()
        storage_path = build_storage_path(report_id, image_id, parsed)
        upload_url = await self.storage.create_upload_url(storage_path)

        await self.images.create(ReportImage(
            id=image_id,
            report_id=report_id,
            storage_path=storage_path,
            size_bytes=size_bytes,
            created_at=ensure_utc(now),
            width=width,
            height=height,
        ))
        if exceeds_image_ceiling(await self.images.count_live(ReportId(report_id))):
            await self.images.discard(ImageId(image_id))
            logger.warning(
                "Concurrent upload exceeded image ceiling; pending record discarded",
                extra={"report_id": str(report_id), "image_id": str(image_id)},
            )
            raise ImageLimitExceededError(MAX_IMAGES_PER_REPORT)

        logger.info(
            "Upload ticket issued",
            extra={"report_id": str(report_id), "image_id": str(image_id)},
        )
        return UploadTicket(
            image_id=image_id, storage_path=storage_path, upload_url=upload_url,
        )

    async def soft_delete(
        self, image_id: UUID, principal: Principal, now: datetime,
    ) -> ReportImage:
        """Retire the image and return it; the caller reclaims its blob after commit."""
        image = await self.images.get(ImageId(image_id))
        if image is None:
            raise ResourceNotFoundError("image", str(image_id))
        await self.reports.load_for(image.report_id, principal, Operation.DELETE_IMAGE)
        await retire_image(self.images, image, now)
        logger.info(
            "Image soft-deleted",
            extra={"principal_id": str(principal.id), "image_id": str(image_id)},
        )
        return image
