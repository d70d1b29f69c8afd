"""Retention Sweep — scheduled soft-deletion of images past the retention threshold.

Invariants:
    - Only live images with created_at < now - retention_days are touched
    - Each expired image goes through retire_image(): same semantics as a manual delete
    - One commit per run; blobs are reclaimed only after that commit succeeds
    - Storage failures never abort the sweep

Design Decisions:
    - Runnable as `python -m coachtrack.services.retention_sweep` from cron or a
      scheduled container; uses db/session.py rather than the FastAPI lifespan
"""

import asyncio
import logging
from datetime import datetime, timezone

from coachtrack.config import get_settings
from coachtrack.core.image_rules import DEFAULT_RETENTION_DAYS, retention_cutoff
from coachtrack.core.repository_protocols import ReportImageRepository
from coachtrack.db.session import create_session_factory
from coachtrack.infrastructure.observability import setup_logging
from coachtrack.infrastructure.sql_repositories import SqlReportImageRepository
from coachtrack.infrastructure.storage_gateway import HttpObjectStorage
from coachtrack.services.image_attachments import reclaim_storage, retire_image

logger = logging.getLogger(__name__)


class RetentionSweep:
    """Soft-deletes expired report images."""

    def __init__(
        self,
        images: ReportImageRepository,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ):
        self.images = images
        self.retention_days = retention_days

    async def sweep_expired(self, now: datetime) -> list[str]:
        """Retire every expired image. Returns the storage paths to reclaim after commit."""
        cutoff = retention_cutoff(now, self.retention_days)
        expired = await self.images.list_expired(cutoff)
        for image in expired:
            await retire_image(self.images, image, now)
        logger.info(
            f"Retention sweep retired {len(expired)} image(s) older than {cutoff.isoformat()}",
            extra={"swept": len(expired)},
        )
        return [image.storage_path for image in expired]


async def run_sweep() -> int:
    """One sweep with production wiring: settings, DB session, HTTP storage."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    session_factory = create_session_factory(settings.database_url)
    storage = HttpObjectStorage(
        settings.storage_base_url,
        settings.storage_service_key,
        settings.storage_bucket,
        timeout_seconds=settings.gateway_timeout_seconds,
    )
    async with session_factory() as db:
        sweep = RetentionSweep(SqlReportImageRepository(db), settings.image_retention_days)
        retired = await sweep.sweep_expired(datetime.now(timezone.utc))
        await db.commit()
    await reclaim_storage(storage, retired)
    await session_factory.kw["bind"].dispose()
    return len(retired)




def main() -> None:
    asyncio.run(run_sweep())


if __name__ == "__main__":
    main()
