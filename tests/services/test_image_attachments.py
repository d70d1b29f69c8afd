"""Image Attachments — upload tickets, per-report ceiling and best-effort deletion.

Tests cover:
    - Upload ticket shape and storage path
    - Ceiling of three live images; deleted images free capacity
    - Concurrent upload past the ceiling discards the pending record
    - Delete is logical in the transaction; a rollback leaves the blob untouched
    - Storage failures on reclaim are logged, not raised
    - Only the owning client uploads; deleted reports hide their images
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from coachtrack.core.errors import (
    ForbiddenError, ImageLimitExceededError, InputValidationError, ResourceNotFoundError,
)
from coachtrack.core.records import Measurements, ReportImage
from coachtrack.infrastructure.sql_repositories import SqlReportImageRepository
from coachtrack.services.image_attachments import reclaim_storage

MONDAY_8AM = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
async def report(lifecycle, people):
    return await lifecycle.submit(
        people.client, people.client.id, Measurements(weight=70.0), MONDAY_8AM,
    )


async def _upload(attachments, report, principal, minutes=1, content_type="image/png"):
    return await attachments.request_upload(
        report.id, principal, content_type, 2048, MONDAY_8AM + timedelta(minutes=minutes),
    )


async def test_upload_ticket(attachments, report, people, storage):
    ticket = await _upload(attachments, report, people.client)
    assert ticket.storage_path == f"reports/{report.id}/{ticket.image_id}.png"
    assert ticket.upload_url.startswith("https://storage.test/")
    assert storage.signed == [ticket.storage_path]


async def test_images_listed_on_report_in_upload_order(attachments, lifecycle, report, people):
    first = await _upload(attachments, report, people.client, minutes=1)
    second = await _upload(attachments, report, people.client, minutes=2, content_type="image/jpeg")
    fetched = await lifecycle.get(report.id, people.coach)
    assert [i.id for i in fetched.images] == [first.image_id, second.image_id]
    assert fetched.images[1].storage_path.endswith(".jpg")


async def test_fourth_image_rejected_until_one_deleted(attachments, report, people):
    tickets = [await _upload(attachments, report, people.client, minutes=m) for m in (1, 2, 3)]
    with pytest.raises(ImageLimitExceededError):
        await _upload(attachments, report, people.client, minutes=4)

    await attachments.soft_delete(tickets[0].image_id, people.client, MONDAY_8AM + timedelta(minutes=5))
    ticket = await _upload(attachments, report, people.client, minutes=6)
    assert ticket.image_id not in {t.image_id for t in tickets}

    # Three live again: the soft-deleted one no longer counts either way.
    with pytest.raises(ImageLimitExceededError):
        await _upload(attachments, report, people.client, minutes=7)


async def test_unsupported_type_never_reaches_storage(attachments, report, people, storage):
    with pytest.raises(InputValidationError):
        await _upload(attachments, report, people.client, content_type="image/gif")
    assert storage.signed == []


async def test_concurrent_upload_past_ceiling_is_discarded(
    attachments, report, people, test_db,
):
    images = SqlReportImageRepository(test_db)
    await _upload(attachments, report, people.client, minutes=1)
    await _upload(attachments, report, people.client, minutes=2)

    async def racing_upload_url(storage_path):
        # Another request registers its image while ours waits on storage.
        await images.create(ReportImage(
            id=uuid4(), report_id=report.id,
            storage_path=f"reports/{report.id}/racer.png",
            size_bytes=10, created_at=MONDAY_8AM,
        ))
        return f"https://storage.test/upload/{storage_path}"

    attachments.storage.create_upload_url = racing_upload_url
    with pytest.raises(ImageLimitExceededError):
        await _upload(attachments, report, people.client, minutes=3)
    assert await images.count_live(report.id) == 3


async def test_delete_is_logical_until_reclaimed(attachments, report, people, storage):
    ticket = await _upload(attachments, report, people.client)
    retired = await attachments.soft_delete(
        ticket.image_id, people.client, MONDAY_8AM + timedelta(minutes=2),
    )

    assert await attachments.images.get(ticket.image_id) is None
    assert storage.deleted == []
    assert await reclaim_storage(storage, [retired.storage_path])
    assert storage.deleted == [ticket.storage_path]


async def test_rolled_back_delete_keeps_blob(attachments, report, people, storage, test_db):
    ticket = await _upload(attachments, report, people.client)
    await test_db.commit()

    await attachments.soft_delete(ticket.image_id, people.client, MONDAY_8AM + timedelta(minutes=2))
    await test_db.rollback()

    assert await attachments.images.get(ticket.image_id) is not None
    assert storage.deleted == []


async def test_reclaim_survives_storage_failure(storage, caplog):
    storage.fail_deletes = True

    with caplog.at_level(logging.WARNING):
        assert not await reclaim_storage(storage, ["reports/r/1.png"])

    assert "Storage delete failed" in caplog.text


async def test_coach_cannot_upload(attachments, report, people):
    with pytest.raises(ForbiddenError):
        await _upload(attachments, report, people.coach)


async def test_images_of_deleted_report_not_found(attachments, lifecycle, report, people):
    ticket = await _upload(attachments, report, people.client)
    await lifecycle.soft_delete(report.id, people.client, MONDAY_8AM + timedelta(minutes=2))
    with pytest.raises(ResourceNotFoundError):
        await attachments.soft_delete(ticket.image_id, people.client, MONDAY_8AM + timedelta(minutes=3))
    with pytest.raises(ResourceNotFoundError):
        await _upload(attachments, report, people.client, minutes=4)
