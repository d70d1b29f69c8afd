"""Image Routes — upload tickets and image soft-delete.

Invariants:
    - POST returns a signed upload URL; the client uploads the bytes directly to storage
    - DELETE commits the logical delete first; the blob is reclaimed afterwards as a
      background task, and storage failures there are only logged
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from coachtrack.api.deps import get_image_attachments, get_now, get_principal
from coachtrack.core.records import Principal
from coachtrack.infrastructure.database import get_db
from coachtrack.schemas.report import UploadRequest, UploadResponse
from coachtrack.services.image_attachments import ImageAttachments, reclaim_storage

router = APIRouter(prefix="/api/v1", tags=["images"])


@router.post(
    "/reports/{report_id}/images", response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_upload(
    report_id: UUID,
    body: UploadRequest,
    principal: Principal = Depends(get_principal),
    attachments: ImageAttachments = Depends(get_image_attachments),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    ticket = await attachments.request_upload(
        report_id, principal, body.content_type, body.size_bytes, now,
        width=body.width, height=body.height,
    )
    await db.commit()
    return UploadResponse.from_ticket(ticket)


@router.delete("/images/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(
    image_id: UUID,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(get_principal),
    attachments: ImageAttachments = Depends(get_image_attachments),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    image = await attachments.soft_delete(image_id, principal, now)
    await db.commit()
    background_tasks.add_task(reclaim_storage, attachments.storage, [image.storage_path])
    return Response(status_code=status.HTTP_204_NO_CONTENT)
