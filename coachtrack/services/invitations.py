"""Invitation dispatch — background task run after a profile is committed."""

import logging
from uuid import UUID

from coachtrack.core.repository_protocols import InvitationSender

logger = logging.getLogger(__name__)


async def send_invitation(
    sender: InvitationSender,
    *,
    profile_id: UUID,
    email: str | None,
    phone: str | None,
) -> bool:
    """Deliver an invitation. Failures are logged and reported as False."""
    if not email and not phone:
        logger.info(
            "No contact channel for invitation; skipped",
            extra={"principal_id": str(profile_id)},
        )
        return False
    try:
        await sender.invite(profile_id=profile_id, email=email, phone=phone)
    except Exception as e:
        logger.warning(
            f"Invitation delivery failed: {e}",
            extra={"principal_id": str(profile_id)},
            exc_info=True,
        )
        return False
    return True
