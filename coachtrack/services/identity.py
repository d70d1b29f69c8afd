"""Identity Resolver — bearer token → Principal.

Invariants:
    - Missing token, unknown token, or missing/soft-deleted profile → UnauthenticatedError
    - The role always comes from the stored profile, never from the token
"""

import logging

from coachtrack.core.domain_types import ProfileId
from coachtrack.core.errors import UnauthenticatedError
from coachtrack.core.records import Principal
from coachtrack.core.repository_protocols import AuthGateway, ProfileRepository

logger = logging.getLogger(__name__)


class IdentityResolver:

    def __init__(self, auth: AuthGateway, profiles: ProfileRepository):
        self.auth = auth
        self.profiles = profiles

    async def resolve(self, access_token: str | None) -> Principal:
        if not access_token:
            raise UnauthenticatedError()
        user_id = await self.auth.resolve_user_id(access_token)
        if user_id is None:
            raise UnauthenticatedError()
        profile = await self.profiles.get(ProfileId(user_id))
        if profile is None:
            logger.info(
                "Token resolved to a user without a live profile",
                extra={"principal_id": str(user_id)},
            )
            raise UnauthenticatedError()
        return Principal(id=profile.id, role=profile.role)
