"""HTTP Gateways — httpx clients for object storage, token verification and invitations.

Invariants:
    - Every call has a bounded timeout (settings.gateway_timeout_seconds)
    - Timeouts, connection failures and 5xx responses → TransientError (core/errors.py)
    - Upload URLs are absolute and time-limited; the blob itself never passes through us
    - resolve_user_id returns None for rejected tokens (401/403), never raises for them
    - Identity comes from app_metadata.profile_id (writable only with the service
      key) or the auth user id; user_metadata is editable by its owner and never read

Design Decisions:
    - Supabase-compatible REST endpoints (storage/v1, auth/v1): the hosted backend
      the product runs on; any compatible server works
    - One short-lived AsyncClient per call: no connection state to manage across
      request handlers and background tasks
    - Optional transport injection so tests can use httpx.MockTransport
"""

import logging
from typing import Any
from uuid import UUID

import httpx

from coachtrack.core.errors import TransientError

logger = logging.getLogger(__name__)

# Retry hint attached to gateway timeouts.
_RETRY_AFTER_MS = 1000


class _SupabaseHttp:
    """Shared request plumbing: auth headers, timeout, error mapping."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.timeout = httpx.Timeout(timeout_seconds)
        self.transport = transport

    def _headers(self, bearer: str | None = None) -> dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {bearer or self.service_key}",
        }

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        bearer: str | None = None,
        json: Any = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport,
            ) as client:
                response = await client.request(
                    method, url, headers=self._headers(bearer), json=json,
                )
        except httpx.TimeoutException as e:
            logger.error(f"{operation} timed out: {e}")
            raise TransientError("request timed out", operation, retry_after_ms=_RETRY_AFTER_MS)
        except httpx.RequestError as e:
            logger.error(f"{operation} request failed: {e}")
            raise TransientError("connection failed", operation)

        if response.status_code >= 500:
            logger.error(
                f"{operation} returned {response.status_code}: {response.text[:200]}",
            )
            raise TransientError(f"upstream returned {response.status_code}", operation)
        return response


class HttpObjectStorage(_SupabaseHttp):
    """ObjectStorage over the storage REST API."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        bucket: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(base_url, service_key, timeout_seconds, transport)
        self.bucket = bucket

    async def create_upload_url(self, storage_path: str) -> str:
        response = await self._request(
            "POST", f"/storage/v1/object/upload/sign/{self.bucket}/{storage_path}",
            "create_upload_url",
        )
        if response.status_code != 200:
            logger.error(
                f"Signed upload URL rejected ({response.status_code}): {response.text[:200]}",
                extra={"path": storage_path},
            )
            raise TransientError(
                f"storage rejected upload URL request ({response.status_code})",
                "create_upload_url",
            )
        signed = response.json().get("url", "")
        if signed.startswith("http"):
            return signed
        return f"{self.base_url}/storage/v1{signed}"

    async def delete(self, storage_paths: list[str]) -> None:
        if not storage_paths:
            return
        response = await self._request(
            "DELETE", f"/storage/v1/object/{self.bucket}", "storage_delete",
            json={"prefixes": storage_paths},
        )
        if response.status_code not in (200, 204):
            raise TransientError(
                f"storage rejected delete ({response.status_code})", "storage_delete",
            )


class HttpAuthGateway(_SupabaseHttp):
    """AuthGateway: verifies access tokens against the auth server."""

    async def resolve_user_id(self, access_token: str) -> UUID | None:
        response = await self._request(
            "GET", "/auth/v1/user", "resolve_user", bearer=access_token,
        )
        if response.status_code in (401, 403):
            return None
        if response.status_code != 200:
            logger.warning(f"Unexpected auth status {response.status_code}")
            return None
        body = response.json()
        raw = (body.get("app_metadata") or {}).get("profile_id") or body.get("id")
        try:
            return UUID(str(raw))
        except ValueError:
            logger.warning(f"Auth server returned a malformed user id: {raw!r}")
            return None


class HttpInvitationSender(_SupabaseHttp):
    """InvitationSender: email invitations through the auth server.

    The invited auth user is linked to its profile through app_metadata, which
    only the service key can write.
    """

    async def invite(
        self, *, profile_id: UUID, email: str | None, phone: str | None,
    ) -> None:
        if not email:
            # No SMS provider is wired up; phone-only invitations are recorded only.
            logger.info(
                f"Phone invitation requested for {phone}; no SMS channel configured",
                extra={"principal_id": str(profile_id)},
            )
            return
        response = await self._request(
            "POST", "/auth/v1/invite", "send_invitation", json={"email": email},
        )
        if response.status_code not in (200, 201):
            raise TransientError(
                f"invitation rejected ({response.status_code})", "send_invitation",
            )
        auth_user_id = response.json().get("id")
        if not auth_user_id:
            raise TransientError("invitation returned no user id", "send_invitation")
        await self._link_profile(auth_user_id, profile_id)
        logger.info("Invitation sent", extra={"principal_id": str(profile_id)})

    async def _link_profile(self, auth_user_id: str, profile_id: UUID) -> None:
        response = await self._request(
            "PUT", f"/auth/v1/admin/users/{auth_user_id}", "link_profile",
            json={"app_metadata": {"profile_id": str(profile_id)}},
        )
        if response.status_code != 200:
            raise TransientError(
                f"profile link rejected ({response.status_code})", "link_profile",
            )
