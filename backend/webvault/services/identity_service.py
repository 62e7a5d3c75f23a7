"""
WebVault Backend — Identity Provider Client
=============================================

What:  Revokes user sessions at the external identity provider on sign-out.
How:   POST {IDENTITY_API_URL}/sessions/{id}/revoke with the secret key as a
       bearer token. Transport errors (connect, read, timeout) are retried
       with tenacity's exponential backoff; an HTTP error status is final.

Without IDENTITY_SECRET_KEY the revocation is skipped with a warning and the
caller still clears the cookie.
"""

import logging
from typing import Optional
from urllib.parse import quote

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from webvault.config import settings
from webvault.exceptions import UpstreamServiceError
from webvault.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

SIGN_OUT_FAILED = "sign_out_failed"


class IdentityProviderClient:
    """
    Args:
        transport: Optional httpx transport; tests pass httpx.MockTransport.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    async def revoke_session(self, session_id: str) -> bool:
        """
        Revoke `session_id`. Returns False when revocation was skipped.

        Raises:
            UpstreamServiceError: the provider rejected the call or stayed
                unreachable after every retry (→ 500, sign_out_failed)
        """
        rid = request_id_var.get("")
        if not settings.identity_secret_key:
            logger.warning(
                "[%s] IDENTITY_SECRET_KEY not configured; skipping session revocation", rid
            )
            return False

        try:
            await self._post_revoke(session_id)
        except httpx.HTTPStatusError as e:
            logger.error(
                "[%s] Session revocation rejected with %d",
                rid,
                e.response.status_code,
            )
            raise UpstreamServiceError(
                message="Sign-out failed. Please try again.",
                code=SIGN_OUT_FAILED,
                status_code=500,
                context={"upstream_status": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.error("[%s] Identity provider unreachable: %s", rid, str(e))
            raise UpstreamServiceError(
                message="Sign-out failed. Please try again.",
                code=SIGN_OUT_FAILED,
                status_code=500,
                context={"error_type": type(e).__name__, "attempts": settings.retry_max_attempts},
            ) from e

        logger.info("[%s] Session revoked", rid)
        return True

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_min_wait,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _post_revoke(self, session_id: str) -> None:
        url = f"{settings.identity_api_url.rstrip('/')}/sessions/{quote(session_id, safe='')}/revoke"
        async with httpx.AsyncClient(
            transport=self.transport, timeout=settings.identity_timeout
        ) as client:
            response = await client.post(
                url,
                headers={"Authorization": f"Bearer {settings.identity_secret_key}"},
            )
            response.raise_for_status()


identity_client = IdentityProviderClient()
