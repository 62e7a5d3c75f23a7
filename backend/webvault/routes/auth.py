"""
WebVault Backend — Auth Route
===============================

POST /api/auth/sign-out revokes the current session at the identity
provider, clears the session cookie and tells the client where to go next.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response

from webvault.config import settings
from webvault.dependencies import get_session_id
from webvault.exceptions import UnauthenticatedError
from webvault.schemas.common import SignOutResponse
from webvault.schemas.envelope import ErrorEnvelope, FailEnvelope, SuccessEnvelope, success
from webvault.services.identity_service import identity_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/sign-out",
    response_model=SuccessEnvelope[SignOutResponse],
    responses={
        401: {"description": "No active session", "model": FailEnvelope},
        500: {"description": "Revocation failed", "model": ErrorEnvelope},
    },
    summary="Sign out the current session",
)
async def sign_out(
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
) -> SuccessEnvelope[SignOutResponse]:
    if not session_id:
        raise UnauthenticatedError(message="No active session")

    await identity_client.revoke_session(session_id)

    response.delete_cookie(settings.session_cookie_name, path="/")
    response.headers["Cache-Control"] = "no-store"
    return success(SignOutResponse(redirect_url=settings.sign_in_path), message="signed out")
