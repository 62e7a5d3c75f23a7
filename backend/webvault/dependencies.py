"""
WebVault Backend — Shared Route Dependencies
==============================================

What:  FastAPI dependencies used across routers: session lookup, the admin
       guard, envelope timestamp style and query-value normalisation.

Session lookup:
    The session id is the session cookie (SESSION_COOKIE_NAME) or, failing
    that, an `Authorization: Bearer <id>` header. The identity provider
    verifies it at the edge; here it is an opaque actor id.
"""

from typing import Optional

from fastapi import Depends, Request

from webvault.config import settings
from webvault.exceptions import UnauthenticatedError

# Filter values that mean "no filter" when they arrive from a UI select
_ANY_VALUES = frozenset({"", "all", "any"})


def get_session_id(request: Request) -> Optional[str]:
    cookie = request.cookies.get(settings.session_cookie_name)
    if cookie and cookie.strip():
        return cookie.strip()

    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def require_session(session_id: Optional[str] = Depends(get_session_id)) -> str:
    """Admin and submission routes: no session means 401."""
    if not session_id:
        raise UnauthenticatedError()
    return session_id


def local_timestamps(request: Request) -> None:
    """Envelopes for this route (errors included) use the local timestamp style."""
    request.state.timestamp_style = "local"


def timestamp_style(request: Request) -> str:
    return getattr(request.state, "timestamp_style", "iso")


def optional_filter(value: Optional[str]) -> Optional[str]:
    """
    Examples:
        >>> optional_filter("All")
        >>> optional_filter(" tools ")
        'tools'
    """
    if value is None:
        return None
    cleaned = value.strip()
    if cleaned.lower() in _ANY_VALUES:
        return None
    return cleaned
