"""
WebVault Backend — Favicon Proxy Route
========================================

GET /api/favicon?domain=example.com

    found        raw icon bytes, upstream Content-Type, cached for an hour
    not found    307 to DEFAULT_FAVICON_PATH
    bad domain   307 to DEFAULT_FAVICON_PATH
    no domain    422 fail envelope

Upstream trouble never turns into a 5xx here.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import RedirectResponse, Response

from webvault.config import settings
from webvault.exceptions import ValidationError
from webvault.schemas.envelope import FailEnvelope
from webvault.services.favicon_service import favicon_service, normalize_domain

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Favicon"])

FAVICON_CACHE_CONTROL = "public, max-age=3600, s-maxage=3600"


@router.get(
    "/favicon",
    response_class=Response,
    responses={
        200: {"description": "Favicon image bytes", "content": {"image/x-icon": {}}},
        307: {"description": "Redirect to the default favicon"},
        422: {"description": "Missing domain", "model": FailEnvelope},
    },
    summary="Proxy a website favicon",
)
async def get_favicon(domain: Optional[str] = Query(default=None)) -> Response:
    if not domain or not domain.strip():
        raise ValidationError(message="domain is required", field="domain")

    host = normalize_domain(domain)
    if host is None:
        logger.info("Favicon requested for invalid domain %r", domain)
        return RedirectResponse(settings.default_favicon_path, status_code=307)

    try:
        favicon = await favicon_service.fetch(host)
    except Exception as e:
        logger.error("Favicon lookup for %s crashed: %s", host, str(e), exc_info=True)
        favicon = None
    if favicon is None:
        return RedirectResponse(settings.default_favicon_path, status_code=307)

    return Response(
        content=favicon.content,
        media_type=favicon.content_type,
        headers={"Cache-Control": FAVICON_CACHE_CONTROL},
    )
