"""
WebVault Backend — Favicon Proxy Service
==========================================

What:  Fetches a site's favicon from a list of public sources so the browser
       never talks to third parties directly.
How:   Sources are tried in order and the first 2xx with a non-empty body
       wins:

           1. https://www.google.com/s2/favicons?domain={domain}&sz=32
           2. https://favicon.yandex.net/favicon/{domain}
           3. https://{domain}/favicon.ico

       Each lookup opens its own httpx.AsyncClient and closes it afterwards,
       so nothing is shared between requests. A lookup never raises for
       network trouble: it returns None and the route redirects to the
       default icon.
"""

import logging
import re
import time
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlsplit

import httpx

from webvault.config import settings
from webvault.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

FAVICON_SOURCES = (
    "https://www.google.com/s2/favicons?domain={domain}&sz=32",
    "https://favicon.yandex.net/favicon/{domain}",
    "https://{domain}/favicon.ico",
)

_HOSTNAME_LABEL = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")

DEFAULT_CONTENT_TYPE = "image/x-icon"


@dataclass(frozen=True)
class Favicon:
    content: bytes
    content_type: str
    source: str


def normalize_domain(raw: str) -> Optional[str]:
    """
    Reduce user input to a bare hostname, or None when it is not one.

    Examples:
        >>> normalize_domain("https://Example.com/some/path")
        'example.com'
        >>> normalize_domain("localhost")
        >>> normalize_domain("bad_host!.com")
    """
    value = (raw or "").strip().lower()
    if not value:
        return None
    if "://" not in value:
        value = f"http://{value}"
    try:
        host = urlsplit(value).hostname
    except ValueError:
        return None
    if not host or len(host) > 253:
        return None
    labels = host.rstrip(".").split(".")
    if len(labels) < 2 or not all(_HOSTNAME_LABEL.match(label) for label in labels):
        return None
    return ".".join(labels)


class FaviconService:
    """
    Args:
        transport: Optional httpx transport; tests pass httpx.MockTransport.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    def source_urls(self, domain: str) -> List[str]:
        return [template.format(domain=domain) for template in FAVICON_SOURCES]

    async def fetch(self, domain: str) -> Optional[Favicon]:
        """Return the first favicon found, or None when every source failed."""
        rid = request_id_var.get("")
        async with httpx.AsyncClient(
            transport=self.transport,
            timeout=settings.favicon_timeout,
            follow_redirects=True,
            headers={"User-Agent": settings.favicon_user_agent},
        ) as client:
            for url in self.source_urls(domain):
                start_time = time.perf_counter()
                try:
                    response = await client.get(url)
                except httpx.HTTPError as e:
                    logger.debug("[%s] Favicon source %s failed: %s", rid, url, str(e))
                    continue

                if response.is_success and response.content:
                    logger.debug(
                        "[%s] Favicon for %s from %s in %.0fms",
                        rid,
                        domain,
                        url,
                        (time.perf_counter() - start_time) * 1000,
                    )
                    return Favicon(
                        content=response.content,
                        content_type=response.headers.get("content-type", DEFAULT_CONTENT_TYPE),
                        source=url,
                    )
                logger.debug(
                    "[%s] Favicon source %s returned %d", rid, url, response.status_code
                )

        logger.info("[%s] No favicon found for %s", rid, domain)
        return None


favicon_service = FaviconService()
