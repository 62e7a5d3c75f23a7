"""Small helpers shared across services: ids, clocks, slugs and JSON lists."""

import json
import re
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional

_SLUG_STRIP = re.compile(r"[^a-z0-9\s-]")
_SLUG_SPACES = re.compile(r"[\s_]+")
_SLUG_DASHES = re.compile(r"-{2,}")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def generate_slug(value: str) -> str:
    """
    Turn free text into a URL-safe slug.

    Lowercases, drops characters outside [a-z0-9 -], turns whitespace into
    "-", collapses repeated dashes and trims them from both ends.

    Examples:
        >>> generate_slug("  Hello, World!  ")
        'hello-world'
        >>> generate_slug("Dev -- Tools")
        'dev-tools'
    """
    slug = _SLUG_STRIP.sub("", value.strip().lower())
    slug = _SLUG_SPACES.sub("-", slug)
    slug = _SLUG_DASHES.sub("-", slug)
    return slug.strip("-")


def dedupe(values: Iterable[str]) -> List[str]:
    """Drop blanks and duplicates while keeping first-seen order."""
    seen = set()
    result = []
    for value in values:
        item = value.strip()
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


def dump_json_list(values: Iterable[str]) -> str:
    return json.dumps(dedupe(values), ensure_ascii=False)


def load_json_list(raw: Optional[str]) -> List[str]:
    """Parse a JSON text column holding a list of strings; bad data yields []."""
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(parsed, list):
        return []
    return [str(item) for item in parsed if isinstance(item, (str, int))]
