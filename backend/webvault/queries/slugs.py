"""Unique slug allocation for any model with `id` and `slug` columns."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.utils import generate_slug, new_id


async def unique_slug(
    db: AsyncSession,
    model,
    source: str,
    exclude_id: Optional[str] = None,
    max_length: int = 160,
) -> str:
    """
    Slugify `source` and append -1, -2, ... until no other row uses it.

    `source` may already be a slug; text that slugifies to nothing falls
    back to a short random token.
    """
    base = generate_slug(source)[:max_length].strip("-") or new_id()[:8]
    candidate = base
    suffix = 1
    while True:
        stmt = select(model.id).where(model.slug == candidate)
        if exclude_id is not None:
            stmt = stmt.where(model.id != exclude_id)
        if (await db.execute(stmt.limit(1))).first() is None:
            return candidate
        tail = f"-{suffix}"
        candidate = base[: max_length - len(tail)] + tail
        suffix += 1
