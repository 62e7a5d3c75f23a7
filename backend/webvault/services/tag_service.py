"""
WebVault Backend — Tag Service
================================

What:  Tag listing and CRUD, plus the website↔tag assignment.
Who:   Public GET /api/tags, the admin tag routes, and WebsiteAdminService.

Tag storage:
    `website_tags` rows are the source of truth. `websites.tags` (a JSON
    array of names) is rewritten by refresh_website_tag_names() in the same
    session whenever assignments change or a tag is renamed, so both
    representations commit together.
"""

import logging
from typing import Dict, Iterable, List, Literal, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.exceptions import ConflictError, NotFoundError, ValidationError
from webvault.models.tag import Tag, WebsiteTag
from webvault.models.website import Website
from webvault.queries.slugs import unique_slug
from webvault.queries.websites import LIKE_ESCAPE, contains_pattern
from webvault.schemas.tag import TagCreate, TagListResponse, TagResponse, TagUpdate
from webvault.services.audit_service import audit_service
from webvault.services.errors import database_errors
from webvault.utils import dump_json_list

logger = logging.getLogger(__name__)

TagOrder = Literal["name", "recent", "usage"]


def normalize_color(value: Optional[str]) -> Optional[str]:
    """
    Lowercase, ensure a leading "#", keep at most #rrggbb.

    Examples:
        >>> normalize_color("FFAA00")
        '#ffaa00'
        >>> normalize_color("#ABC")
        '#abc'
    """
    if value is None:
        return None
    color = value.strip().lower()
    if not color:
        return None
    if not color.startswith("#"):
        color = f"#{color}"
    return color[:7]


class TagService:
    # ── Listing ───────────────────────────────────────────────────────────

    async def list_tags(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        status: Optional[str] = "active",
        order_by: TagOrder = "name",
    ) -> TagListResponse:
        """
        List tags with their website counts.

        `total`/`active`/`inactive` are computed over the search-filtered set
        (ignoring the status filter) so a UI can show counters next to a
        status toggle. status=None or "all" disables the status filter.
        """
        search_conditions = []
        term = (search or "").strip()
        if term:
            pattern = contains_pattern(term)
            search_conditions.append(
                or_(
                    Tag.name.ilike(pattern, escape=LIKE_ESCAPE),
                    Tag.slug.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        item_conditions = list(search_conditions)
        if status and status != "all":
            item_conditions.append(Tag.status == status)

        website_count = func.count(WebsiteTag.website_id).label("website_count")
        ordering = {
            "name": [Tag.name.asc()],
            "recent": [Tag.updated_at.desc()],
            "usage": [website_count.desc(), Tag.name.asc()],
        }[order_by]

        with database_errors("list_tags"):
            rows = (
                await db.execute(
                    select(Tag, website_count)
                    .outerjoin(WebsiteTag, WebsiteTag.tag_id == Tag.id)
                    .where(*item_conditions)
                    .group_by(Tag.id)
                    .order_by(*ordering, Tag.id)
                )
            ).all()
            total = (
                await db.execute(select(func.count()).select_from(Tag).where(*search_conditions))
            ).scalar() or 0
            active = (
                await db.execute(
                    select(func.count())
                    .select_from(Tag)
                    .where(*search_conditions, Tag.status == "active")
                )
            ).scalar() or 0

        return TagListResponse(
            items=[self._to_response(tag, count) for tag, count in rows],
            total=total,
            active=active,
            inactive=total - active,
        )

    # ── CRUD ──────────────────────────────────────────────────────────────

    async def get_tag(self, db: AsyncSession, tag_id: str) -> Tag:
        with database_errors("get_tag", tag_id=tag_id):
            tag = await db.get(Tag, tag_id)
        if tag is None:
            raise NotFoundError(resource="tag", resource_id=tag_id)
        return tag

    async def create_tag(
        self, db: AsyncSession, payload: TagCreate, actor_id: Optional[str] = None
    ) -> TagResponse:
        with database_errors("create_tag"):
            slug = await unique_slug(db, Tag, payload.slug or payload.name, max_length=60)
            tag = Tag(
                name=payload.name,
                slug=slug,
                description=payload.description,
                color=normalize_color(payload.color),
                group=payload.group,
                status=payload.status,
                is_trending=bool(payload.is_trending),
            )
            db.add(tag)
            await db.flush()
            audit_service.record(
                db,
                actor_id=actor_id,
                action="tag.create",
                entity_type="tag",
                entity_id=tag.id,
                changes=payload.model_dump(exclude_none=True),
            )
        return self._to_response(tag, 0)

    async def update_tag(
        self, db: AsyncSession, tag_id: str, payload: TagUpdate, actor_id: Optional[str] = None
    ) -> TagResponse:
        tag = await self.get_tag(db, tag_id)
        changes = payload.changes()

        with database_errors("update_tag", tag_id=tag_id):
            if "slug" in changes and changes["slug"] != tag.slug:
                tag.slug = await unique_slug(db, Tag, changes["slug"], exclude_id=tag.id, max_length=60)
            if "color" in changes:
                tag.color = normalize_color(changes["color"])
            renamed = "name" in changes and changes["name"] != tag.name
            for field in ("name", "description", "group", "status"):
                if field in changes:
                    setattr(tag, field, changes[field])
            if "is_trending" in changes:
                tag.is_trending = bool(changes["is_trending"])
            await db.flush()

            if renamed:
                website_ids = (
                    await db.execute(select(WebsiteTag.website_id).where(WebsiteTag.tag_id == tag.id))
                ).scalars().all()
                await self.refresh_website_tag_names(db, website_ids)

            audit_service.record(
                db,
                actor_id=actor_id,
                action="tag.update",
                entity_type="tag",
                entity_id=tag.id,
                changes=changes,
            )
            count = await self._website_count(db, tag.id)
        return self._to_response(tag, count)

    async def delete_tag(self, db: AsyncSession, tag_id: str, actor_id: Optional[str] = None) -> None:
        """Delete a tag that no website uses; a bound tag raises ConflictError (409)."""
        tag = await self.get_tag(db, tag_id)
        with database_errors("delete_tag", tag_id=tag_id):
            bound = await self._website_count(db, tag.id)
            if bound:
                raise ConflictError(
                    message=f"Tag is assigned to {bound} website(s); unassign it first",
                    context={"tag_id": tag_id, "website_count": bound},
                )
            await db.delete(tag)
            audit_service.record(
                db,
                actor_id=actor_id,
                action="tag.delete",
                entity_type="tag",
                entity_id=tag_id,
                changes={"slug": tag.slug},
            )

    # ── Website assignment ────────────────────────────────────────────────

    async def replace_website_tags(
        self, db: AsyncSession, website_id: str, tag_ids: Iterable[str]
    ) -> List[str]:
        """
        Replace every tag on a website.

        All tag ids are checked before anything is written; an unknown id
        rejects the whole replacement. Returns the website's new tag names.
        """
        wanted = list(dict.fromkeys(tag_ids))
        with database_errors("replace_website_tags", website_id=website_id):
            if wanted:
                found = set(
                    (await db.execute(select(Tag.id).where(Tag.id.in_(wanted)))).scalars().all()
                )
                missing = [tag_id for tag_id in wanted if tag_id not in found]
                if missing:
                    raise ValidationError(
                        message=f"Unknown tag id(s): {', '.join(missing)}",
                        field="tagIds",
                    )

            previous = set(
                (
                    await db.execute(
                        select(WebsiteTag.tag_id).where(WebsiteTag.website_id == website_id)
                    )
                ).scalars().all()
            )
            await db.execute(delete(WebsiteTag).where(WebsiteTag.website_id == website_id))
            for tag_id in wanted:
                db.add(WebsiteTag(website_id=website_id, tag_id=tag_id))

            added = [tag_id for tag_id in wanted if tag_id not in previous]
            if added:
                await db.execute(
                    update(Tag)
                    .where(Tag.id.in_(added))
                    .values(usage_count=Tag.usage_count + 1)
                    .execution_options(synchronize_session=False)
                )
            await db.flush()
            names = await self.refresh_website_tag_names(db, [website_id])
        return names.get(website_id, [])

    async def refresh_website_tag_names(
        self, db: AsyncSession, website_ids: Iterable[str]
    ) -> Dict[str, List[str]]:
        """Rewrite `websites.tags` from the association rows (names sorted)."""
        ids = list(dict.fromkeys(website_ids))
        if not ids:
            return {}
        rows = await db.execute(
            select(WebsiteTag.website_id, Tag.name)
            .join(Tag, Tag.id == WebsiteTag.tag_id)
            .where(WebsiteTag.website_id.in_(ids))
            .order_by(Tag.name)
        )
        names: Dict[str, List[str]] = {website_id: [] for website_id in ids}
        for website_id, name in rows:
            names[website_id].append(name)
        websites = (await db.execute(select(Website).where(Website.id.in_(ids)))).scalars().all()
        for website in websites:
            website.tags = dump_json_list(names[website.id])
        await db.flush()
        return names

    async def tag_ids_for_website(self, db: AsyncSession, website_id: str) -> List[str]:
        rows = await db.execute(
            select(WebsiteTag.tag_id)
            .where(WebsiteTag.website_id == website_id)
            .order_by(WebsiteTag.assigned_at, WebsiteTag.tag_id)
        )
        return list(rows.scalars().all())

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _website_count(self, db: AsyncSession, tag_id: str) -> int:
        result = await db.execute(
            select(func.count()).select_from(WebsiteTag).where(WebsiteTag.tag_id == tag_id)
        )
        return result.scalar() or 0

    @staticmethod
    def _to_response(tag: Tag, website_count: int) -> TagResponse:
        return TagResponse.model_validate(tag).model_copy(update={"website_count": website_count})


tag_service = TagService()
