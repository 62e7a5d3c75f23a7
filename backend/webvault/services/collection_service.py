"""
WebVault Backend — Collection Service
=======================================

What:  Curated collections of websites: listing, CRUD and item replacement.

Item replacement:
    1. De-duplicate by website (first occurrence wins)
    2. Sort by the requested position, falling back to input order
    3. Re-index positions from 0
    4. Check every website exists BEFORE deleting the old items
"""

import logging
from typing import List, Literal, Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.exceptions import NotFoundError, ValidationError
from webvault.models.collection import Collection, CollectionItem
from webvault.models.website import Website
from webvault.queries.slugs import unique_slug
from webvault.queries.websites import LIKE_ESCAPE, contains_pattern
from webvault.schemas.collection import (
    CollectionCreate,
    CollectionDetailResponse,
    CollectionItemInput,
    CollectionItemResponse,
    CollectionResponse,
    CollectionUpdate,
)
from webvault.schemas.website import WebsiteResponse
from webvault.services.audit_service import audit_service
from webvault.services.errors import database_errors

logger = logging.getLogger(__name__)

CollectionOrder = Literal["order", "name", "recent"]


def normalize_items(items: Sequence[CollectionItemInput]) -> List[Tuple[int, CollectionItemInput]]:
    """Return (position, item) pairs, de-duplicated and re-indexed from 0."""
    seen = set()
    ranked = []
    for index, item in enumerate(items):
        if item.website_id in seen:
            continue
        seen.add(item.website_id)
        requested = item.position if item.position is not None else index
        ranked.append((requested, index, item))
    ranked.sort(key=lambda entry: (entry[0], entry[1]))
    return [(position, item) for position, (_, _, item) in enumerate(ranked)]


class CollectionService:
    async def list_collections(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        featured: Optional[bool] = None,
        order_by: CollectionOrder = "order",
    ) -> List[CollectionResponse]:
        conditions = []
        term = (search or "").strip()
        if term:
            pattern = contains_pattern(term)
            conditions.append(
                or_(
                    Collection.name.ilike(pattern, escape=LIKE_ESCAPE),
                    Collection.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        if featured is not None:
            conditions.append(Collection.is_featured.is_(featured))

        website_count = func.count(CollectionItem.id).label("website_count")
        ordering = {
            "order": [Collection.display_order.asc(), Collection.name.asc()],
            "name": [Collection.name.asc()],
            "recent": [Collection.created_at.desc()],
        }[order_by]

        with database_errors("list_collections"):
            rows = (
                await db.execute(
                    select(Collection, website_count)
                    .outerjoin(CollectionItem, CollectionItem.collection_id == Collection.id)
                    .where(*conditions)
                    .group_by(Collection.id)
                    .order_by(*ordering, Collection.id)
                )
            ).all()
        return [self._to_response(collection, count) for collection, count in rows]

    async def get_collection(
        self, db: AsyncSession, key: str, visible_only: bool = False
    ) -> CollectionDetailResponse:
        """Fetch by id or slug, with items in position order."""
        with database_errors("get_collection", key=key):
            collection = (
                await db.execute(
                    select(Collection).where(or_(Collection.id == key, Collection.slug == key))
                )
            ).scalars().first()
            if collection is None:
                raise NotFoundError(resource="collection", resource_id=key)
            return await self._detail(db, collection, visible_only=visible_only)

    async def create_collection(
        self, db: AsyncSession, payload: CollectionCreate, actor_id: Optional[str] = None
    ) -> CollectionDetailResponse:
        with database_errors("create_collection"):
            normalized = normalize_items(payload.items)
            await self._ensure_websites_exist(db, [item.website_id for _, item in normalized])

            slug = await unique_slug(db, Collection, payload.slug or payload.name, max_length=120)
            max_order = (await db.execute(select(func.max(Collection.display_order)))).scalar()
            collection = Collection(
                name=payload.name,
                slug=slug,
                description=payload.description,
                cover_image=payload.cover_image,
                is_featured=bool(payload.is_featured),
                display_order=(max_order + 1) if max_order is not None else 0,
            )
            db.add(collection)
            await db.flush()
            for position, item in normalized:
                db.add(
                    CollectionItem(
                        collection_id=collection.id,
                        website_id=item.website_id,
                        note=item.note,
                        position=position,
                    )
                )
            await db.flush()
            audit_service.record(
                db,
                actor_id=actor_id,
                action="collection.create",
                entity_type="collection",
                entity_id=collection.id,
                changes=payload.model_dump(exclude_none=True),
            )
            return await self._detail(db, collection)

    async def update_collection(
        self,
        db: AsyncSession,
        collection_id: str,
        payload: CollectionUpdate,
        actor_id: Optional[str] = None,
    ) -> CollectionDetailResponse:
        collection = await self._get(db, collection_id)
        changes = payload.changes()
        with database_errors("update_collection", collection_id=collection_id):
            if "slug" in changes and changes["slug"] != collection.slug:
                collection.slug = await unique_slug(
                    db, Collection, changes["slug"], exclude_id=collection.id, max_length=120
                )
            for field in ("name", "description", "cover_image", "is_featured"):
                if field in changes:
                    setattr(collection, field, changes[field])
            await db.flush()
            audit_service.record(
                db,
                actor_id=actor_id,
                action="collection.update",
                entity_type="collection",
                entity_id=collection.id,
                changes=changes,
            )
            return await self._detail(db, collection)

    async def delete_collection(
        self, db: AsyncSession, collection_id: str, actor_id: Optional[str] = None
    ) -> None:
        collection = await self._get(db, collection_id)
        with database_errors("delete_collection", collection_id=collection_id):
            await db.execute(delete(CollectionItem).where(CollectionItem.collection_id == collection.id))
            await db.delete(collection)
            audit_service.record(
                db,
                actor_id=actor_id,
                action="collection.delete",
                entity_type="collection",
                entity_id=collection_id,
                changes={"slug": collection.slug},
            )

    async def replace_items(
        self,
        db: AsyncSession,
        collection_id: str,
        items: Sequence[CollectionItemInput],
        actor_id: Optional[str] = None,
    ) -> CollectionDetailResponse:
        collection = await self._get(db, collection_id)
        normalized = normalize_items(items)
        with database_errors("replace_collection_items", collection_id=collection_id):
            await self._ensure_websites_exist(db, [item.website_id for _, item in normalized])
            await db.execute(delete(CollectionItem).where(CollectionItem.collection_id == collection.id))
            for position, item in normalized:
                db.add(
                    CollectionItem(
                        collection_id=collection.id,
                        website_id=item.website_id,
                        note=item.note,
                        position=position,
                    )
                )
            await db.flush()
            audit_service.record(
                db,
                actor_id=actor_id,
                action="collection.items.replace",
                entity_type="collection",
                entity_id=collection.id,
                changes={"websiteIds": [item.website_id for _, item in normalized]},
            )
            return await self._detail(db, collection)

    # ── Website-side membership ───────────────────────────────────────────

    async def set_website_collections(
        self, db: AsyncSession, website_id: str, collection_ids: Sequence[str]
    ) -> None:
        """Make `collection_ids` the exact set of collections holding the website."""
        wanted = list(dict.fromkeys(collection_ids))
        if wanted:
            found = set(
                (await db.execute(select(Collection.id).where(Collection.id.in_(wanted))))
                .scalars()
                .all()
            )
            missing = [cid for cid in wanted if cid not in found]
            if missing:
                raise ValidationError(
                    message=f"Unknown collection id(s): {', '.join(missing)}",
                    field="collectionIds",
                )

        current = set(await self.collection_ids_for_website(db, website_id))
        stale = current - set(wanted)
        if stale:
            await db.execute(
                delete(CollectionItem).where(
                    CollectionItem.website_id == website_id,
                    CollectionItem.collection_id.in_(stale),
                )
            )
        for collection_id in wanted:
            if collection_id in current:
                continue
            last = (
                await db.execute(
                    select(func.max(CollectionItem.position)).where(
                        CollectionItem.collection_id == collection_id
                    )
                )
            ).scalar()
            db.add(
                CollectionItem(
                    collection_id=collection_id,
                    website_id=website_id,
                    position=(last + 1) if last is not None else 0,
                )
            )
        await db.flush()

    async def collection_ids_for_website(self, db: AsyncSession, website_id: str) -> List[str]:
        rows = await db.execute(
            select(CollectionItem.collection_id)
            .where(CollectionItem.website_id == website_id)
            .distinct()
        )
        return list(rows.scalars().all())

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get(self, db: AsyncSession, collection_id: str) -> Collection:
        with database_errors("get_collection", collection_id=collection_id):
            collection = await db.get(Collection, collection_id)
        if collection is None:
            raise NotFoundError(resource="collection", resource_id=collection_id)
        return collection

    async def _ensure_websites_exist(self, db: AsyncSession, website_ids: List[str]) -> None:
        if not website_ids:
            return
        found = set(
            (await db.execute(select(Website.id).where(Website.id.in_(website_ids)))).scalars().all()
        )
        missing = [wid for wid in website_ids if wid not in found]
        if missing:
            raise ValidationError(
                message=f"Unknown website id(s): {', '.join(missing)}",
                field="items",
            )

    async def _detail(
        self, db: AsyncSession, collection: Collection, visible_only: bool = False
    ) -> CollectionDetailResponse:
        stmt = (
            select(CollectionItem, Website)
            .join(Website, Website.id == CollectionItem.website_id)
            .where(CollectionItem.collection_id == collection.id)
            .order_by(CollectionItem.position, CollectionItem.id)
        )
        if visible_only:
            stmt = stmt.where(Website.status == "active", Website.is_public.is_(True))
        rows = (await db.execute(stmt)).all()
        items = [
            CollectionItemResponse(
                id=item.id,
                website_id=item.website_id,
                note=item.note,
                position=item.position,
                website=WebsiteResponse.model_validate(website),
            )
            for item, website in rows
        ]
        base = self._to_response(collection, len(items))
        return CollectionDetailResponse(**base.model_dump(), items=items)

    @staticmethod
    def _to_response(collection: Collection, website_count: int) -> CollectionResponse:
        return CollectionResponse.model_validate(collection).model_copy(
            update={"website_count": website_count}
        )


collection_service = CollectionService()
