"""
WebVault Backend — Website Admin Service
==========================================

What:  Moderation-side operations on websites: filtered listing, detail,
       create / update / status change, soft delete, tag replacement, the
       bulk review action and the editor's option lists.
Who:   The /api/admin/websites routes. Every mutation writes an audit row in
       the same session, so data and audit commit (or roll back) together.

Bulk review:
    1. Load every requested id in one query
    2. Any unknown id rejects the batch (ValidationError on "ids"), nothing
       has been written yet
    3. Set review_status, derive status, overwrite notes when given
    4. Close the websites' pending submission requests
    5. One `website.review` audit row per website
    The request session's commit/rollback makes 3-5 all-or-nothing.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.config import settings
from webvault.constants import REVIEW_TO_WEBSITE_STATUS
from webvault.exceptions import NotFoundError, ValidationError
from webvault.models.submission import SubmissionRequest
from webvault.models.website import Website
from webvault.queries.slugs import unique_slug
from webvault.queries.websites import (
    SortDirection,
    SortField,
    WebsiteFilters,
    list_websites,
    normalize_pagination,
)
from webvault.schemas.category import CollectionOption, TagOption, WebsiteFormOptions
from webvault.schemas.common import PageResponse
from webvault.schemas.website import (
    AD_TYPE_REQUIRED_MESSAGE,
    BulkReviewRequest,
    BulkReviewResult,
    SubmissionSummary,
    WebsiteAdminDetail,
    WebsiteAdminResponse,
    WebsiteCreate,
    WebsiteStatusUpdate,
    WebsiteUpdate,
)
from webvault.services.audit_service import audit_service
from webvault.services.category_service import category_service
from webvault.services.collection_service import collection_service
from webvault.services.errors import database_errors
from webvault.services.tag_service import tag_service
from webvault.utils import utcnow

logger = logging.getLogger(__name__)

# Columns a create/update payload may write directly
_PLAIN_FIELDS = (
    "title",
    "url",
    "description",
    "category",
    "is_ad",
    "ad_type",
    "rating",
    "visit_count",
    "is_featured",
    "is_public",
    "status",
    "review_status",
    "favicon_url",
    "screenshot_url",
    "notes",
    "submitted_by",
)


class WebsiteAdminService:
    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_websites(
        self,
        db: AsyncSession,
        filters: WebsiteFilters,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        order_by: Optional[SortField] = None,
        sort_dir: SortDirection = "desc",
    ) -> PageResponse[WebsiteAdminResponse]:
        pagination = normalize_pagination(
            page,
            page_size,
            default_page_size=settings.admin_default_page_size,
            max_page_size=settings.admin_max_page_size,
        )
        with database_errors("admin_list_websites"):
            rows, total = await list_websites(
                db, filters, pagination, order_by=order_by or "recent", sort_dir=sort_dir
            )

        return PageResponse[WebsiteAdminResponse](
            items=[WebsiteAdminResponse.model_validate(row) for row in rows],
            page=pagination.page,
            page_size=pagination.page_size,
            total=total,
            has_more=pagination.offset + len(rows) < total,
        )

    async def get_website(self, db: AsyncSession, website_id: str) -> WebsiteAdminDetail:
        website = await self._get(db, website_id)
        with database_errors("admin_get_website", website_id=website_id):
            return await self._detail(db, website)

    async def form_options(self, db: AsyncSession) -> WebsiteFormOptions:
        """Choices for the website editor: flattened categories, every tag, every collection."""
        categories = await category_service.category_options(db)
        tags = await tag_service.list_tags(db, status="all")
        collections = await collection_service.list_collections(db, order_by="name")
        return WebsiteFormOptions(
            categories=categories,
            tags=[TagOption.model_validate(tag.model_dump()) for tag in tags.items],
            collections=[CollectionOption.model_validate(item.model_dump()) for item in collections],
        )

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_website(
        self, db: AsyncSession, payload: WebsiteCreate, actor_id: Optional[str] = None
    ) -> WebsiteAdminDetail:
        """
        Create a website, optionally linking the submission it came from.

        Raises:
            ValidationError: unknown tag, collection or submission id (→ 422)
            DatabaseError: the insert failed (→ 500)
        """
        data = payload.model_dump(exclude_none=True)
        with database_errors("create_website"):
            submission = None
            if payload.submission_id:
                submission = await db.get(SubmissionRequest, payload.submission_id)
                if submission is None:
                    raise ValidationError(
                        message=f"Unknown submission id: {payload.submission_id}",
                        field="submissionId",
                    )

            website = Website(
                slug=await unique_slug(db, Website, payload.slug or payload.title, max_length=160),
                **{field: data[field] for field in _PLAIN_FIELDS if field in data},
            )
            if not website.is_ad:
                website.ad_type = None
            db.add(website)
            await db.flush()

            if payload.tag_ids:
                await tag_service.replace_website_tags(db, website.id, payload.tag_ids)
            if payload.collection_ids:
                await collection_service.set_website_collections(
                    db, website.id, payload.collection_ids
                )
            if submission is not None:
                submission.website_id = website.id
                submission.status = "approved"
                submission.reviewed_by = actor_id
                submission.reviewed_at = utcnow()
                await db.flush()

            audit_service.record(
                db,
                actor_id=actor_id,
                action="website.create",
                entity_type="website",
                entity_id=website.id,
                changes=data,
            )
            return await self._detail(db, website)

    async def update_website(
        self,
        db: AsyncSession,
        website_id: str,
        payload: WebsiteUpdate,
        actor_id: Optional[str] = None,
    ) -> WebsiteAdminDetail:
        website = await self._get(db, website_id)
        changes = payload.changes()
        is_ad = changes.get("is_ad", website.is_ad)
        ad_type = changes["ad_type"] if "ad_type" in changes else website.ad_type
        if is_ad and not ad_type:
            raise ValidationError(message=AD_TYPE_REQUIRED_MESSAGE, field="adType")
        with database_errors("update_website", website_id=website_id):
            if "slug" in changes:
                if changes["slug"] is None:
                    website.slug = None
                elif changes["slug"] != website.slug:
                    website.slug = await unique_slug(
                        db, Website, changes["slug"], exclude_id=website.id, max_length=160
                    )
            for field in _PLAIN_FIELDS:
                if field in changes:
                    setattr(website, field, changes[field])
            if not website.is_ad:
                website.ad_type = None
            await db.flush()

            if "tag_ids" in changes:
                await tag_service.replace_website_tags(db, website.id, changes["tag_ids"] or [])
            if "collection_ids" in changes:
                await collection_service.set_website_collections(
                    db, website.id, changes["collection_ids"] or []
                )

            audit_service.record(
                db,
                actor_id=actor_id,
                action="website.update",
                entity_type="website",
                entity_id=website.id,
                changes=changes,
            )
            return await self._detail(db, website)

    async def update_status(
        self,
        db: AsyncSession,
        website_id: str,
        payload: WebsiteStatusUpdate,
        actor_id: Optional[str] = None,
    ) -> WebsiteAdminResponse:
        """Change moderation fields; a review decision without an explicit status derives one."""
        website = await self._get(db, website_id)
        changes = payload.changes()
        with database_errors("update_website_status", website_id=website_id):
            for field in ("status", "review_status", "is_public", "is_featured", "notes"):
                if field in changes:
                    setattr(website, field, changes[field])
            if "review_status" in changes and "status" not in changes:
                derived = REVIEW_TO_WEBSITE_STATUS.get(changes["review_status"])
                if derived:
                    website.status = derived
            await db.flush()
            audit_service.record(
                db,
                actor_id=actor_id,
                action="website.updateStatus",
                entity_type="website",
                entity_id=website.id,
                changes=changes,
            )
        return WebsiteAdminResponse.model_validate(website)

    async def delete_website(
        self, db: AsyncSession, website_id: str, actor_id: Optional[str] = None
    ) -> WebsiteAdminResponse:
        """Soft delete: the row stays, status moves to 'inactive'."""
        website = await self._get(db, website_id)
        with database_errors("delete_website", website_id=website_id):
            previous = website.status
            website.status = "inactive"
            await db.flush()
            audit_service.record(
                db,
                actor_id=actor_id,
                action="website.delete",
                entity_type="website",
                entity_id=website.id,
                changes={"status": {"from": previous, "to": "inactive"}},
            )
        return WebsiteAdminResponse.model_validate(website)

    async def replace_tags(
        self,
        db: AsyncSession,
        website_id: str,
        tag_ids: List[str],
        actor_id: Optional[str] = None,
    ) -> WebsiteAdminDetail:
        website = await self._get(db, website_id)
        with database_errors("replace_tags", website_id=website_id):
            names = await tag_service.replace_website_tags(db, website.id, tag_ids)
            audit_service.record(
                db,
                actor_id=actor_id,
                action="website.tags.replace",
                entity_type="website",
                entity_id=website.id,
                changes={"tagIds": tag_ids, "tags": names},
            )
            return await self._detail(db, website)

    async def bulk_review(
        self, db: AsyncSession, payload: BulkReviewRequest, actor_id: Optional[str] = None
    ) -> BulkReviewResult:
        """
        Apply one review decision to every website in the batch, or to none.

        Raises:
            ValidationError: one or more ids do not exist (→ 422, no writes)
            DatabaseError: a write failed; the request transaction rolls back (→ 500)
        """
        ids = payload.ids
        status = REVIEW_TO_WEBSITE_STATUS[payload.review_status]
        with database_errors("bulk_review", batch_size=len(ids)):
            websites = (
                await db.execute(select(Website).where(Website.id.in_(ids)))
            ).scalars().all()
            found = {website.id for website in websites}
            missing = [website_id for website_id in ids if website_id not in found]
            if missing:
                raise ValidationError(
                    message=f"Unknown website id(s): {', '.join(missing)}",
                    field="ids",
                    context={"missing": missing},
                )

            reviewed_at = utcnow()
            for website in websites:
                previous = {"status": website.status, "reviewStatus": website.review_status}
                website.review_status = payload.review_status
                website.status = status
                if payload.notes is not None:
                    website.notes = payload.notes
                audit_service.record(
                    db,
                    actor_id=actor_id,
                    action="website.review",
                    entity_type="website",
                    entity_id=website.id,
                    changes={
                        "from": previous,
                        "to": {"status": status, "reviewStatus": payload.review_status},
                        "notes": payload.notes,
                    },
                )

            await db.execute(
                update(SubmissionRequest)
                .where(
                    SubmissionRequest.website_id.in_(ids),
                    SubmissionRequest.status == "pending",
                )
                .values(
                    status=payload.review_status,
                    reviewed_by=actor_id,
                    reviewed_at=reviewed_at,
                )
                .execution_options(synchronize_session=False)
            )
            await db.flush()

        logger.info(
            "Bulk review applied: %d website(s) -> %s by %s",
            len(websites),
            payload.review_status,
            actor_id,
        )
        return BulkReviewResult(updated=len(websites))

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get(self, db: AsyncSession, website_id: str) -> Website:
        with database_errors("admin_get_website", website_id=website_id):
            website = await db.get(Website, website_id)
        if website is None:
            raise NotFoundError(resource="website", resource_id=website_id)
        return website

    async def _detail(self, db: AsyncSession, website: Website) -> WebsiteAdminDetail:
        tag_ids = await tag_service.tag_ids_for_website(db, website.id)
        collection_ids = await collection_service.collection_ids_for_website(db, website.id)
        latest = (
            await db.execute(
                select(SubmissionRequest)
                .where(SubmissionRequest.website_id == website.id)
                .order_by(SubmissionRequest.created_at.desc(), SubmissionRequest.id)
                .limit(1)
            )
        ).scalars().first()

        base = WebsiteAdminResponse.model_validate(website)
        return WebsiteAdminDetail(
            **base.model_dump(),
            tag_ids=tag_ids,
            collection_ids=collection_ids,
            latest_submission=SubmissionSummary.model_validate(latest) if latest else None,
        )


website_admin_service = WebsiteAdminService()
