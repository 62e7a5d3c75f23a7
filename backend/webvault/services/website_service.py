"""
WebVault Backend — Public Website Service
===========================================

What:  Read-side facade for the public directory: listing, detail, visit
       counting and the derived category list.
How:   Pagination is normalised once (default 12, max 48), the shared
       listing query runs with `visible_only=True`, and rows are mapped to
       WebsiteResponse DTOs. Unexpected failures become DatabaseError (500).
"""

import logging
from dataclasses import replace
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.config import settings
from webvault.exceptions import NotFoundError
from webvault.models.website import Website
from webvault.queries.websites import WebsiteFilters, list_websites, normalize_pagination
from webvault.schemas.common import PageResponse
from webvault.schemas.website import CategoryCount, VisitResponse, WebsiteResponse
from webvault.services.errors import database_errors

logger = logging.getLogger(__name__)


class WebsiteService:
    async def list_websites(
        self,
        db: AsyncSession,
        filters: WebsiteFilters,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> PageResponse[WebsiteResponse]:
        """
        One page of publicly visible websites.

        Raises:
            ValidationError: non-positive page or pageSize (→ 422)
            DatabaseError: either query failed (→ 500)
        """
        pagination = normalize_pagination(
            page,
            page_size,
            default_page_size=settings.default_page_size,
            max_page_size=settings.max_page_size,
        )
        with database_errors("list_websites"):
            rows, total = await list_websites(db, replace(filters, visible_only=True), pagination)

        return PageResponse[WebsiteResponse](
            items=[WebsiteResponse.model_validate(row) for row in rows],
            page=pagination.page,
            page_size=pagination.page_size,
            total=total,
            has_more=pagination.offset + len(rows) < total,
        )

    async def get_website(self, db: AsyncSession, website_id: str) -> WebsiteResponse:
        with database_errors("get_website", website_id=website_id):
            website = await self._get_visible(db, website_id)
        return WebsiteResponse.model_validate(website)

    async def record_visit(self, db: AsyncSession, website_id: str) -> VisitResponse:
        """Atomically increment visit_count (a single UPDATE, no read-modify-write)."""
        with database_errors("record_visit", website_id=website_id):
            result = await db.execute(
                update(Website)
                .where(
                    Website.id == website_id,
                    Website.status == "active",
                    Website.is_public.is_(True),
                )
                .values(visit_count=Website.visit_count + 1, updated_at=Website.updated_at)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(resource="website", resource_id=website_id)
            count = (
                await db.execute(select(Website.visit_count).where(Website.id == website_id))
            ).scalar_one()
        return VisitResponse(id=website_id, visit_count=count)

    async def list_categories(self, db: AsyncSession) -> List[CategoryCount]:
        """Distinct categories of visible websites with their counts."""
        with database_errors("list_categories"):
            rows = (
                await db.execute(
                    select(Website.category, func.count(Website.id))
                    .where(
                        Website.category.is_not(None),
                        Website.status == "active",
                        Website.is_public.is_(True),
                    )
                    .group_by(Website.category)
                    .order_by(Website.category)
                )
            ).all()
        return [CategoryCount(name=name, count=count) for name, count in rows]

    async def _get_visible(self, db: AsyncSession, website_id: str) -> Website:
        website = (
            await db.execute(
                select(Website).where(
                    Website.id == website_id,
                    Website.status == "active",
                    Website.is_public.is_(True),
                )
            )
        ).scalar_one_or_none()
        if website is None:
            raise NotFoundError(resource="website", resource_id=website_id)
        return website


website_service = WebsiteService()
