"""
WebVault Backend — Submission Service
=======================================

What:  User-proposed websites. A submission creates a hidden, pending
       website plus a submission request that keeps the raw payload for the
       reviewers; the admin listing reads those requests back.
"""

import json
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.models.submission import SubmissionRequest
from webvault.models.website import Website
from webvault.queries.slugs import unique_slug
from webvault.queries.websites import Pagination
from webvault.schemas.common import PageResponse
from webvault.schemas.submission import SubmissionCreate, SubmissionResponse
from webvault.services.audit_service import audit_service
from webvault.services.errors import database_errors
from webvault.services.tag_service import tag_service

logger = logging.getLogger(__name__)


class SubmissionService:
    async def create_submission(
        self, db: AsyncSession, payload: SubmissionCreate, submitted_by: str
    ) -> SubmissionResponse:
        """
        Record a submission for review.

        Raises:
            ValidationError: unknown tag id (→ 422)
            DatabaseError: the insert failed (→ 500)
        """
        with database_errors("create_submission"):
            website = Website(
                title=payload.title,
                url=payload.url,
                slug=await unique_slug(db, Website, payload.title, max_length=160),
                description=payload.description,
                category=payload.category,
                notes=payload.notes,
                status="pending",
                review_status="pending",
                is_public=False,
                submitted_by=submitted_by,
            )
            db.add(website)
            await db.flush()

            if payload.tag_ids:
                await tag_service.replace_website_tags(db, website.id, payload.tag_ids)

            submission = SubmissionRequest(
                website_id=website.id,
                payload=json.dumps(payload.model_dump(by_alias=True), ensure_ascii=False),
                submitted_by=submitted_by,
                status="pending",
            )
            db.add(submission)
            await db.flush()

            audit_service.record(
                db,
                actor_id=submitted_by,
                action="submission.create",
                entity_type="submission",
                entity_id=submission.id,
                changes={"websiteId": website.id, "url": payload.url},
            )

        logger.info("Submission %s created for website %s", submission.id, website.id)
        return SubmissionResponse.model_validate(submission)

    async def list_submissions(
        self,
        db: AsyncSession,
        pagination: Pagination,
        status: Optional[str] = None,
    ) -> PageResponse[SubmissionResponse]:
        conditions = []
        if status:
            conditions.append(SubmissionRequest.status == status)

        with database_errors("list_submissions"):
            rows = (
                await db.execute(
                    select(SubmissionRequest)
                    .where(*conditions)
                    .order_by(SubmissionRequest.created_at.desc(), SubmissionRequest.id)
                    .limit(pagination.limit)
                    .offset(pagination.offset)
                )
            ).scalars().all()
            total = (
                await db.execute(
                    select(func.count()).select_from(SubmissionRequest).where(*conditions)
                )
            ).scalar() or 0

        return PageResponse[SubmissionResponse](
            items=[SubmissionResponse.model_validate(row) for row in rows],
            page=pagination.page,
            page_size=pagination.page_size,
            total=total,
            has_more=pagination.offset + len(rows) < total,
        )


submission_service = SubmissionService()
