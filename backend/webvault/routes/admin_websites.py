"""
WebVault Backend — Admin Website Routes
=========================================

Every route requires a session; the session id is recorded as the actor on
the audit rows the service writes.

    GET    /api/admin/websites                  filtered, sortable listing
    POST   /api/admin/websites                  create
    POST   /api/admin/websites/bulk-review      one decision for many websites
    GET    /api/admin/websites/options          category, tag and collection choices
    GET    /api/admin/websites/{id}             detail (tags, collections, submission)
    PATCH  /api/admin/websites/{id}             partial update
    PATCH  /api/admin/websites/{id}/status      moderation fields only
    PUT    /api/admin/websites/{id}/tags        replace every tag
    DELETE /api/admin/websites/{id}             soft delete (status → inactive)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.database import get_db_session
from webvault.dependencies import optional_filter, require_session
from webvault.queries.websites import SortDirection, SortField, WebsiteFilters
from webvault.schemas.category import WebsiteFormOptions
from webvault.schemas.common import PageResponse
from webvault.schemas.envelope import ErrorEnvelope, FailEnvelope, SuccessEnvelope, success
from webvault.schemas.website import (
    BulkReviewRequest,
    BulkReviewResult,
    ReviewStatus,
    WebsiteAdminDetail,
    WebsiteAdminResponse,
    WebsiteCreate,
    WebsiteStatus,
    WebsiteStatusUpdate,
    WebsiteTagsUpdate,
    WebsiteUpdate,
)
from webvault.services.website_admin_service import website_admin_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/websites",
    tags=["Admin: Websites"],
    responses={401: {"description": "No session", "model": FailEnvelope}},
)


@router.get(
    "",
    response_model=SuccessEnvelope[PageResponse[WebsiteAdminResponse]],
    responses={422: {"description": "Invalid filter or pagination", "model": FailEnvelope}},
    summary="List websites for moderation",
)
async def list_websites(
    response: Response,
    page: Optional[int] = Query(default=None),
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    search: Optional[str] = Query(default=None, description="Title, description or URL"),
    status: Optional[WebsiteStatus] = Query(default=None),
    review_status: Optional[ReviewStatus] = Query(default=None, alias="reviewStatus"),
    category: Optional[str] = Query(default=None),
    is_featured: Optional[bool] = Query(default=None, alias="isFeatured"),
    is_public: Optional[bool] = Query(default=None, alias="isPublic"),
    is_ad: Optional[bool] = Query(default=None, alias="isAd"),
    include_ads: bool = Query(default=True, alias="includeAds"),
    ad_type: Optional[str] = Query(default=None, alias="adType"),
    min_rating: Optional[int] = Query(default=None, alias="minRating", ge=0, le=5),
    submitted_by: Optional[str] = Query(default=None, alias="submittedBy"),
    tag_id: Optional[str] = Query(default=None, alias="tagId"),
    order_by: Optional[SortField] = Query(default=None, alias="orderBy"),
    sort_dir: SortDirection = Query(default="desc", alias="sortDir"),
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[PageResponse[WebsiteAdminResponse]]:
    filters = WebsiteFilters(
        query=search,
        query_scope="all",
        category=optional_filter(category),
        featured=is_featured,
        include_ads=include_ads,
        min_rating=min_rating,
        status=status,
        review_status=review_status,
        is_public=is_public,
        is_ad=is_ad,
        ad_type=optional_filter(ad_type),
        submitted_by=optional_filter(submitted_by),
        tag_id=optional_filter(tag_id),
    )
    result = await website_admin_service.list_websites(
        db, filters, page=page, page_size=page_size, order_by=order_by, sort_dir=sort_dir
    )
    response.headers["X-Total-Count"] = str(result.total)
    return success(result)


@router.post(
    "",
    status_code=201,
    response_model=SuccessEnvelope[WebsiteAdminDetail],
    responses={422: {"description": "Invalid website", "model": FailEnvelope}},
    summary="Create a website",
)
async def create_website(
    payload: WebsiteCreate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[WebsiteAdminDetail]:
    result = await website_admin_service.create_website(db, payload, actor_id=session_id)
    return success(result, message="created")


# Declared before /{website_id} so "bulk-review" is never read as an id
@router.post(
    "/bulk-review",
    response_model=SuccessEnvelope[BulkReviewResult],
    responses={
        422: {"description": "Invalid payload or unknown id; nothing changed", "model": FailEnvelope},
        500: {"description": "Update failed; nothing changed", "model": ErrorEnvelope},
    },
    summary="Apply one review decision to many websites",
)
async def bulk_review(
    payload: BulkReviewRequest,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[BulkReviewResult]:
    result = await website_admin_service.bulk_review(db, payload, actor_id=session_id)
    return success(result, message="updated")


# Declared before /{website_id} so "options" is never read as an id
@router.get(
    "/options",
    response_model=SuccessEnvelope[WebsiteFormOptions],
    summary="Category, tag and collection choices for the website editor",
)
async def form_options(
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[WebsiteFormOptions]:
    return success(await website_admin_service.form_options(db))


@router.get(
    "/{website_id}",
    response_model=SuccessEnvelope[WebsiteAdminDetail],
    responses={404: {"description": "Website not found", "model": FailEnvelope}},
    summary="Get a website with its relations",
)
async def get_website(
    website_id: str,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[WebsiteAdminDetail]:
    return success(await website_admin_service.get_website(db, website_id))


@router.patch(
    "/{website_id}",
    response_model=SuccessEnvelope[WebsiteAdminDetail],
    responses={
        404: {"description": "Website not found", "model": FailEnvelope},
        422: {"description": "Invalid or empty patch", "model": FailEnvelope},
    },
    summary="Update a website",
)
async def update_website(
    website_id: str,
    payload: WebsiteUpdate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[WebsiteAdminDetail]:
    result = await website_admin_service.update_website(db, website_id, payload, actor_id=session_id)
    return success(result, message="updated")


@router.patch(
    "/{website_id}/status",
    response_model=SuccessEnvelope[WebsiteAdminResponse],
    responses={
        404: {"description": "Website not found", "model": FailEnvelope},
        422: {"description": "Invalid or empty patch", "model": FailEnvelope},
    },
    summary="Change moderation status",
)
async def update_status(
    website_id: str,
    payload: WebsiteStatusUpdate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[WebsiteAdminResponse]:
    result = await website_admin_service.update_status(db, website_id, payload, actor_id=session_id)
    return success(result, message="updated")


@router.put(
    "/{website_id}/tags",
    response_model=SuccessEnvelope[WebsiteAdminDetail],
    responses={
        404: {"description": "Website not found", "model": FailEnvelope},
        422: {"description": "Unknown tag id; nothing changed", "model": FailEnvelope},
    },
    summary="Replace a website's tags",
)
async def replace_tags(
    website_id: str,
    payload: WebsiteTagsUpdate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[WebsiteAdminDetail]:
    result = await website_admin_service.replace_tags(
        db, website_id, payload.tag_ids, actor_id=session_id
    )
    return success(result, message="updated")


@router.delete(
    "/{website_id}",
    response_model=SuccessEnvelope[WebsiteAdminResponse],
    responses={404: {"description": "Website not found", "model": FailEnvelope}},
    summary="Soft-delete a website",
)
async def delete_website(
    website_id: str,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[WebsiteAdminResponse]:
    result = await website_admin_service.delete_website(db, website_id, actor_id=session_id)
    return success(result, message="deleted")
