"""
WebVault Backend — Public Website Routes
=========================================

What:  The public directory: listing, detail, visit counting and categories.
How:   Query parameters are normalised here ("all"/"" → no filter) and
       handed to WebsiteService as a WebsiteFilters value; the service owns
       pagination rules and visibility.

    GET  /api/websites               paginated listing
    GET  /api/websites/{id}          one visible website
    POST /api/websites/{id}/visit    visit_count + 1
    GET  /api/categories             categories with counts
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.database import get_db_session
from webvault.dependencies import optional_filter
from webvault.queries.websites import WebsiteFilters
from webvault.schemas.common import PageResponse
from webvault.schemas.envelope import FailEnvelope, SuccessEnvelope, success
from webvault.schemas.website import CategoryCount, VisitResponse, WebsiteResponse
from webvault.services.website_service import website_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Websites"])


@router.get(
    "/websites",
    response_model=SuccessEnvelope[PageResponse[WebsiteResponse]],
    responses={422: {"description": "Invalid filter or pagination", "model": FailEnvelope}},
    summary="List public websites",
)
async def list_websites(
    response: Response,
    page: Optional[int] = Query(default=None, description="1-indexed page number"),
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    query: Optional[str] = Query(default=None, description="Case-insensitive title search"),
    q: Optional[str] = Query(default=None, description="Alias of `query`"),
    category: Optional[str] = Query(default=None),
    featured: Optional[bool] = Query(default=None),
    include_ads: bool = Query(default=True, alias="includeAds"),
    min_rating: Optional[int] = Query(default=None, alias="minRating", ge=0, le=5),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[PageResponse[WebsiteResponse]]:
    filters = WebsiteFilters(
        query=query or q,
        category=optional_filter(category),
        featured=featured,
        include_ads=include_ads,
        min_rating=min_rating,
    )
    result = await website_service.list_websites(db, filters, page=page, page_size=page_size)
    response.headers["X-Total-Count"] = str(result.total)
    return success(result)


@router.get(
    "/websites/{website_id}",
    response_model=SuccessEnvelope[WebsiteResponse],
    responses={404: {"description": "Website not found", "model": FailEnvelope}},
    summary="Get a public website",
)
async def get_website(
    website_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[WebsiteResponse]:
    return success(await website_service.get_website(db, website_id))


@router.post(
    "/websites/{website_id}/visit",
    response_model=SuccessEnvelope[VisitResponse],
    responses={404: {"description": "Website not found", "model": FailEnvelope}},
    summary="Record a visit",
)
async def record_visit(
    website_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[VisitResponse]:
    return success(await website_service.record_visit(db, website_id))


@router.get(
    "/categories",
    response_model=SuccessEnvelope[List[CategoryCount]],
    summary="List categories of visible websites",
)
async def list_categories(
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[List[CategoryCount]]:
    return success(await website_service.list_categories(db))
