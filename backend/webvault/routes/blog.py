"""
WebVault Backend — Public Blog Routes
=======================================

Only published posts are visible here; drafts and archived posts are
reachable through the admin routes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.config import settings
from webvault.database import get_db_session
from webvault.queries.websites import normalize_pagination
from webvault.schemas.blog_post import BlogPostResponse
from webvault.schemas.common import PageResponse
from webvault.schemas.envelope import FailEnvelope, SuccessEnvelope, success
from webvault.services.blog_service import blog_service

router = APIRouter(prefix="/api", tags=["Blog"])

BLOG_MAX_PAGE_SIZE = 100


@router.get(
    "/blog-posts",
    response_model=SuccessEnvelope[PageResponse[BlogPostResponse]],
    responses={422: {"description": "Invalid pagination", "model": FailEnvelope}},
    summary="List published blog posts",
)
async def list_blog_posts(
    response: Response,
    search: Optional[str] = Query(default=None),
    tag: Optional[str] = Query(default=None),
    page: Optional[int] = Query(default=None),
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[PageResponse[BlogPostResponse]]:
    pagination = normalize_pagination(
        page,
        page_size,
        default_page_size=settings.blog_default_page_size,
        max_page_size=BLOG_MAX_PAGE_SIZE,
    )
    result = await blog_service.list_posts(
        db, pagination, search=search, status="published", tag=tag
    )
    response.headers["X-Total-Count"] = str(result.total)
    return success(result)


@router.get(
    "/blog-posts/{slug}",
    response_model=SuccessEnvelope[BlogPostResponse],
    responses={404: {"description": "Post not found or not published", "model": FailEnvelope}},
    summary="Get a published blog post",
)
async def get_blog_post(
    slug: str,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[BlogPostResponse]:
    return success(await blog_service.get_published(db, slug))
