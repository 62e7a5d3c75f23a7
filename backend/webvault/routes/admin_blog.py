"""WebVault Backend — Admin Blog Routes (session required, every status)."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.config import settings
from webvault.database import get_db_session
from webvault.dependencies import require_session
from webvault.queries.websites import normalize_pagination
from webvault.schemas.blog_post import (
    BlogPostCreate,
    BlogPostResponse,
    BlogPostStatus,
    BlogPostUpdate,
)
from webvault.schemas.common import PageResponse
from webvault.schemas.envelope import FailEnvelope, SuccessEnvelope, success
from webvault.services.blog_service import blog_service

router = APIRouter(
    prefix="/api/admin/blog-posts",
    tags=["Admin: Blog"],
    responses={401: {"description": "No session", "model": FailEnvelope}},
)


@router.get(
    "",
    response_model=SuccessEnvelope[PageResponse[BlogPostResponse]],
    responses={422: {"description": "Invalid pagination", "model": FailEnvelope}},
    summary="List blog posts",
)
async def list_blog_posts(
    response: Response,
    search: Optional[str] = Query(default=None),
    status: Optional[BlogPostStatus] = Query(default=None),
    tag: Optional[str] = Query(default=None),
    order_by: Literal["recent", "oldest", "title"] = Query(default="recent", alias="orderBy"),
    page: Optional[int] = Query(default=None),
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[PageResponse[BlogPostResponse]]:
    pagination = normalize_pagination(
        page,
        page_size,
        default_page_size=settings.admin_default_page_size,
        max_page_size=settings.admin_max_page_size,
    )
    result = await blog_service.list_posts(
        db, pagination, search=search, status=status, tag=tag, order_by=order_by
    )
    response.headers["X-Total-Count"] = str(result.total)
    return success(result)


@router.post(
    "",
    status_code=201,
    response_model=SuccessEnvelope[BlogPostResponse],
    responses={422: {"description": "Invalid post", "model": FailEnvelope}},
    summary="Create a blog post",
)
async def create_blog_post(
    payload: BlogPostCreate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[BlogPostResponse]:
    result = await blog_service.create_post(db, payload, actor_id=session_id)
    return success(result, message="created")


@router.get(
    "/{post_id}",
    response_model=SuccessEnvelope[BlogPostResponse],
    responses={404: {"description": "Post not found", "model": FailEnvelope}},
    summary="Get a blog post in any status",
)
async def get_blog_post(
    post_id: str,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[BlogPostResponse]:
    return success(await blog_service.get_post(db, post_id))


@router.patch(
    "/{post_id}",
    response_model=SuccessEnvelope[BlogPostResponse],
    responses={
        404: {"description": "Post not found", "model": FailEnvelope},
        422: {"description": "Invalid or empty patch", "model": FailEnvelope},
    },
    summary="Update a blog post",
)
async def update_blog_post(
    post_id: str,
    payload: BlogPostUpdate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[BlogPostResponse]:
    result = await blog_service.update_post(db, post_id, payload, actor_id=session_id)
    return success(result, message="updated")


@router.delete(
    "/{post_id}",
    response_model=SuccessEnvelope,
    responses={404: {"description": "Post not found", "model": FailEnvelope}},
    summary="Delete a blog post",
)
async def delete_blog_post(
    post_id: str,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope:
    await blog_service.delete_post(db, post_id, actor_id=session_id)
    return success(message="deleted")
