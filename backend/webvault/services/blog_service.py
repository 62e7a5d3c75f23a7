"""
WebVault Backend — Blog Service
=================================

What:  Blog post listing (public: published only) and admin CRUD.

Publish time rules (resolve_published_at):
    published  provided value, else the previous value, else now
    archived   previous value, else the provided value
    draft      always None
"""

import logging
from datetime import datetime
from typing import Literal, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.exceptions import NotFoundError
from webvault.models.blog_post import BlogPost
from webvault.queries.slugs import unique_slug
from webvault.queries.websites import LIKE_ESCAPE, Pagination, contains_pattern, escape_like
from webvault.schemas.blog_post import BlogPostCreate, BlogPostResponse, BlogPostUpdate
from webvault.schemas.common import PageResponse
from webvault.services.audit_service import audit_service
from webvault.services.errors import database_errors
from webvault.utils import dump_json_list, utcnow

logger = logging.getLogger(__name__)

BlogOrder = Literal["recent", "oldest", "title"]


def resolve_published_at(
    status: str,
    provided: Optional[datetime],
    previous: Optional[datetime],
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    if status == "published":
        return provided or previous or (now or utcnow())
    if status == "archived":
        return previous or provided
    return None


class BlogService:
    async def list_posts(
        self,
        db: AsyncSession,
        pagination: Pagination,
        search: Optional[str] = None,
        status: Optional[str] = None,
        tag: Optional[str] = None,
        order_by: BlogOrder = "recent",
    ) -> PageResponse[BlogPostResponse]:
        conditions = []
        term = (search or "").strip()
        if term:
            pattern = contains_pattern(term)
            conditions.append(
                or_(
                    BlogPost.title.ilike(pattern, escape=LIKE_ESCAPE),
                    BlogPost.summary.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        if status:
            conditions.append(BlogPost.status == status)
        if tag:
            # Tags are stored as a JSON array of strings; match the quoted element
            conditions.append(
                BlogPost.tags.like(f'%"{escape_like(tag.strip())}"%', escape=LIKE_ESCAPE)
            )

        ordering = {
            "recent": [func.coalesce(BlogPost.published_at, BlogPost.created_at).desc()],
            "oldest": [func.coalesce(BlogPost.published_at, BlogPost.created_at).asc()],
            "title": [BlogPost.title.asc()],
        }[order_by]

        with database_errors("list_blog_posts"):
            rows = (
                await db.execute(
                    select(BlogPost)
                    .where(*conditions)
                    .order_by(*ordering, BlogPost.id)
                    .limit(pagination.limit)
                    .offset(pagination.offset)
                )
            ).scalars().all()
            total = (
                await db.execute(select(func.count()).select_from(BlogPost).where(*conditions))
            ).scalar() or 0

        return PageResponse[BlogPostResponse](
            items=[BlogPostResponse.model_validate(row) for row in rows],
            page=pagination.page,
            page_size=pagination.page_size,
            total=total,
            has_more=pagination.offset + len(rows) < total,
        )

    async def get_published(self, db: AsyncSession, slug: str) -> BlogPostResponse:
        with database_errors("get_blog_post", slug=slug):
            post = (
                await db.execute(
                    select(BlogPost).where(BlogPost.slug == slug, BlogPost.status == "published")
                )
            ).scalars().first()
        if post is None:
            raise NotFoundError(resource="blog post", resource_id=slug)
        return BlogPostResponse.model_validate(post)

    async def get_post(self, db: AsyncSession, post_id: str) -> BlogPostResponse:
        return BlogPostResponse.model_validate(await self._get(db, post_id))

    async def create_post(
        self, db: AsyncSession, payload: BlogPostCreate, actor_id: Optional[str] = None
    ) -> BlogPostResponse:
        with database_errors("create_blog_post"):
            post = BlogPost(
                title=payload.title,
                slug=await unique_slug(db, BlogPost, payload.slug or payload.title, max_length=200),
                summary=payload.summary,
                content=payload.content,
                status=payload.status,
                published_at=resolve_published_at(payload.status, payload.published_at, None),
                cover_image=payload.cover_image,
                author_id=payload.author_id or actor_id,
                tags=dump_json_list(payload.tags or []),
            )
            db.add(post)
            await db.flush()
            audit_service.record(
                db,
                actor_id=actor_id,
                action="blog.create",
                entity_type="blog_post",
                entity_id=post.id,
                changes={"title": post.title, "status": post.status},
            )
        return BlogPostResponse.model_validate(post)

    async def update_post(
        self,
        db: AsyncSession,
        post_id: str,
        payload: BlogPostUpdate,
        actor_id: Optional[str] = None,
    ) -> BlogPostResponse:
        post = await self._get(db, post_id)
        changes = payload.changes()
        with database_errors("update_blog_post", post_id=post_id):
            if "slug" in changes and changes["slug"] != post.slug:
                post.slug = await unique_slug(
                    db, BlogPost, changes["slug"], exclude_id=post.id, max_length=200
                )
            for field in ("title", "summary", "content", "cover_image", "author_id"):
                if field in changes:
                    setattr(post, field, changes[field])
            if "tags" in changes:
                post.tags = dump_json_list(changes["tags"] or [])

            status = changes.get("status", post.status)
            if "status" in changes or "published_at" in changes:
                cleared = "published_at" in changes and changes["published_at"] is None
                previous = None if cleared else post.published_at
                post.published_at = resolve_published_at(
                    status, changes.get("published_at"), previous
                )
            post.status = status
            await db.flush()
            audit_service.record(
                db,
                actor_id=actor_id,
                action="blog.update",
                entity_type="blog_post",
                entity_id=post.id,
                changes=changes,
            )
        return BlogPostResponse.model_validate(post)

    async def delete_post(self, db: AsyncSession, post_id: str, actor_id: Optional[str] = None) -> None:
        post = await self._get(db, post_id)
        with database_errors("delete_blog_post", post_id=post_id):
            await db.delete(post)
            audit_service.record(
                db,
                actor_id=actor_id,
                action="blog.delete",
                entity_type="blog_post",
                entity_id=post_id,
                changes={"slug": post.slug},
            )

    async def _get(self, db: AsyncSession, post_id: str) -> BlogPost:
        with database_errors("get_blog_post", post_id=post_id):
            post = await db.get(BlogPost, post_id)
        if post is None:
            raise NotFoundError(resource="blog post", resource_id=post_id)
        return post


blog_service = BlogService()
