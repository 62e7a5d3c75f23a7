"""
WebVault Backend — Blog Service Tests
=======================================

What we test:
    ✅ Publish time rules for draft / published / archived
    ✅ Creating and updating posts keeps published_at consistent
    ✅ Public listing and detail only expose published posts
"""

from datetime import datetime, timezone

import pytest

from webvault.exceptions import NotFoundError
from webvault.queries.websites import Pagination
from webvault.schemas.blog_post import BlogPostCreate, BlogPostUpdate
from webvault.services.blog_service import blog_service, resolve_published_at

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
EARLIER = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
LATER = datetime(2024, 7, 1, 9, 0, tzinfo=timezone.utc)


class TestResolvePublishedAt:
    def test_published_prefers_provided(self):
        assert resolve_published_at("published", LATER, EARLIER, now=NOW) == LATER

    def test_published_keeps_previous(self):
        assert resolve_published_at("published", None, EARLIER, now=NOW) == EARLIER

    def test_published_defaults_to_now(self):
        assert resolve_published_at("published", None, None, now=NOW) == NOW

    def test_archived_keeps_previous(self):
        assert resolve_published_at("archived", LATER, EARLIER, now=NOW) == EARLIER

    def test_archived_without_previous_uses_provided(self):
        assert resolve_published_at("archived", LATER, None, now=NOW) == LATER

    def test_draft_is_never_published(self):
        assert resolve_published_at("draft", LATER, EARLIER, now=NOW) is None


class TestBlogPosts:
    @pytest.mark.asyncio
    async def test_create_published_sets_time(self, db_session):
        post = await blog_service.create_post(
            db_session, BlogPostCreate(title="Hello World", content="Body", status="published")
        )
        assert post.slug == "hello-world"
        assert post.published_at is not None

    @pytest.mark.asyncio
    async def test_create_draft_has_no_time(self, db_session):
        post = await blog_service.create_post(
            db_session,
            BlogPostCreate(title="Draft", content="Body", published_at=LATER),
        )
        assert post.status == "draft"
        assert post.published_at is None

    @pytest.mark.asyncio
    async def test_publishing_a_draft(self, db_session):
        post = await blog_service.create_post(db_session, BlogPostCreate(title="Soon", content="Body"))
        updated = await blog_service.update_post(
            db_session, post.id, BlogPostUpdate(status="published", published_at=EARLIER)
        )
        assert updated.status == "published"
        assert updated.published_at == EARLIER

    @pytest.mark.asyncio
    async def test_back_to_draft_clears_time(self, db_session):
        post = await blog_service.create_post(
            db_session, BlogPostCreate(title="Live", content="Body", status="published")
        )
        updated = await blog_service.update_post(db_session, post.id, BlogPostUpdate(status="draft"))
        assert updated.published_at is None

    @pytest.mark.asyncio
    async def test_tags_are_stored_as_list(self, db_session):
        post = await blog_service.create_post(
            db_session, BlogPostCreate(title="Tagged", content="Body", tags="news, tools")
        )
        assert post.tags == ["news", "tools"]

    @pytest.mark.asyncio
    async def test_public_listing_only_published(self, db_session):
        await blog_service.create_post(
            db_session, BlogPostCreate(title="Live", content="Body", status="published")
        )
        await blog_service.create_post(db_session, BlogPostCreate(title="Draft", content="Body"))
        await blog_service.create_post(
            db_session,
            BlogPostCreate(title="Old", content="Body", status="archived", published_at=EARLIER),
        )

        page = await blog_service.list_posts(db_session, Pagination(1, 10), status="published")
        assert [post.title for post in page.items] == ["Live"]
        assert page.total == 1

    @pytest.mark.asyncio
    async def test_tag_filter_matches_whole_tag(self, db_session):
        await blog_service.create_post(
            db_session,
            BlogPostCreate(title="Tools", content="Body", status="published", tags=["tools"]),
        )
        await blog_service.create_post(
            db_session,
            BlogPostCreate(title="Toolsmith", content="Body", status="published", tags=["toolsmith"]),
        )

        page = await blog_service.list_posts(db_session, Pagination(1, 10), tag="tools")
        assert [post.title for post in page.items] == ["Tools"]

    @pytest.mark.asyncio
    async def test_get_published_hides_drafts(self, db_session):
        await blog_service.create_post(db_session, BlogPostCreate(title="Secret", content="Body"))

        with pytest.raises(NotFoundError):
            await blog_service.get_published(db_session, "secret")

    @pytest.mark.asyncio
    async def test_public_endpoint(self, test_client, session_factory):
        async with session_factory() as session:
            await blog_service.create_post(
                session, BlogPostCreate(title="Release Notes", content="Body", status="published")
            )
            await session.commit()

        response = await test_client.get("/api/blog-posts")
        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "1"
        assert response.json()["data"]["items"][0]["slug"] == "release-notes"

        detail = await test_client.get("/api/blog-posts/release-notes")
        assert detail.json()["data"]["title"] == "Release Notes"
