"""
WebVault Backend — Website Listing Tests
==========================================

What we test:
    ✅ LIKE escaping: %, _ and \\ in a search term match literally
    ✅ Pagination normalisation (reject non-positive, clamp to the maximum)
    ✅ Page slicing and total count agree
    ✅ Filters compose (featured + minRating, includeAds)
    ✅ Public listing only returns active, public rows
    ✅ Visit counting and the category list
"""

import pytest

from webvault.exceptions import NotFoundError, ValidationError
from webvault.queries.websites import (
    Pagination,
    WebsiteFilters,
    escape_like,
    list_websites,
    normalize_pagination,
)
from webvault.services.website_service import website_service


class TestEscapeLike:
    def test_percent_and_underscore(self):
        assert escape_like("100%_off") == "100\\%\\_off"

    def test_backslash_is_doubled_first(self):
        assert escape_like("C:\\temp") == "C:\\\\temp"

    def test_plain_text_unchanged(self):
        assert escape_like("design tools") == "design tools"


class TestNormalizePagination:
    def test_defaults(self):
        pagination = normalize_pagination(None, None, default_page_size=12, max_page_size=48)
        assert pagination == Pagination(page=1, page_size=12)
        assert pagination.offset == 0

    def test_page_size_is_clamped(self):
        pagination = normalize_pagination(3, 500, default_page_size=12, max_page_size=48)
        assert pagination.page_size == 48
        assert pagination.offset == 96

    def test_zero_page_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_pagination(0, 12, default_page_size=12, max_page_size=48)
        assert "page" in exc_info.value.errors

    def test_negative_page_size_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_pagination(1, -5, default_page_size=12, max_page_size=48)
        assert "pageSize" in exc_info.value.errors


class TestLiteralSearch:
    @pytest.mark.asyncio
    async def test_percent_matches_literally(self, db_session, make_website):
        await make_website(title="100% Free")
        await make_website(title="100 Free Tools")

        rows, total = await list_websites(
            db_session, WebsiteFilters(query="100%"), Pagination(1, 50)
        )
        assert [row.title for row in rows] == ["100% Free"]
        assert total == 1

    @pytest.mark.asyncio
    async def test_underscore_matches_literally(self, db_session, make_website):
        await make_website(title="snake_case guide")
        await make_website(title="snakeXcase guide")

        rows, _ = await list_websites(
            db_session, WebsiteFilters(query="snake_case"), Pagination(1, 50)
        )
        assert [row.title for row in rows] == ["snake_case guide"]

    @pytest.mark.asyncio
    async def test_backslash_matches_literally(self, db_session, make_website):
        await make_website(title="C:\\temp cleaner")
        await make_website(title="C:temp cleaner")

        rows, _ = await list_websites(db_session, WebsiteFilters(query="\\"), Pagination(1, 50))
        assert [row.title for row in rows] == ["C:\\temp cleaner"]

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, db_session, make_website):
        await make_website(title="Figma")

        rows, _ = await list_websites(db_session, WebsiteFilters(query="fig"), Pagination(1, 50))
        assert len(rows) == 1

    @pytest.mark.asyncio
    async def test_blank_query_means_no_filter(self, db_session, make_website):
        await make_website()
        await make_website()

        _, total = await list_websites(db_session, WebsiteFilters(query="   "), Pagination(1, 50))
        assert total == 2

    @pytest.mark.asyncio
    async def test_scope_all_searches_description_and_url(self, db_session, make_website):
        await make_website(title="Alpha", description="a handy palette generator")
        await make_website(title="Beta", url="https://palette.example.com")
        await make_website(title="Gamma")

        rows, _ = await list_websites(
            db_session, WebsiteFilters(query="palette", query_scope="all"), Pagination(1, 50)
        )
        assert sorted(row.title for row in rows) == ["Alpha", "Beta"]


class TestPublicListing:
    @pytest.mark.asyncio
    async def test_first_page_and_total(self, db_session, make_website):
        for _ in range(15):
            await make_website()

        page = await website_service.list_websites(db_session, WebsiteFilters(), page=1, page_size=12)
        assert len(page.items) == 12
        assert page.total == 15
        assert page.has_more is True

        last = await website_service.list_websites(db_session, WebsiteFilters(), page=2, page_size=12)
        assert len(last.items) == 3
        assert last.has_more is False

    @pytest.mark.asyncio
    async def test_page_beyond_the_end_is_empty(self, db_session, make_website):
        await make_website()

        page = await website_service.list_websites(db_session, WebsiteFilters(), page=5)
        assert page.items == []
        assert page.total == 1

    @pytest.mark.asyncio
    async def test_hidden_rows_excluded(self, db_session, make_website):
        await make_website(title="Visible")
        await make_website(title="Inactive", status="inactive")
        await make_website(title="Private", is_public=False)
        await make_website(title="Pending", status="pending", review_status="pending")

        page = await website_service.list_websites(db_session, WebsiteFilters())
        assert [item.title for item in page.items] == ["Visible"]

    @pytest.mark.asyncio
    async def test_featured_and_min_rating_compose(self, db_session, make_website):
        await make_website(title="Featured 5", is_featured=True, rating=5)
        await make_website(title="Featured 4", is_featured=True, rating=4)
        await make_website(title="Featured 2", is_featured=True, rating=2)
        await make_website(title="Plain 5", is_featured=False, rating=5)
        await make_website(title="Unrated", is_featured=True)

        page = await website_service.list_websites(
            db_session, WebsiteFilters(featured=True, min_rating=4)
        )
        assert [item.title for item in page.items] == ["Featured 5", "Featured 4"]
        assert page.total == len(page.items)
        for item in page.items:
            assert item.is_featured is True
            assert item.rating >= 4

    @pytest.mark.asyncio
    async def test_featured_false_matches_exactly(self, db_session, make_website):
        await make_website(title="Featured", is_featured=True)
        await make_website(title="Regular")

        page = await website_service.list_websites(db_session, WebsiteFilters(featured=False))
        assert [item.title for item in page.items] == ["Regular"]

    @pytest.mark.asyncio
    async def test_exclude_ads(self, db_session, make_website):
        await make_website(title="Ad", is_ad=True, ad_type="banner")
        await make_website(title="Organic")

        with_ads = await website_service.list_websites(db_session, WebsiteFilters())
        without_ads = await website_service.list_websites(
            db_session, WebsiteFilters(include_ads=False)
        )
        assert with_ads.total == 2
        assert [item.title for item in without_ads.items] == ["Organic"]

    @pytest.mark.asyncio
    async def test_ranking_puts_featured_first_then_rating(self, db_session, make_website):
        await make_website(title="Low", rating=1)
        await make_website(title="High", rating=5)
        await make_website(title="Star", is_featured=True, rating=3)

        page = await website_service.list_websites(db_session, WebsiteFilters())
        assert [item.title for item in page.items] == ["Star", "High", "Low"]

    @pytest.mark.asyncio
    async def test_tags_are_returned_as_names(self, db_session, make_website):
        await make_website(tags=["Design", "Tools"])

        page = await website_service.list_websites(db_session, WebsiteFilters())
        assert page.items[0].tags == ["Design", "Tools"]

    @pytest.mark.asyncio
    async def test_invalid_page_rejected(self, db_session):
        with pytest.raises(ValidationError):
            await website_service.list_websites(db_session, WebsiteFilters(), page=0)


class TestVisitsAndCategories:
    @pytest.mark.asyncio
    async def test_record_visit_increments(self, db_session, make_website):
        website = await make_website(visit_count=7)

        first = await website_service.record_visit(db_session, website.id)
        second = await website_service.record_visit(db_session, website.id)
        assert first.visit_count == 8
        assert second.visit_count == 9

    @pytest.mark.asyncio
    async def test_record_visit_on_hidden_website(self, db_session, make_website):
        website = await make_website(status="blocked")

        with pytest.raises(NotFoundError):
            await website_service.record_visit(db_session, website.id)

    @pytest.mark.asyncio
    async def test_get_hidden_website_is_not_found(self, db_session, make_website):
        website = await make_website(is_public=False)

        with pytest.raises(NotFoundError):
            await website_service.get_website(db_session, website.id)

    @pytest.mark.asyncio
    async def test_categories_count_visible_rows(self, db_session, make_website):
        await make_website(category="Design")
        await make_website(category="Design")
        await make_website(category="Dev")
        await make_website(category="Dev", status="inactive")
        await make_website(category=None)

        categories = await website_service.list_categories(db_session)
        assert [(c.name, c.count) for c in categories] == [("Design", 2), ("Dev", 1)]
