"""
WebVault Backend — Collection Service Tests
=============================================

What we test:
    ✅ Item normalisation: de-duplicate, order by position, re-index from 0
    ✅ Creating and replacing items
    ✅ An unknown website id leaves the existing items untouched
    ✅ Public detail hides websites that are not visible
"""

import pytest

from webvault.exceptions import NotFoundError, ValidationError
from webvault.schemas.collection import CollectionCreate, CollectionItemInput
from webvault.services.collection_service import collection_service, normalize_items


def item(website_id, position=None, note=None):
    return CollectionItemInput(website_id=website_id, position=position, note=note)


class TestNormalizeItems:
    def test_input_order_when_no_positions(self):
        result = normalize_items([item("a"), item("b"), item("c")])
        assert [(pos, i.website_id) for pos, i in result] == [(0, "a"), (1, "b"), (2, "c")]

    def test_requested_positions_are_reindexed(self):
        result = normalize_items([item("a", 10), item("b", 2), item("c", 5)])
        assert [(pos, i.website_id) for pos, i in result] == [(0, "b"), (1, "c"), (2, "a")]

    def test_duplicates_keep_first_occurrence(self):
        result = normalize_items([item("a", note="first"), item("b"), item("a", note="second")])
        assert [i.website_id for _, i in result] == ["a", "b"]
        assert result[0][1].note == "first"

    def test_empty(self):
        assert normalize_items([]) == []


class TestCollectionCrud:
    @pytest.mark.asyncio
    async def test_create_with_items(self, db_session, make_website):
        first = await make_website(title="First")
        second = await make_website(title="Second")

        collection = await collection_service.create_collection(
            db_session,
            CollectionCreate(
                name="Design Picks",
                items=[item(second.id, 1), item(first.id, 0)],
            ),
        )
        assert collection.slug == "design-picks"
        assert collection.website_count == 2
        assert [entry.website.title for entry in collection.items] == ["First", "Second"]
        assert [entry.position for entry in collection.items] == [0, 1]

    @pytest.mark.asyncio
    async def test_display_order_appends(self, db_session):
        first = await collection_service.create_collection(db_session, CollectionCreate(name="One"))
        second = await collection_service.create_collection(db_session, CollectionCreate(name="Two"))
        assert (first.display_order, second.display_order) == (0, 1)

    @pytest.mark.asyncio
    async def test_replace_items(self, db_session, make_website):
        a = await make_website(title="A")
        b = await make_website(title="B")
        c = await make_website(title="C")
        collection = await collection_service.create_collection(
            db_session, CollectionCreate(name="Mix", items=[item(a.id), item(b.id)])
        )

        replaced = await collection_service.replace_items(
            db_session, collection.id, [item(c.id), item(a.id), item(c.id)]
        )
        assert [entry.website.title for entry in replaced.items] == ["C", "A"]
        assert replaced.website_count == 2

    @pytest.mark.asyncio
    async def test_unknown_website_keeps_old_items(self, db_session, make_website):
        a = await make_website(title="A")
        collection = await collection_service.create_collection(
            db_session, CollectionCreate(name="Keep", items=[item(a.id)])
        )

        with pytest.raises(ValidationError) as exc_info:
            await collection_service.replace_items(db_session, collection.id, [item("missing")])
        assert exc_info.value.field == "items"

        detail = await collection_service.get_collection(db_session, collection.id)
        assert [entry.website_id for entry in detail.items] == [a.id]

    @pytest.mark.asyncio
    async def test_get_by_slug_hides_invisible_websites(self, db_session, make_website):
        shown = await make_website(title="Shown")
        hidden = await make_website(title="Hidden", is_public=False)
        await collection_service.create_collection(
            db_session, CollectionCreate(name="Public", items=[item(shown.id), item(hidden.id)])
        )

        public = await collection_service.get_collection(db_session, "public", visible_only=True)
        admin = await collection_service.get_collection(db_session, "public")
        assert [entry.website.title for entry in public.items] == ["Shown"]
        assert len(admin.items) == 2

    @pytest.mark.asyncio
    async def test_unknown_collection(self, db_session):
        with pytest.raises(NotFoundError):
            await collection_service.get_collection(db_session, "nothing-here")

    @pytest.mark.asyncio
    async def test_delete(self, db_session):
        collection = await collection_service.create_collection(db_session, CollectionCreate(name="Gone"))
        await collection_service.delete_collection(db_session, collection.id)

        with pytest.raises(NotFoundError):
            await collection_service.get_collection(db_session, collection.id)

    @pytest.mark.asyncio
    async def test_list_with_counts(self, db_session, make_website):
        a = await make_website()
        await collection_service.create_collection(db_session, CollectionCreate(name="Empty"))
        await collection_service.create_collection(
            db_session, CollectionCreate(name="Full", items=[item(a.id)])
        )

        collections = await collection_service.list_collections(db_session)
        assert [(c.name, c.website_count) for c in collections] == [("Empty", 0), ("Full", 1)]
