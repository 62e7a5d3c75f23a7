"""
WebVault Backend — Category Tree Tests
========================================

What we test:
    ✅ Tree building: nesting, sibling order, orphans promoted to the top
    ✅ Stats and the search / status filters
    ✅ Website counts match the category name exactly
    ✅ Create: slug from the name, unique suffixes, unknown parent rejected
    ✅ Moves: a category cannot go under itself or a descendant
    ✅ Deleting a category with children is a conflict (409)
    ✅ Routes: admin CRUD round trip and the website editor options
"""

import pytest
from sqlalchemy import select

from webvault.exceptions import ConflictError, ValidationError
from webvault.models.audit_log import AuditLog
from webvault.models.category import Category
from webvault.schemas.category import CategoryCreate, CategoryUpdate
from webvault.services.category_service import category_service, flatten_tree


@pytest.fixture
def make_category(session_factory):
    async def _make(name: str, **overrides) -> Category:
        values = {"name": name, "slug": name.lower().replace(" ", "-"), "status": "active"}
        values.update(overrides)
        async with session_factory() as session:
            category = Category(**values)
            session.add(category)
            await session.commit()
            return category

    return _make


def names(nodes):
    return [node.name for node in nodes]


class TestListing:
    @pytest.mark.asyncio
    async def test_builds_ordered_tree(self, db_session, make_category):
        dev = await make_category("Development", display_order=1)
        design = await make_category("Design", display_order=0)
        await make_category("Editors", parent_id=dev.id, display_order=2)
        await make_category("Docs", parent_id=dev.id, display_order=1)
        await make_category("Boards", parent_id=dev.id, display_order=1)
        await make_category("Inspiration", parent_id=design.id)

        listing = await category_service.list_categories(db_session)

        assert names(listing.tree) == ["Design", "Development"]
        assert names(listing.tree[0].children) == ["Inspiration"]
        assert names(listing.tree[1].children) == ["Boards", "Docs", "Editors"]
        assert listing.stats.model_dump() == {"total": 6, "active": 6, "top_level": 2, "hidden": 0}

    @pytest.mark.asyncio
    async def test_child_of_filtered_parent_is_top_level(self, db_session, make_category):
        parent = await make_category("Archive", status="hidden")
        await make_category("Old Tools", parent_id=parent.id)

        listing = await category_service.list_categories(db_session, status="active")

        assert names(listing.tree) == ["Old Tools"]
        assert listing.tree[0].parent_id == parent.id

    @pytest.mark.asyncio
    async def test_search_and_stats(self, db_session, make_category):
        await make_category("Design", status="active")
        await make_category("Design Systems", status="inactive")
        await make_category("Hidden Design", status="hidden")
        await make_category("Learning")

        listing = await category_service.list_categories(db_session, search="design")

        assert sorted(names(listing.tree)) == ["Design", "Design Systems", "Hidden Design"]
        assert listing.stats.total == 3
        assert listing.stats.active == 1
        assert listing.stats.hidden == 2

    @pytest.mark.asyncio
    async def test_search_escapes_wildcards(self, db_session, make_category):
        await make_category("100% Free", slug="free")
        await make_category("1000 Tools", slug="tools")

        listing = await category_service.list_categories(db_session, search="100%")
        assert names(listing.tree) == ["100% Free"]

    @pytest.mark.asyncio
    async def test_website_count_matches_exact_name(
        self, db_session, make_category, make_website
    ):
        await make_category("Design")
        await make_category("Design Tools", slug="design-tools")
        await make_website(category="Design")
        await make_website(category="Design")
        await make_website(category="Design Tools")

        listing = await category_service.list_categories(db_session)
        counts = {node.name: node.website_count for node in listing.tree}

        assert counts == {"Design": 2, "Design Tools": 1}


class TestFlattenTree:
    @pytest.mark.asyncio
    async def test_paths_and_depths(self, db_session, make_category):
        dev = await make_category("Development")
        docs = await make_category("Docs", parent_id=dev.id)
        await make_category("API", parent_id=docs.id)

        listing = await category_service.list_categories(db_session)
        options = flatten_tree(listing.tree)

        assert [(option.path, option.depth) for option in options] == [
            ("Development", 0),
            ("Development / Docs", 1),
            ("Development / Docs / API", 2),
        ]


class TestCreate:
    @pytest.mark.asyncio
    async def test_slug_from_name_and_suffix(self, db_session, make_category):
        await make_category("Design Tools", slug="design-tools")

        created = await category_service.create_category(
            db_session, CategoryCreate(name="Design Tools"), actor_id="sess_1"
        )

        assert created.slug == "design-tools-1"
        assert created.status == "active"
        assert created.display_order == 0
        assert created.children == []

    @pytest.mark.asyncio
    async def test_unknown_parent_rejected(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await category_service.create_category(
                db_session, CategoryCreate(name="Orphan", parentId="missing")
            )
        assert "parentId" in exc_info.value.errors

    @pytest.mark.asyncio
    async def test_writes_audit_row(self, db_session):
        created = await category_service.create_category(
            db_session, CategoryCreate(name="Learning"), actor_id="sess_1"
        )
        await db_session.flush()

        rows = (
            await db_session.execute(select(AuditLog).where(AuditLog.entity_id == created.id))
        ).scalars().all()
        assert [(row.action, row.actor_id) for row in rows] == [("category.create", "sess_1")]


class TestUpdate:
    @pytest.mark.asyncio
    async def test_move_under_descendant_rejected(self, db_session, make_category):
        root = await make_category("Development")
        child = await make_category("Docs", parent_id=root.id)
        grandchild = await make_category("API", parent_id=child.id)

        with pytest.raises(ValidationError) as exc_info:
            await category_service.update_category(
                db_session, root.id, CategoryUpdate(parentId=grandchild.id)
            )
        assert "parentId" in exc_info.value.errors

    @pytest.mark.asyncio
    async def test_move_under_itself_rejected(self, db_session, make_category):
        category = await make_category("Design")

        with pytest.raises(ValidationError):
            await category_service.update_category(
                db_session, category.id, CategoryUpdate(parentId=category.id)
            )

    @pytest.mark.asyncio
    async def test_null_parent_makes_top_level(self, db_session, make_category):
        root = await make_category("Development")
        child = await make_category("Docs", parent_id=root.id)

        updated = await category_service.update_category(
            db_session, child.id, CategoryUpdate.model_validate({"parentId": None})
        )

        assert updated.parent_id is None
        listing = await category_service.list_categories(db_session)
        assert names(listing.tree) == ["Development", "Docs"]

    @pytest.mark.asyncio
    async def test_slug_change_stays_unique(self, db_session, make_category):
        await make_category("Design")
        other = await make_category("Other")

        updated = await category_service.update_category(
            db_session, other.id, CategoryUpdate(slug="design")
        )
        assert updated.slug == "design-1"


class TestDelete:
    @pytest.mark.asyncio
    async def test_category_with_children_is_conflict(self, db_session, make_category):
        root = await make_category("Development")
        await make_category("Docs", parent_id=root.id)

        with pytest.raises(ConflictError):
            await category_service.delete_category(db_session, root.id)

    @pytest.mark.asyncio
    async def test_leaf_is_deleted(self, db_session, make_category):
        leaf = await make_category("Docs")

        await category_service.delete_category(db_session, leaf.id)
        await db_session.flush()

        assert await db_session.get(Category, leaf.id) is None


class TestCategoryRoutes:
    @pytest.mark.asyncio
    async def test_crud_round_trip(self, test_client, admin_headers):
        created = await test_client.post(
            "/api/admin/categories",
            json={"name": "Development", "icon": "Laptop", "displayOrder": 2},
            headers=admin_headers,
        )
        assert created.status_code == 201
        assert created.json()["message"] == "created"
        parent = created.json()["data"]
        assert parent["slug"] == "development"
        assert parent["parentId"] is None

        child = await test_client.post(
            "/api/admin/categories",
            json={"name": "Docs", "parentId": parent["id"]},
            headers=admin_headers,
        )
        assert child.status_code == 201

        listing = await test_client.get("/api/admin/categories", headers=admin_headers)
        data = listing.json()["data"]
        assert [node["name"] for node in data["tree"]] == ["Development"]
        assert [node["name"] for node in data["tree"][0]["children"]] == ["Docs"]
        assert data["stats"] == {"total": 2, "active": 2, "topLevel": 1, "hidden": 0}

        conflict = await test_client.delete(
            f"/api/admin/categories/{parent['id']}", headers=admin_headers
        )
        assert conflict.status_code == 409
        assert conflict.json()["code"] == "conflict"

        moved = await test_client.patch(
            f"/api/admin/categories/{child.json()['data']['id']}",
            json={"parentId": None, "status": "hidden"},
            headers=admin_headers,
        )
        assert moved.json()["data"]["parentId"] is None
        assert moved.json()["data"]["status"] == "hidden"

        deleted = await test_client.delete(
            f"/api/admin/categories/{parent['id']}", headers=admin_headers
        )
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "deleted"

    @pytest.mark.asyncio
    async def test_invalid_payload_is_422(self, test_client, admin_headers):
        response = await test_client.post(
            "/api/admin/categories",
            json={"name": "Bad", "slug": "Not A Slug", "displayOrder": -1},
            headers=admin_headers,
        )

        assert response.status_code == 422
        assert {"slug", "displayOrder"} <= set(response.json()["errors"])

    @pytest.mark.asyncio
    async def test_unknown_category_is_404(self, test_client, admin_headers):
        response = await test_client.patch(
            "/api/admin/categories/missing", json={"name": "x"}, headers=admin_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_website_form_options(
        self, test_client, admin_headers, make_category, make_tag
    ):
        dev = await make_category("Development")
        await make_category("Docs", parent_id=dev.id)
        await make_tag("Tools", status="hidden")

        response = await test_client.get("/api/admin/websites/options", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [(item["path"], item["depth"]) for item in data["categories"]] == [
            ("Development", 0),
            ("Development / Docs", 1),
        ]
        assert [(tag["name"], tag["status"]) for tag in data["tags"]] == [("Tools", "hidden")]
        assert data["collections"] == []
