"""
WebVault Backend — Category Service
=====================================

What:  The managed category tree: listing with stats, CRUD, and the
       flattened option list used by the website editor.
Who:   The /api/admin/categories routes and WebsiteAdminService.form_options.

Tree rules:
    - A category whose parent is missing from the listed rows (filtered
      out, or a dangling id) is shown at the top level
    - Siblings sort by display_order, then name
    - A parent must exist and must not be the category itself or one of
      its descendants
    - A category with children cannot be deleted (409)
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.exceptions import ConflictError, NotFoundError, ValidationError
from webvault.models.category import Category
from webvault.models.website import Website
from webvault.queries.slugs import unique_slug
from webvault.queries.websites import LIKE_ESCAPE, contains_pattern
from webvault.schemas.category import (
    CategoryCreate,
    CategoryListResponse,
    CategoryNode,
    CategoryOption,
    CategoryStats,
    CategoryUpdate,
)
from webvault.services.audit_service import audit_service
from webvault.services.errors import database_errors

logger = logging.getLogger(__name__)


def flatten_tree(
    nodes: List[CategoryNode], trail: Optional[List[str]] = None, depth: int = 0
) -> List[CategoryOption]:
    """
    Depth-first list of tree nodes with their "A / B / C" path.

    Examples:
        Design                 → path "Design", depth 0
          Inspiration          → path "Design / Inspiration", depth 1
    """
    options: List[CategoryOption] = []
    for node in nodes:
        path = [*(trail or []), node.name]
        options.append(CategoryOption(id=node.id, name=node.name, path=" / ".join(path), depth=depth))
        options.extend(flatten_tree(node.children, path, depth + 1))
    return options


class CategoryService:
    # ── Listing ───────────────────────────────────────────────────────────

    async def list_categories(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        status: Optional[str] = "all",
    ) -> CategoryListResponse:
        """
        Return the category tree and stats over the listed rows.

        `search` matches names (case-insensitive substring); status=None or
        "all" disables the status filter.
        """
        conditions = []
        term = (search or "").strip()
        if term:
            conditions.append(Category.name.ilike(contains_pattern(term), escape=LIKE_ESCAPE))
        if status and status != "all":
            conditions.append(Category.status == status)

        with database_errors("list_categories"):
            rows = (
                (await db.execute(select(Category).where(*conditions)))
                .scalars()
                .all()
            )
            counts = await self._website_counts(db, {row.name for row in rows})

        tree = self._build_tree(rows, counts)
        stats = CategoryStats(
            total=len(rows),
            active=sum(1 for row in rows if row.status == "active"),
            top_level=sum(1 for row in rows if not row.parent_id),
            hidden=sum(1 for row in rows if row.status in ("inactive", "hidden")),
        )
        return CategoryListResponse(tree=tree, stats=stats)

    async def category_options(self, db: AsyncSession) -> List[CategoryOption]:
        """Every category, flattened in tree order."""
        listing = await self.list_categories(db, status="all")
        return flatten_tree(listing.tree)

    # ── CRUD ──────────────────────────────────────────────────────────────

    async def get_category(self, db: AsyncSession, category_id: str) -> Category:
        with database_errors("get_category", category_id=category_id):
            category = await db.get(Category, category_id)
        if category is None:
            raise NotFoundError(resource="category", resource_id=category_id)
        return category

    async def create_category(
        self, db: AsyncSession, payload: CategoryCreate, actor_id: Optional[str] = None
    ) -> CategoryNode:
        with database_errors("create_category"):
            if payload.parent_id:
                await self._check_parent(db, payload.parent_id)
            category = Category(
                name=payload.name,
                slug=await unique_slug(db, Category, payload.slug or payload.name, max_length=60),
                description=payload.description,
                parent_id=payload.parent_id,
                icon=payload.icon,
                display_order=payload.display_order,
                status=payload.status,
            )
            db.add(category)
            await db.flush()
            audit_service.record(
                db,
                actor_id=actor_id,
                action="category.create",
                entity_type="category",
                entity_id=category.id,
                changes=payload.model_dump(exclude_none=True),
            )
            count = (await self._website_counts(db, {category.name})).get(category.name, 0)
        return self._to_node(category, count)

    async def update_category(
        self,
        db: AsyncSession,
        category_id: str,
        payload: CategoryUpdate,
        actor_id: Optional[str] = None,
    ) -> CategoryNode:
        category = await self.get_category(db, category_id)
        changes = payload.changes()

        with database_errors("update_category", category_id=category_id):
            if changes.get("parent_id"):
                await self._check_parent(db, changes["parent_id"], moving_id=category.id)
            if "slug" in changes and changes["slug"] != category.slug:
                category.slug = await unique_slug(
                    db, Category, changes["slug"], exclude_id=category.id, max_length=60
                )
            for field in ("name", "description", "parent_id", "icon", "display_order", "status"):
                if field in changes:
                    setattr(category, field, changes[field])
            await db.flush()

            audit_service.record(
                db,
                actor_id=actor_id,
                action="category.update",
                entity_type="category",
                entity_id=category.id,
                changes=changes,
            )
            count = (await self._website_counts(db, {category.name})).get(category.name, 0)
        return self._to_node(category, count)

    async def delete_category(
        self, db: AsyncSession, category_id: str, actor_id: Optional[str] = None
    ) -> None:
        """Delete a leaf category; one with children raises ConflictError (409)."""
        category = await self.get_category(db, category_id)
        with database_errors("delete_category", category_id=category_id):
            children = (
                await db.execute(
                    select(func.count()).select_from(Category).where(Category.parent_id == category.id)
                )
            ).scalar() or 0
            if children:
                raise ConflictError(
                    message="Category has child categories; move or delete them first",
                    context={"category_id": category_id, "children": children},
                )
            await db.delete(category)
            audit_service.record(
                db,
                actor_id=actor_id,
                action="category.delete",
                entity_type="category",
                entity_id=category_id,
                changes={"slug": category.slug},
            )

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _check_parent(
        self, db: AsyncSession, parent_id: str, moving_id: Optional[str] = None
    ) -> None:
        """
        Walk up from `parent_id` to the root.

        Reaching `moving_id` on the way means the move would put a category
        under itself.
        """
        current: Optional[str] = parent_id
        seen = set()
        while current is not None and current not in seen:
            if current == moving_id:
                raise ValidationError(
                    message="A category cannot be moved under itself or its descendants",
                    field="parentId",
                )
            seen.add(current)
            row = await db.get(Category, current)
            if row is None:
                if current == parent_id:
                    raise ValidationError(
                        message=f"Unknown parent category id: {parent_id}", field="parentId"
                    )
                break
            current = row.parent_id

    async def _website_counts(self, db: AsyncSession, names) -> Dict[str, int]:
        names = [name for name in names if name]
        if not names:
            return {}
        rows = await db.execute(
            select(Website.category, func.count(Website.id))
            .where(Website.category.in_(names))
            .group_by(Website.category)
        )
        return {name: count for name, count in rows}

    def _build_tree(self, rows: List[Category], counts: Dict[str, int]) -> List[CategoryNode]:
        nodes = {row.id: self._to_node(row, counts.get(row.name, 0)) for row in rows}
        roots: List[CategoryNode] = []
        for node in nodes.values():
            parent = nodes.get(node.parent_id) if node.parent_id else None
            if parent is not None and parent is not node:
                parent.children.append(node)
            else:
                roots.append(node)

        def sort(level: List[CategoryNode]) -> None:
            level.sort(key=lambda item: (item.display_order, item.name.lower(), item.id))
            for item in level:
                sort(item.children)

        sort(roots)
        return roots

    @staticmethod
    def _to_node(category: Category, website_count: int) -> CategoryNode:
        return CategoryNode(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            parent_id=category.parent_id,
            icon=category.icon,
            display_order=category.display_order or 0,
            status=category.status,
            website_count=website_count,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )


category_service = CategoryService()
