"""
WebVault Backend — Category Schemas
=====================================

Field rules:
    name          1-60 characters
    slug          ^[a-z0-9-]+$, at most 60 characters
    description   at most 200 characters
    icon          at most 60 characters (an icon name, e.g. "Laptop")
    displayOrder  integer >= 0
    parentId      id of another category; null makes it top-level
    status        active | inactive | hidden

In updates, null clears description, icon and parentId.
"""

from datetime import datetime
from typing import ClassVar, FrozenSet, List, Literal, Optional

from pydantic import Field

from webvault.constants import SLUG_PATTERN
from webvault.schemas.common import CamelModel, InputModel, PatchModel

CategoryStatus = Literal["active", "inactive", "hidden"]


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CategoryNode(CamelModel):
    """A category with its children, ordered by displayOrder then name."""

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    icon: Optional[str] = None
    display_order: int = 0
    status: str
    website_count: int = Field(default=0, description="Websites whose category equals this name")
    children: List["CategoryNode"] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class CategoryStats(CamelModel):
    total: int
    active: int
    top_level: int
    hidden: int = Field(description="inactive or hidden")


class CategoryListResponse(CamelModel):
    tree: List[CategoryNode]
    stats: CategoryStats


class CategoryOption(CamelModel):
    """A flattened tree entry for pickers: `path` is "Parent / Child"."""

    id: str
    name: str
    path: str
    depth: int


class TagOption(CamelModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    status: str


class CollectionOption(CamelModel):
    id: str
    name: str
    website_count: int = 0


class WebsiteFormOptions(CamelModel):
    categories: List[CategoryOption]
    tags: List[TagOption]
    collections: List[CollectionOption]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CategoryFields(InputModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=60)
    slug: Optional[str] = Field(default=None, max_length=60, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(default=None, max_length=200)
    parent_id: Optional[str] = Field(default=None, max_length=36)
    display_order: Optional[int] = Field(default=None, ge=0)
    icon: Optional[str] = Field(default=None, max_length=60)
    status: Optional[CategoryStatus] = None


class CategoryCreate(CategoryFields):
    name: str = Field(min_length=1, max_length=60)
    display_order: int = Field(default=0, ge=0)
    status: CategoryStatus = "active"


class CategoryUpdate(CategoryFields, PatchModel):
    clearable_fields: ClassVar[FrozenSet[str]] = frozenset({"description", "icon", "parent_id"})
