"""
WebVault Backend — Tag Schemas
================================

Field rules:
    name         1-40 characters
    slug         ^[a-z0-9-]+$, at most 60 characters ("my-tag" ok, "My Tag!" rejected)
    description  at most 200 characters
    color        #rgb .. #rrggbbaa, leading "#" optional
    status       active | inactive | hidden

In updates, null clears description, color and group; an empty string
leaves them untouched.
"""

from datetime import datetime
from typing import ClassVar, FrozenSet, List, Literal, Optional

from pydantic import Field

from webvault.constants import SLUG_PATTERN, TAG_COLOR_PATTERN
from webvault.schemas.common import CamelModel, InputModel, PatchModel

TagStatus = Literal["active", "inactive", "hidden"]


class TagResponse(CamelModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    color: Optional[str] = None
    group: Optional[str] = None
    status: str
    usage_count: int = 0
    is_trending: bool = False
    website_count: int = 0
    created_at: datetime
    updated_at: datetime


class TagListResponse(CamelModel):
    """Tag listing with status counters over the search-filtered set."""

    items: List[TagResponse]
    total: int
    active: int
    inactive: int


class TagFields(InputModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=40)
    slug: Optional[str] = Field(default=None, max_length=60, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(default=None, max_length=200)
    color: Optional[str] = Field(default=None, pattern=TAG_COLOR_PATTERN)
    group: Optional[str] = Field(default=None, max_length=40)
    status: Optional[TagStatus] = None
    is_trending: Optional[bool] = None


class TagCreate(TagFields):
    name: str = Field(min_length=1, max_length=40)
    status: TagStatus = "active"


class TagUpdate(TagFields, PatchModel):
    clearable_fields: ClassVar[FrozenSet[str]] = frozenset({"description", "color", "group"})
