"""
WebVault Backend — Blog Post Schemas
======================================

A published post must carry a publish time; when the client omits it the
service fills it in (previous value, else now), so the schema only checks
the explicit combinations it can see.
"""

from datetime import datetime
from typing import ClassVar, FrozenSet, List, Literal, Optional

from pydantic import Field, field_validator

from webvault.constants import SLUG_PATTERN
from webvault.schemas.common import CamelModel, InputModel, PatchModel, split_list
from webvault.schemas.website import validate_http_url
from webvault.utils import load_json_list

BlogPostStatus = Literal["draft", "published", "archived"]


class BlogPostFields(InputModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    slug: Optional[str] = Field(default=None, max_length=200, pattern=SLUG_PATTERN)
    summary: Optional[str] = Field(default=None, max_length=500)
    content: Optional[str] = Field(default=None, min_length=1, max_length=100_000)
    status: Optional[BlogPostStatus] = None
    published_at: Optional[datetime] = None
    cover_image: Optional[str] = Field(default=None, max_length=2048)
    author_id: Optional[str] = Field(default=None, max_length=120)
    tags: Optional[List[str]] = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v):
        return split_list(v)

    @field_validator("cover_image")
    @classmethod
    def check_cover_image(cls, v: Optional[str]) -> Optional[str]:
        return validate_http_url(v)


class BlogPostCreate(BlogPostFields):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1, max_length=100_000)
    status: BlogPostStatus = "draft"


class BlogPostUpdate(BlogPostFields, PatchModel):
    clearable_fields: ClassVar[FrozenSet[str]] = frozenset(
        {"summary", "cover_image", "published_at"}
    )


class BlogPostResponse(CamelModel):
    id: str
    title: str
    slug: str
    summary: Optional[str] = None
    content: str
    status: str
    published_at: Optional[datetime] = None
    cover_image: Optional[str] = None
    author_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        if isinstance(v, str):
            return load_json_list(v)
        return v
