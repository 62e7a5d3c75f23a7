"""WebVault Backend — Collection Schemas."""

from datetime import datetime
from typing import ClassVar, FrozenSet, List, Optional

from pydantic import Field, field_validator

from webvault.constants import MAX_COLLECTION_ITEMS, SLUG_PATTERN
from webvault.schemas.common import CamelModel, InputModel, PatchModel
from webvault.schemas.website import WebsiteResponse, validate_http_url


class CollectionItemInput(InputModel):
    website_id: str = Field(min_length=1)
    note: Optional[str] = Field(default=None, max_length=500)
    position: Optional[int] = Field(default=None, ge=0)


class CollectionFields(InputModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    slug: Optional[str] = Field(default=None, max_length=120, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(default=None, max_length=500)
    cover_image: Optional[str] = Field(default=None, max_length=2048)
    is_featured: Optional[bool] = None

    @field_validator("cover_image")
    @classmethod
    def check_cover_image(cls, v: Optional[str]) -> Optional[str]:
        return validate_http_url(v)


class CollectionCreate(CollectionFields):
    name: str = Field(min_length=1, max_length=80)
    items: List[CollectionItemInput] = Field(
        default_factory=list, max_length=MAX_COLLECTION_ITEMS
    )


class CollectionUpdate(CollectionFields, PatchModel):
    clearable_fields: ClassVar[FrozenSet[str]] = frozenset({"description", "cover_image"})


class CollectionItemsReplace(InputModel):
    items: List[CollectionItemInput] = Field(
        default_factory=list, max_length=MAX_COLLECTION_ITEMS
    )


class CollectionResponse(CamelModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    cover_image: Optional[str] = None
    is_featured: bool = False
    display_order: int = 0
    website_count: int = 0
    created_at: datetime
    updated_at: datetime


class CollectionItemResponse(CamelModel):
    id: str
    website_id: str
    note: Optional[str] = None
    position: int
    website: Optional[WebsiteResponse] = None


class CollectionDetailResponse(CollectionResponse):
    items: List[CollectionItemResponse] = Field(default_factory=list)
