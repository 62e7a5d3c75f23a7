"""
WebVault Backend — Website Schemas
====================================

What:  Request and response models for websites (public DTOs, admin
       payloads, status changes, tag replacement and bulk review).

Field rules:
    title         1-200 characters
    url           absolute http(s) URL
    slug          [a-z0-9-]+, at most 160 characters
    rating        integer 0-5
    visitCount    integer >= 0
    isAd=true     requires adType (banner, sponsored, featured, premium)
    tagIds        list or comma-separated string, de-duplicated
"""

from datetime import datetime
from typing import ClassVar, FrozenSet, List, Literal, Optional
from urllib.parse import urlparse

from pydantic import Field, ValidationInfo, field_validator

from webvault.constants import SLUG_PATTERN
from webvault.schemas.common import CamelModel, InputModel, PatchModel, split_list
from webvault.utils import load_json_list

WebsiteStatus = Literal["active", "inactive", "pending", "blocked"]
ReviewStatus = Literal["pending", "under_review", "approved", "rejected", "changes_requested"]
ReviewDecision = Literal["under_review", "approved", "rejected", "changes_requested"]
AdType = Literal["banner", "sponsored", "featured", "premium"]

AD_TYPE_REQUIRED_MESSAGE = "adType is required when isAd is true"


def validate_http_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Must be a valid http(s) URL")
    return value


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class WebsiteResponse(CamelModel):
    """Public representation of a directory entry."""

    id: str
    title: str
    slug: Optional[str] = None
    description: Optional[str] = None
    url: str
    favicon_url: Optional[str] = None
    screenshot_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list, description="Tag names")
    category: Optional[str] = None
    is_ad: bool = False
    ad_type: Optional[str] = None
    rating: Optional[int] = None
    visit_count: int = 0
    is_featured: bool = False
    is_public: bool = True
    status: str
    created_at: datetime
    updated_at: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        if isinstance(v, str):
            return load_json_list(v)
        return v


class WebsiteAdminResponse(WebsiteResponse):
    review_status: str
    notes: Optional[str] = None
    submitted_by: Optional[str] = None


class SubmissionSummary(CamelModel):
    id: str
    status: str
    submitted_by: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime


class WebsiteAdminDetail(WebsiteAdminResponse):
    tag_ids: List[str] = Field(default_factory=list)
    collection_ids: List[str] = Field(default_factory=list)
    latest_submission: Optional[SubmissionSummary] = None


class VisitResponse(CamelModel):
    id: str
    visit_count: int


class CategoryCount(CamelModel):
    name: str
    count: int


class BulkReviewResult(CamelModel):
    updated: int


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class WebsiteFields(InputModel):
    """Field definitions shared by create and update payloads."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    url: Optional[str] = Field(default=None, max_length=2048)
    slug: Optional[str] = Field(default=None, max_length=160, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(default=None, max_length=2000)
    category: Optional[str] = Field(default=None, max_length=120)
    tag_ids: Optional[List[str]] = None
    collection_ids: Optional[List[str]] = None
    is_ad: Optional[bool] = None
    ad_type: Optional[AdType] = Field(default=None, validate_default=True)
    rating: Optional[int] = Field(default=None, ge=0, le=5)
    visit_count: Optional[int] = Field(default=None, ge=0)
    is_featured: Optional[bool] = None
    is_public: Optional[bool] = None
    status: Optional[WebsiteStatus] = None
    review_status: Optional[ReviewStatus] = None
    favicon_url: Optional[str] = Field(default=None, max_length=2048)
    screenshot_url: Optional[str] = Field(default=None, max_length=2048)
    notes: Optional[str] = Field(default=None, max_length=2000)
    submitted_by: Optional[str] = Field(default=None, max_length=120)

    @field_validator("tag_ids", "collection_ids", mode="before")
    @classmethod
    def split_ids(cls, v):
        return split_list(v)

    @field_validator("url", "favicon_url", "screenshot_url")
    @classmethod
    def check_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_http_url(v)


class WebsiteCreate(WebsiteFields):
    title: str = Field(min_length=1, max_length=200)
    url: str = Field(max_length=2048)
    submission_id: Optional[str] = None

    @field_validator("ad_type")
    @classmethod
    def require_ad_type(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if info.data.get("is_ad") is True and not v:
            raise ValueError(AD_TYPE_REQUIRED_MESSAGE)
        return v


class WebsiteUpdate(WebsiteFields, PatchModel):
    """isAd and adType are checked against the stored row once the patch is applied."""

    clearable_fields: ClassVar[FrozenSet[str]] = frozenset(
        {
            "description",
            "category",
            "favicon_url",
            "screenshot_url",
            "notes",
            "rating",
            "ad_type",
            "slug",
        }
    )


class WebsiteStatusUpdate(PatchModel):
    status: Optional[WebsiteStatus] = None
    review_status: Optional[ReviewStatus] = None
    is_public: Optional[bool] = None
    is_featured: Optional[bool] = None
    notes: Optional[str] = Field(default=None, max_length=2000)


class WebsiteTagsUpdate(InputModel):
    """Replaces every tag on a website; an empty list removes them all."""

    tag_ids: List[str] = Field(default_factory=list)

    @field_validator("tag_ids", mode="before")
    @classmethod
    def split_ids(cls, v):
        return split_list(v)


class BulkReviewRequest(InputModel):
    """
    A review decision applied to a batch of websites as one operation.

    Every id must be a non-blank string; ids are trimmed and de-duplicated.
    "pending" is not a decision and is rejected.
    """

    ids: List[str] = Field(min_length=1)
    review_status: ReviewDecision
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("ids", mode="before")
    @classmethod
    def check_ids(cls, v):
        if isinstance(v, list):
            for item in v:
                if not isinstance(item, str) or not item.strip():
                    raise ValueError("Every id must be a non-empty string")
        return split_list(v)
