"""
WebVault Backend — Website Listing Query
==========================================

What:  The single filter-composition and pagination path for websites.
Who:   Used by both the public listing (WebsiteService) and the admin listing
       (WebsiteAdminService); neither builds its own WHERE clauses.
How:   list_websites(db, filters, pagination) -> (rows, total)

    1. build_website_conditions() turns each active filter into one
       predicate; an empty list means the query is unconstrained.
    2. The row query ANDs the predicates, orders, and applies
       LIMIT page_size OFFSET (page - 1) * page_size.
    3. A separate COUNT(*) query uses the same predicates without
       limit/offset, so total >= len(rows) always holds.

Text search:
    The query string is trimmed; blank means "no text filter". Otherwise
    `\\`, `%` and `_` are escaped and the term is matched as a literal,
    case-insensitive substring (ESCAPE '\\').
"""

from dataclasses import dataclass
from typing import List, Literal, Optional, Tuple

from sqlalchemy import ColumnElement, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.exceptions import ValidationError
from webvault.models.tag import WebsiteTag
from webvault.models.website import Website

LIKE_ESCAPE = "\\"

SortField = Literal["recent", "updated", "title", "visits", "rating"]
SortDirection = Literal["asc", "desc"]


@dataclass(frozen=True)
class WebsiteFilters:
    """
    Filter set for a website listing. Every field left at its default
    contributes no predicate.

    featured is tri-state: True / False match exactly, None matches any.
    include_ads=False drops advertisement rows entirely.
    min_rating is an inclusive lower bound.
    """

    query: Optional[str] = None
    query_scope: Literal["title", "all"] = "title"
    category: Optional[str] = None
    featured: Optional[bool] = None
    include_ads: bool = True
    min_rating: Optional[int] = None
    # Admin-only dimensions
    status: Optional[str] = None
    review_status: Optional[str] = None
    is_public: Optional[bool] = None
    is_ad: Optional[bool] = None
    ad_type: Optional[str] = None
    submitted_by: Optional[str] = None
    tag_id: Optional[str] = None
    # Public visibility: active and public rows only
    visible_only: bool = False


@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


def normalize_pagination(
    page: Optional[int],
    page_size: Optional[int],
    *,
    default_page_size: int,
    max_page_size: int,
) -> Pagination:
    """
    The one place pagination input is checked.

    Missing values take defaults (page 1, default_page_size). A non-positive
    page or page size is rejected; a page size above the maximum is clamped.

    Raises:
        ValidationError: page < 1 or page_size < 1 (→ 422)
    """
    errors = {}
    if page is None:
        page = 1
    elif page < 1:
        errors["page"] = ["page must be a positive integer"]
    if page_size is None:
        page_size = default_page_size
    elif page_size < 1:
        errors["pageSize"] = ["pageSize must be a positive integer"]
    if errors:
        raise ValidationError(message="Invalid pagination parameters", errors=errors)
    return Pagination(page=page, page_size=min(page_size, max_page_size))


def escape_like(value: str) -> str:
    """
    Escape LIKE wildcards so the value matches literally.

    Examples:
        >>> escape_like("100%_off")
        '100\\\\%\\\\_off'
        >>> escape_like("C:\\\\temp")
        'C:\\\\\\\\temp'
    """
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def contains_pattern(term: str) -> str:
    return f"%{escape_like(term)}%"


def build_website_conditions(filters: WebsiteFilters) -> List[ColumnElement[bool]]:
    """Compose one predicate per active filter (AND-ed by the caller)."""
    conditions: List[ColumnElement[bool]] = []

    term = (filters.query or "").strip()
    if term:
        pattern = contains_pattern(term)
        if filters.query_scope == "all":
            conditions.append(
                or_(
                    Website.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Website.description.ilike(pattern, escape=LIKE_ESCAPE),
                    Website.url.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        else:
            conditions.append(Website.title.ilike(pattern, escape=LIKE_ESCAPE))

    if filters.category:
        conditions.append(Website.category == filters.category)
    if filters.featured is not None:
        conditions.append(Website.is_featured.is_(filters.featured))
    if not filters.include_ads:
        conditions.append(Website.is_ad.is_(False))
    if filters.min_rating is not None:
        conditions.append(Website.rating >= filters.min_rating)

    if filters.status:
        conditions.append(Website.status == filters.status)
    if filters.review_status:
        conditions.append(Website.review_status == filters.review_status)
    if filters.is_public is not None:
        conditions.append(Website.is_public.is_(filters.is_public))
    if filters.is_ad is not None:
        conditions.append(Website.is_ad.is_(filters.is_ad))
    if filters.ad_type:
        conditions.append(Website.ad_type == filters.ad_type)
    if filters.submitted_by:
        conditions.append(Website.submitted_by == filters.submitted_by)
    if filters.tag_id:
        conditions.append(
            exists().where(
                WebsiteTag.website_id == Website.id,
                WebsiteTag.tag_id == filters.tag_id,
            )
        )

    if filters.visible_only:
        conditions.append(Website.status == "active")
        conditions.append(Website.is_public.is_(True))

    return conditions


def website_ordering(order_by: Optional[SortField], sort_dir: SortDirection = "desc") -> list:
    """ORDER BY clauses; no order_by gives the public ranking."""
    if order_by is None:
        return [
            Website.is_featured.desc(),
            func.coalesce(Website.rating, -1).desc(),
            Website.created_at.desc(),
            Website.id,
        ]
    column = {
        "recent": Website.created_at,
        "updated": Website.updated_at,
        "title": Website.title,
        "visits": Website.visit_count,
        "rating": func.coalesce(Website.rating, -1),
    }[order_by]
    primary = column.asc() if sort_dir == "asc" else column.desc()
    return [primary, Website.id]


async def list_websites(
    db: AsyncSession,
    filters: WebsiteFilters,
    pagination: Pagination,
    order_by: Optional[SortField] = None,
    sort_dir: SortDirection = "desc",
) -> Tuple[List[Website], int]:
    """
    Return one page of websites and the total matching count.

    Query errors propagate to the caller (the service layer wraps them);
    a partial page is never returned.
    """
    conditions = build_website_conditions(filters)

    rows_result = await db.execute(
        select(Website)
        .where(*conditions)
        .order_by(*website_ordering(order_by, sort_dir))
        .limit(pagination.limit)
        .offset(pagination.offset)
    )
    rows = list(rows_result.scalars().all())

    count_result = await db.execute(select(func.count()).select_from(Website).where(*conditions))
    total = count_result.scalar() or 0

    return rows, total
