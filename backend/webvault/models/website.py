"""
WebVault Backend — Website SQLAlchemy Model
=============================================

What:  ORM model for the `websites` table, the core directory entry.
Who:   Queried by the listing layer (webvault.queries.websites) and mutated
       by the admin, submission and visit services.

Lifecycle:
    1. Created by a user submission (status='pending') or by an admin
    2. Reviewed by admins (status / review_status transitions, bulk review)
    3. visit_count is incremented by public visits
    4. Never hard-deleted: "delete" moves status to 'inactive'

The `tags` column is a JSON array of tag names derived from `website_tags`;
services rewrite it whenever the association rows change.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from webvault.database import Base
from webvault.utils import new_id, utcnow


class Website(Base):
    __tablename__ = "websites"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(String(160), unique=True, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    favicon_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    screenshot_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    # ── Classification ────────────────────────────────────────────────────
    tags: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="[]",
        comment="JSON array of tag names, derived from website_tags",
    )
    category: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    # ── Advertising ───────────────────────────────────────────────────────
    is_ad: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ad_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # ── Ranking ───────────────────────────────────────────────────────────
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    visit_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # ── Moderation ────────────────────────────────────────────────────────
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    review_status: Mapped[str] = mapped_column(String(30), nullable=False, default="pending")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    submitted_by: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        CheckConstraint("visit_count >= 0", name="ck_websites_visit_count_non_negative"),
        CheckConstraint(
            "rating IS NULL OR (rating >= 0 AND rating <= 5)",
            name="ck_websites_rating_range",
        ),
        Index("idx_websites_category", "category"),
        Index("idx_websites_status", "status"),
        Index("idx_websites_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Website(id={self.id}, title='{self.title}', status='{self.status}')>"
