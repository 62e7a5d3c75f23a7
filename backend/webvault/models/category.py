"""
WebVault Backend — Category Model
===================================

Managed category tree. `parent_id` points at another category (NULL for a
top-level one); siblings are ordered by `display_order`, then name.

Websites keep their category as free text in `websites.category`; the
website count of a category is the number of websites whose category equals
its name.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from webvault.database import Base
from webvault.utils import new_id, utcnow


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(60), nullable=False)
    slug: Mapped[str] = mapped_column(String(60), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("categories.id"), nullable=True
    )
    icon: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # active | inactive | hidden
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        Index("idx_categories_parent_id", "parent_id"),
        Index("idx_categories_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, slug='{self.slug}', parent_id={self.parent_id})>"
