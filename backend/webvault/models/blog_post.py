"""WebVault Backend — Blog post model (`blog_posts`)."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from webvault.database import Base
from webvault.utils import new_id, utcnow


class BlogPost(Base):
    __tablename__ = "blog_posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    cover_image: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    author_id: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    tags: Mapped[str] = mapped_column(
        Text, nullable=False, default="[]", comment="JSON array of tag names"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (Index("idx_blog_posts_status_published", "status", "published_at"),)

    def __repr__(self) -> str:
        return f"<BlogPost(id={self.id}, slug='{self.slug}', status='{self.status}')>"
