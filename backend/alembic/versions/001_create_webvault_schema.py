"""Create the WebVault schema

Revision ID: 001
Revises: None
Create Date: 2024-06-01 00:00:00.000000+00:00

Tables: websites, tags, website_tags, collections, collection_items,
blog_posts, submission_requests, audit_logs. Ids are application-generated
UUID strings so the same schema runs on PostgreSQL and SQLite.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=nullable,
        server_default=None if nullable else sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.create_table(
        "websites",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(160), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("favicon_url", sa.String(2048), nullable=True),
        sa.Column("screenshot_url", sa.String(2048), nullable=True),
        sa.Column(
            "tags",
            sa.Text(),
            nullable=False,
            server_default=sa.text("'[]'"),
            comment="JSON array of tag names, derived from website_tags",
        ),
        sa.Column("category", sa.String(120), nullable=True),
        sa.Column("is_ad", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("ad_type", sa.String(20), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("visit_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        sa.Column(
            "review_status", sa.String(30), nullable=False, server_default=sa.text("'pending'")
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("submitted_by", sa.String(120), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
        sa.CheckConstraint("visit_count >= 0", name="ck_websites_visit_count_non_negative"),
        sa.CheckConstraint(
            "rating IS NULL OR (rating >= 0 AND rating <= 5)",
            name="ck_websites_rating_range",
        ),
    )
    op.create_index("idx_websites_category", "websites", ["category"])
    op.create_index("idx_websites_status", "websites", ["status"])
    op.create_index("idx_websites_created_at", "websites", ["created_at"])

    op.create_table(
        "tags",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(40), nullable=False),
        sa.Column("slug", sa.String(60), nullable=False),
        sa.Column("description", sa.String(200), nullable=True),
        sa.Column("color", sa.String(9), nullable=True),
        sa.Column("tag_group", sa.String(40), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_trending", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("idx_tags_status", "tags", ["status"])

    op.create_table(
        "website_tags",
        sa.Column("website_id", sa.String(36), nullable=False),
        sa.Column("tag_id", sa.String(36), nullable=False),
        _timestamp("assigned_at"),
        sa.ForeignKeyConstraint(["website_id"], ["websites.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("website_id", "tag_id"),
    )
    op.create_index("idx_website_tags_tag_id", "website_tags", ["tag_id"])

    op.create_table(
        "collections",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(80), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_image", sa.String(2048), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )

    op.create_table(
        "collection_items",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("collection_id", sa.String(36), nullable=False),
        sa.Column("website_id", sa.String(36), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["collection_id"], ["collections.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["website_id"], ["websites.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_collection_items_collection_position",
        "collection_items",
        ["collection_id", "position"],
    )
    op.create_index("idx_collection_items_website_id", "collection_items", ["website_id"])

    op.create_table(
        "blog_posts",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("summary", sa.String(500), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'draft'")),
        _timestamp("published_at", nullable=True),
        sa.Column("cover_image", sa.String(2048), nullable=True),
        sa.Column("author_id", sa.String(120), nullable=True),
        sa.Column("tags", sa.Text(), nullable=False, server_default=sa.text("'[]'")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index(
        "idx_blog_posts_status_published", "blog_posts", ["status", "published_at"]
    )

    op.create_table(
        "submission_requests",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("website_id", sa.String(36), nullable=True),
        sa.Column("payload", sa.Text(), nullable=False, comment="JSON request body"),
        sa.Column("submitted_by", sa.String(120), nullable=True),
        sa.Column("status", sa.String(30), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("reviewed_by", sa.String(120), nullable=True),
        _timestamp("reviewed_at", nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["website_id"], ["websites.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_submission_requests_website_id", "submission_requests", ["website_id"])
    op.create_index("idx_submission_requests_status", "submission_requests", ["status"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("actor_id", sa.String(120), nullable=True),
        sa.Column("action", sa.String(80), nullable=False),
        sa.Column("entity_type", sa.String(40), nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=False),
        sa.Column("changes", sa.Text(), nullable=True, comment="JSON change-set"),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_index("idx_audit_logs_entity", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("idx_submission_requests_status", table_name="submission_requests")
    op.drop_index("idx_submission_requests_website_id", table_name="submission_requests")
    op.drop_table("submission_requests")
    op.drop_index("idx_blog_posts_status_published", table_name="blog_posts")
    op.drop_table("blog_posts")
    op.drop_index("idx_collection_items_website_id", table_name="collection_items")
    op.drop_index("idx_collection_items_collection_position", table_name="collection_items")
    op.drop_table("collection_items")
    op.drop_table("collections")
    op.drop_index("idx_website_tags_tag_id", table_name="website_tags")
    op.drop_table("website_tags")
    op.drop_index("idx_tags_status", table_name="tags")
    op.drop_table("tags")
    op.drop_index("idx_websites_created_at", table_name="websites")
    op.drop_index("idx_websites_status", table_name="websites")
    op.drop_index("idx_websites_category", table_name="websites")
    op.drop_table("websites")
