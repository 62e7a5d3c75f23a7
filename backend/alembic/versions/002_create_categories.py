"""Create the managed category tree

Revision ID: 002
Revises: 001
Create Date: 2024-06-15 00:00:00.000000+00:00

Table: categories (self-referencing parent_id). Websites keep their
free-text `category` column; nothing is backfilled.

Rollback: downgrade() drops the table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(60), nullable=False),
        sa.Column("slug", sa.String(60), nullable=False),
        sa.Column("description", sa.String(200), nullable=True),
        sa.Column("parent_id", sa.String(36), nullable=True),
        sa.Column("icon", sa.String(60), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
        sa.ForeignKeyConstraint(["parent_id"], ["categories.id"]),
        sa.CheckConstraint("display_order >= 0", name="ck_categories_display_order_non_negative"),
    )
    op.create_index("idx_categories_parent_id", "categories", ["parent_id"])
    op.create_index("idx_categories_status", "categories", ["status"])


def downgrade() -> None:
    op.drop_index("idx_categories_status", table_name="categories")
    op.drop_index("idx_categories_parent_id", table_name="categories")
    op.drop_table("categories")
