"""create_comments

Create the comments table holding every post's comment forest:
- path: concatenated fixed-width segments, byte-ordered ("C" collation)
- depth / num_children: denormalized from path for filtering and allocation
- unique (post_id, path) so concurrent writers cannot share a path

Revision ID: 3c1f2a9d7b10
Revises:
Create Date: 2026-10-18 10:12:44.518203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1f2a9d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("path", sa.String(collation="C"), nullable=False),
        sa.Column("depth", sa.Integer(), nullable=False),
        sa.Column("num_children", sa.Integer(), server_default="0", nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.Column(
            "is_deleted", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("post_id", "path", name="uq_comments_post_path"),
        sa.CheckConstraint("depth >= 1", name="depth_positive"),
        sa.CheckConstraint("num_children >= 0", name="num_children_non_negative"),
    )

    # Serves root lookups (depth = 1), last-child lookups and subtree scans
    op.create_index(
        "idx_comments_post_depth_path", "comments", ["post_id", "depth", "path"]
    )
    op.create_index("idx_comments_author_id", "comments", ["author_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_comments_author_id", table_name="comments")
    op.drop_index("idx_comments_post_depth_path", table_name="comments")
    op.drop_table("comments")
