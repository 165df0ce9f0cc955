"""SQLAlchemy table definitions for threadline.

These table definitions are used with SQLAlchemy Core.
They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# COMMENTS TABLE
# ============================================================================
comments_table = Table(
    "comments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("post_id", Integer, nullable=False),
    Column("author_id", Integer, nullable=False),
    # "C" collation: byte order, so key order equals alphabet order
    Column("path", String(collation="C"), nullable=False),
    Column("depth", Integer, nullable=False),
    Column("num_children", Integer, nullable=False, server_default="0"),
    Column("message", Text, nullable=False),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("is_deleted", Boolean, nullable=False, server_default="false"),
    UniqueConstraint("post_id", "path", name="uq_comments_post_path"),
    CheckConstraint("depth >= 1", name="depth_positive"),
    CheckConstraint("num_children >= 0", name="num_children_non_negative"),
)

Index(
    "idx_comments_post_depth_path",
    comments_table.c.post_id,
    comments_table.c.depth,
    comments_table.c.path,
)
Index("idx_comments_author_id", comments_table.c.author_id)
