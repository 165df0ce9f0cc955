"""PostgreSQL repository implementations."""

from threadline.persistence.repository.comment import PostgresCommentTreeRepository

__all__ = [
    "PostgresCommentTreeRepository",
]
