"""In-memory repository implementations for testing."""

from .comment import InMemoryCommentTreeRepository

__all__ = [
    "InMemoryCommentTreeRepository",
]
