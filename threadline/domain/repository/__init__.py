"""Repository interfaces for the threadline domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from threadline.domain.repository.comment import CommentTreeRepository

__all__ = [
    "CommentTreeRepository",
]
