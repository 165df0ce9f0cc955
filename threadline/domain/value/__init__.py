"""Domain value objects for threadline."""

from threadline.domain.value.identifiers import CommentId, PostId, UserId
from threadline.domain.value.tree import (
    DEFAULT_ALPHABET,
    DEFAULT_SEGMENT_WIDTH,
    CommentPath,
    Segment,
    SubtreeBounds,
    TreeShape,
)

__all__ = [
    # Identifiers
    "CommentId",
    "PostId",
    "UserId",
    # Tree positions
    "DEFAULT_ALPHABET",
    "DEFAULT_SEGMENT_WIDTH",
    "CommentPath",
    "Segment",
    "SubtreeBounds",
    "TreeShape",
]
