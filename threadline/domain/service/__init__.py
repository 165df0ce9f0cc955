"""Domain services."""

from .base import Service
from .comment_tree_service import DEFAULT_MAX_WRITE_ATTEMPTS, CommentTreeService
from .path_algebra import PathAlgebra
from .segment_codec import SegmentCodec

__all__ = [
    "CommentTreeService",
    "DEFAULT_MAX_WRITE_ATTEMPTS",
    "PathAlgebra",
    "SegmentCodec",
    "Service",
]
