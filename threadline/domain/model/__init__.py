"""Domain model entities for threadline."""

from threadline.domain.model.comment import Comment, CommentDraft

__all__ = [
    "Comment",
    "CommentDraft",
]
