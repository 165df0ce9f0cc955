"""Comment entity.

Comments form a forest per post. Tree position is stored only in the
materialized ``path``; ``depth`` and ``num_children`` are denormalized
from it so the store can filter and allocate without scanning.
"""

from datetime import datetime

from pydantic import Field, model_validator

from threadline.domain.model.common import DomainModel
from threadline.domain.value import CommentId, CommentPath, PostId, UserId


class CommentDraft(DomainModel):
    """A comment that has a path but no store-assigned id yet."""

    post_id: PostId
    author_id: UserId
    path: CommentPath
    depth: int = Field(ge=1)
    message: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def check_depth_matches_path(self) -> "CommentDraft":
        """Depth is redundant with the path and must agree with it."""
        if self.depth != self.path.depth:
            raise ValueError(
                f"depth {self.depth} does not match path {self.path} "
                f"({self.path.depth} segments)"
            )
        return self


class Comment(DomainModel):
    """Comment entity.

    A comment is created once, never moved, and never hard-deleted by the
    tree engine. Soft deletion keeps the row and path so replies below it
    stay addressable.
    """

    id: CommentId
    post_id: PostId
    author_id: UserId
    path: CommentPath
    depth: int = Field(ge=1)
    num_children: int = Field(default=0, ge=0)
    message: str
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    is_deleted: bool = False

    @model_validator(mode="after")
    def check_depth_matches_path(self) -> "Comment":
        if self.depth != self.path.depth:
            raise ValueError(
                f"depth {self.depth} does not match path {self.path} "
                f"({self.path.depth} segments)"
            )
        return self

    @property
    def is_root(self) -> bool:
        """Whether this is a top-level comment on its post."""
        return self.depth == 1

    @classmethod
    def from_draft(cls, draft: CommentDraft, comment_id: CommentId) -> "Comment":
        return cls(
            id=comment_id,
            post_id=draft.post_id,
            author_id=draft.author_id,
            path=draft.path,
            depth=draft.depth,
            num_children=0,
            message=draft.message,
            created_at=draft.created_at,
            updated_at=draft.updated_at,
            is_deleted=False,
        )
