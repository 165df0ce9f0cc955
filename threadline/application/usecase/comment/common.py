"""Response item shared by the comment use cases."""

from datetime import datetime

from pydantic import BaseModel

from threadline.domain.model import Comment


class CommentItem(BaseModel):
    """Comment item in responses."""

    comment_id: int
    post_id: int
    author_id: int
    path: str
    depth: int
    num_children: int
    message: str
    is_deleted: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentItem":
        return cls(
            comment_id=comment.id,
            post_id=comment.post_id,
            author_id=comment.author_id,
            path=str(comment.path),
            depth=comment.depth,
            num_children=comment.num_children,
            message=comment.message,
            is_deleted=comment.is_deleted,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )
