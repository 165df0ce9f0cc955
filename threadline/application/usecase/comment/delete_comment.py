"""Delete comment use case."""

from pydantic import BaseModel

from threadline.domain.service import CommentTreeService
from threadline.domain.value import CommentId, PostId

from .common import CommentItem


class DeleteCommentRequest(BaseModel):
    """Delete comment request."""

    post_id: int
    comment_id: int


class DeleteCommentUseCase:
    """Use case for soft deleting a comment.

    The comment stays in the tree (flagged deleted) so its replies keep
    their paths and remain reachable.
    """

    def __init__(self, comment_tree_service: CommentTreeService) -> None:
        """Initialize delete comment use case.

        Args:
            comment_tree_service: Comment tree domain service
        """
        self.comment_tree_service = comment_tree_service

    async def execute(self, request: DeleteCommentRequest) -> CommentItem:
        comment = await self.comment_tree_service.delete_comment(
            comment_id=CommentId(request.comment_id),
            post_id=PostId(request.post_id),
        )
        return CommentItem.from_comment(comment)
