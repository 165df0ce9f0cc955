"""Create root comment use case."""

from pydantic import BaseModel

from threadline.domain.service import CommentTreeService
from threadline.domain.value import PostId, UserId

from .common import CommentItem


class CreateRootCommentRequest(BaseModel):
    """Create root comment request."""

    post_id: int
    author_id: int  # User ID from the authenticated caller
    message: str


class CreateRootCommentUseCase:
    """Use case for adding a top-level comment to a post."""

    def __init__(self, comment_tree_service: CommentTreeService) -> None:
        """Initialize create root comment use case.

        Args:
            comment_tree_service: Comment tree domain service
        """
        self.comment_tree_service = comment_tree_service

    async def execute(self, request: CreateRootCommentRequest) -> CommentItem:
        """Execute create root comment flow.

        Args:
            request: Create root comment request

        Returns:
            The created comment

        Raises:
            ValidationError: If an id is missing or the message is blank
            PathOverflowError: If the post has no root index left
            ConcurrentModificationError: If every attempt lost a race
        """
        comment = await self.comment_tree_service.create_root_comment(
            post_id=PostId(request.post_id),
            author_id=UserId(request.author_id),
            message=request.message,
        )
        return CommentItem.from_comment(comment)
