"""Create reply use case."""

from pydantic import BaseModel

from threadline.domain.service import CommentTreeService
from threadline.domain.value import CommentId, PostId, UserId

from .common import CommentItem


class CreateReplyRequest(BaseModel):
    """Create reply request."""

    post_id: int
    parent_id: int  # Comment being replied to
    author_id: int  # User ID from the authenticated caller
    message: str


class CreateReplyUseCase:
    """Use case for replying to a comment."""

    def __init__(self, comment_tree_service: CommentTreeService) -> None:
        """Initialize create reply use case.

        Args:
            comment_tree_service: Comment tree domain service
        """
        self.comment_tree_service = comment_tree_service

    async def execute(self, request: CreateReplyRequest) -> CommentItem:
        """Execute create reply flow.

        Conflicts with concurrent replies to the same parent are retried by
        the service; a conflict reaches the caller only once retries run out.

        Args:
            request: Create reply request

        Returns:
            The created reply

        Raises:
            ValidationError: If an id is missing or the message is blank
            NotFoundError: If the parent comment does not exist on the post
            PathOverflowError: If the parent has no child index left
            InconsistentStateError: If the parent's child count is corrupt
            ConcurrentModificationError: If every attempt lost a race
        """
        comment = await self.comment_tree_service.create_reply(
            parent_id=CommentId(request.parent_id),
            post_id=PostId(request.post_id),
            author_id=UserId(request.author_id),
            message=request.message,
        )
        return CommentItem.from_comment(comment)
