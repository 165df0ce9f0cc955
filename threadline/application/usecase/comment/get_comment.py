"""Get comment (with replies) use case."""

from pydantic import BaseModel

from threadline.domain.service import CommentTreeService
from threadline.domain.value import CommentId, PostId

from .common import CommentItem


class GetCommentRequest(BaseModel):
    """Get comment request."""

    post_id: int
    comment_id: int
    include_replies: bool = False


class GetCommentResponse(BaseModel):
    """Get comment response.

    ``comments[0]`` is the requested comment; replies follow in tree order.
    """

    post_id: int
    comments: list[CommentItem]


class GetCommentUseCase:
    """Use case for fetching a comment and, optionally, its whole subtree."""

    def __init__(self, comment_tree_service: CommentTreeService) -> None:
        """Initialize get comment use case.

        Args:
            comment_tree_service: Comment tree domain service
        """
        self.comment_tree_service = comment_tree_service

    async def execute(self, request: GetCommentRequest) -> GetCommentResponse:
        comments = await self.comment_tree_service.fetch_comment_with_replies(
            comment_id=CommentId(request.comment_id),
            post_id=PostId(request.post_id),
            include_replies=request.include_replies,
        )
        return GetCommentResponse(
            post_id=request.post_id,
            comments=[CommentItem.from_comment(c) for c in comments],
        )
