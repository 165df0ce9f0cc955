"""List comments use case."""

from pydantic import BaseModel

from threadline.domain.service import CommentTreeService
from threadline.domain.value import PostId

from .common import CommentItem


class ListCommentsRequest(BaseModel):
    """List comments request."""

    post_id: int
    include_deleted: bool = False


class ListCommentsResponse(BaseModel):
    """List comments response."""

    post_id: int
    comments: list[CommentItem]
    total: int  # Live (not deleted) comments on the post


class ListCommentsUseCase:
    """Use case for getting the whole comment forest of a post in tree order."""

    def __init__(self, comment_tree_service: CommentTreeService) -> None:
        """Initialize list comments use case.

        Args:
            comment_tree_service: Comment tree domain service
        """
        self.comment_tree_service = comment_tree_service

    async def execute(self, request: ListCommentsRequest) -> ListCommentsResponse:
        """Execute list comments flow.

        Args:
            request: List comments request

        Returns:
            Comments in tree order with the live comment count
        """
        post_id = PostId(request.post_id)
        comments = await self.comment_tree_service.get_comments_for_post(
            post_id=post_id,
            include_deleted=request.include_deleted,
        )
        total = await self.comment_tree_service.count_comments(post_id)
        return ListCommentsResponse(
            post_id=request.post_id,
            comments=[CommentItem.from_comment(c) for c in comments],
            total=total,
        )
