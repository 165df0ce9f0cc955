"""Comment routes."""

import logfire
from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from threadline.application.usecase.comment import (
    CommentItem,
    CreateReplyRequest,
    CreateReplyUseCase,
    CreateRootCommentRequest,
    CreateRootCommentUseCase,
    DeleteCommentRequest,
    DeleteCommentUseCase,
    GetCommentRequest,
    GetCommentResponse,
    GetCommentUseCase,
    ListCommentsRequest,
    ListCommentsResponse,
    ListCommentsUseCase,
)
from threadline.domain.error import (
    ConcurrentModificationError,
    DomainError,
    InconsistentStateError,
    MalformedSegmentError,
    NotFoundError,
    PathOverflowError,
    ValidationError,
)

router = APIRouter(prefix="/posts", tags=["comments"], route_class=DishkaRoute)


class CreateCommentAPIRequest(BaseModel):
    """API request for creating a root comment or a reply."""

    author_id: int = Field(gt=0)  # Set by the auth layer in front of this API
    message: str = Field(max_length=10000)


def _to_http_error(e: DomainError) -> HTTPException:
    """Translate a domain error into an HTTP error."""
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ConcurrentModificationError):
        logfire.warn("Comment write conflict surfaced to client", error=str(e))
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Comment thread changed concurrently, please retry",
        )
    if isinstance(e, PathOverflowError):
        logfire.error("Comment tree level is full", error=str(e))
        return HTTPException(
            status_code=status.HTTP_507_INSUFFICIENT_STORAGE,
            detail="No more replies can be added here",
        )
    if isinstance(e, (MalformedSegmentError, InconsistentStateError)):
        logfire.error("Comment tree corrupted", error=str(e))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal error",
    )


@router.post(
    "/{post_id}/comments",
    response_model=CommentItem,
    status_code=status.HTTP_201_CREATED,
)
async def create_root_comment(
    post_id: int,
    request: CreateCommentAPIRequest,
    use_case: FromDishka[CreateRootCommentUseCase],
) -> CommentItem:
    """Create a top-level comment on a post.

    Args:
        post_id: Post ID
        request: Comment data
        use_case: Create root comment use case from DI

    Returns:
        Created comment, including its tree path
    """
    try:
        return await use_case.execute(
            CreateRootCommentRequest(
                post_id=post_id,
                author_id=request.author_id,
                message=request.message,
            )
        )
    except DomainError as e:
        raise _to_http_error(e) from e


@router.post(
    "/{post_id}/comments/{comment_id}/replies",
    response_model=CommentItem,
    status_code=status.HTTP_201_CREATED,
)
async def create_reply(
    post_id: int,
    comment_id: int,
    request: CreateCommentAPIRequest,
    use_case: FromDishka[CreateReplyUseCase],
) -> CommentItem:
    """Reply to a comment.

    Args:
        post_id: Post ID
        comment_id: ID of the comment being replied to
        request: Reply data
        use_case: Create reply use case from DI

    Returns:
        Created reply, including its tree path
    """
    try:
        return await use_case.execute(
            CreateReplyRequest(
                post_id=post_id,
                parent_id=comment_id,
                author_id=request.author_id,
                message=request.message,
            )
        )
    except DomainError as e:
        raise _to_http_error(e) from e


@router.get("/{post_id}/comments", response_model=ListCommentsResponse)
async def list_comments(
    post_id: int,
    use_case: FromDishka[ListCommentsUseCase],
    include_deleted: bool = False,
) -> ListCommentsResponse:
    """Get all comments for a post in tree order."""
    try:
        return await use_case.execute(
            ListCommentsRequest(post_id=post_id, include_deleted=include_deleted)
        )
    except DomainError as e:
        raise _to_http_error(e) from e


@router.get("/{post_id}/comments/{comment_id}", response_model=GetCommentResponse)
async def get_comment(
    post_id: int,
    comment_id: int,
    use_case: FromDishka[GetCommentUseCase],
    include_replies: bool = False,
) -> GetCommentResponse:
    """Get a comment, followed by all its replies when ``include_replies`` is set.

    Args:
        post_id: Post ID
        comment_id: Comment ID
        use_case: Get comment use case from DI
        include_replies: Whether to return the whole subtree

    Returns:
        The comment first, then its replies in tree order
    """
    try:
        return await use_case.execute(
            GetCommentRequest(
                post_id=post_id,
                comment_id=comment_id,
                include_replies=include_replies,
            )
        )
    except DomainError as e:
        raise _to_http_error(e) from e


@router.delete("/{post_id}/comments/{comment_id}", response_model=CommentItem)
async def delete_comment(
    post_id: int,
    comment_id: int,
    use_case: FromDishka[DeleteCommentUseCase],
) -> CommentItem:
    """Soft delete a comment; its replies stay in place."""
    try:
        return await use_case.execute(
            DeleteCommentRequest(post_id=post_id, comment_id=comment_id)
        )
    except DomainError as e:
        raise _to_http_error(e) from e
