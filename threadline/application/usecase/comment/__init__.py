"""Comment use cases."""

from .common import CommentItem
from .create_reply import CreateReplyRequest, CreateReplyUseCase
from .create_root_comment import CreateRootCommentRequest, CreateRootCommentUseCase
from .delete_comment import DeleteCommentRequest, DeleteCommentUseCase
from .get_comment import GetCommentRequest, GetCommentResponse, GetCommentUseCase
from .list_comments import (
    ListCommentsRequest,
    ListCommentsResponse,
    ListCommentsUseCase,
)

__all__ = [
    "CommentItem",
    "CreateReplyRequest",
    "CreateReplyUseCase",
    "CreateRootCommentRequest",
    "CreateRootCommentUseCase",
    "DeleteCommentRequest",
    "DeleteCommentUseCase",
    "GetCommentRequest",
    "GetCommentResponse",
    "GetCommentUseCase",
    "ListCommentsRequest",
    "ListCommentsResponse",
    "ListCommentsUseCase",
]
