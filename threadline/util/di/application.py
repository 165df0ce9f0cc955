"""Application layer DI providers."""

from dishka import Scope, provide

from threadline.application.usecase.comment import (
    CreateReplyUseCase,
    CreateRootCommentUseCase,
    DeleteCommentUseCase,
    GetCommentUseCase,
    ListCommentsUseCase,
)
from threadline.domain.service import CommentTreeService
from threadline.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    @provide(scope=Scope.REQUEST)
    def get_create_root_comment_use_case(
        self, comment_tree_service: CommentTreeService
    ) -> CreateRootCommentUseCase:
        """Provide create root comment use case."""
        return CreateRootCommentUseCase(comment_tree_service=comment_tree_service)

    @provide(scope=Scope.REQUEST)
    def get_create_reply_use_case(
        self, comment_tree_service: CommentTreeService
    ) -> CreateReplyUseCase:
        """Provide create reply use case."""
        return CreateReplyUseCase(comment_tree_service=comment_tree_service)

    @provide(scope=Scope.REQUEST)
    def get_get_comment_use_case(
        self, comment_tree_service: CommentTreeService
    ) -> GetCommentUseCase:
        """Provide get comment use case."""
        return GetCommentUseCase(comment_tree_service=comment_tree_service)

    @provide(scope=Scope.REQUEST)
    def get_delete_comment_use_case(
        self, comment_tree_service: CommentTreeService
    ) -> DeleteCommentUseCase:
        """Provide delete comment use case."""
        return DeleteCommentUseCase(comment_tree_service=comment_tree_service)

    @provide(scope=Scope.REQUEST)
    def get_list_comments_use_case(
        self, comment_tree_service: CommentTreeService
    ) -> ListCommentsUseCase:
        """Provide list comments use case."""
        return ListCommentsUseCase(comment_tree_service=comment_tree_service)
