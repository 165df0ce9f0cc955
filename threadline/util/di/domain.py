"""Domain layer DI providers."""

from dishka import Scope, provide

from threadline.config import TreeSettings
from threadline.domain.repository import CommentTreeRepository
from threadline.domain.service import CommentTreeService, PathAlgebra, SegmentCodec
from threadline.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    The codec and path algebra are pure and shared app-wide. The tree
    service is REQUEST-scoped to align with the repository/session lifecycle.
    """

    scope = Scope.REQUEST

    @provide(scope=Scope.APP)
    def get_segment_codec(self, tree_settings: TreeSettings) -> SegmentCodec:
        """Provide segment codec for the configured tree shape."""
        return SegmentCodec(shape=tree_settings.shape)

    @provide(scope=Scope.APP)
    def get_path_algebra(self, codec: SegmentCodec) -> PathAlgebra:
        """Provide path algebra."""
        return PathAlgebra(codec=codec)

    @provide
    def get_comment_tree_service(
        self,
        comment_repository: CommentTreeRepository,
        path_algebra: PathAlgebra,
        tree_settings: TreeSettings,
    ) -> CommentTreeService:
        """Provide comment tree domain service."""
        return CommentTreeService(
            comment_repository=comment_repository,
            path_algebra=path_algebra,
            max_write_attempts=tree_settings.max_write_attempts,
        )
