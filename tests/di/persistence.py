"""Mock persistence providers for testing."""

from dishka import Scope, provide

from threadline.domain.repository import CommentTreeRepository
from threadline.persistence.repository.inmemory import InMemoryCommentTreeRepository
from threadline.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using an in-memory repository.

    The repository is APP-scoped so it outlives a single request, the way a
    database does; each test builds its own container and so gets a fresh
    store.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_comment_repository(self) -> CommentTreeRepository:
        """Provide in-memory comment tree repository."""
        return InMemoryCommentTreeRepository()
