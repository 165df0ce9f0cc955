"""Comment tree repository interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import List, Optional

from threadline.domain.model.comment import Comment, CommentDraft
from threadline.domain.value import (
    CommentId,
    CommentPath,
    PostId,
    SubtreeBounds,
)


class CommentTreeRepository(ABC):
    """Repository for the materialized-path comment tree.

    Defines the narrow contract the tree engine needs from the backing
    store: point reads, ordered range scans over the path key, an
    optimistic counter update, and inserts guarded by a unique
    ``(post_id, path)`` constraint. Implementations live in the
    persistence layer.
    """

    @abstractmethod
    async def find_by_id(
        self, comment_id: CommentId, post_id: PostId
    ) -> Optional[Comment]:
        """Find a comment by ID within a post.

        Args:
            comment_id: The comment's unique identifier
            post_id: The post the comment must belong to

        Returns:
            The comment if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_last_root_path(self, post_id: PostId) -> Optional[CommentPath]:
        """Find the highest depth-1 path on a post.

        Args:
            post_id: The post ID

        Returns:
            The last root comment's path, None if the post has no comments
        """
        pass

    @abstractmethod
    async def find_last_child_path(
        self,
        post_id: PostId,
        parent_path: CommentPath,
        parent_depth: int,
        bounds: SubtreeBounds,
    ) -> Optional[CommentPath]:
        """Find the highest path directly below a parent.

        Only paths at ``parent_depth + 1`` inside ``bounds`` are considered,
        so grandchildren never masquerade as the last child.

        Args:
            post_id: The post ID
            parent_path: Path of the parent comment
            parent_depth: Depth of the parent comment
            bounds: Subtree bounds of the parent path

        Returns:
            The last child's path, None if there is none
        """
        pass

    @abstractmethod
    async def scan_subtree(
        self, bounds: SubtreeBounds, post_id: PostId
    ) -> List[Comment]:
        """Find every descendant inside the bounds, ascending by path.

        Ascending path order is pre-order. Soft-deleted comments are
        included so their replies stay reachable.

        Args:
            bounds: Subtree bounds of the ancestor
            post_id: The post ID

        Returns:
            Descendants in pre-order (the ancestor itself excluded)
        """
        pass

    @abstractmethod
    async def find_by_post(
        self,
        post_id: PostId,
        include_deleted: bool = False,
    ) -> List[Comment]:
        """Find all comments for a post in tree (pre-)order.

        Args:
            post_id: The post ID
            include_deleted: Whether to include soft-deleted comments

        Returns:
            List of comments in tree order
        """
        pass

    @abstractmethod
    async def insert_node(self, draft: CommentDraft) -> Comment:
        """Insert a new comment and return it with its store-assigned ID.

        Args:
            draft: The comment to insert

        Returns:
            The stored comment

        Raises:
            IntegrityError: If the post already has a comment at that path
        """
        pass

    @abstractmethod
    async def conditional_increment_child_count(
        self,
        parent_id: CommentId,
        parent_path: CommentPath,
        expected: int,
    ) -> Optional[int]:
        """Increment a parent's child count if it still equals ``expected``.

        Args:
            parent_id: The parent comment ID
            parent_path: The parent path (guards against id reuse)
            expected: The child count read before computing the new path

        Returns:
            The new child count, or None if the stored count changed
        """
        pass

    @abstractmethod
    async def mark_deleted(
        self, comment_id: CommentId, post_id: PostId
    ) -> Optional[Comment]:
        """Soft delete a comment.

        Only ``is_deleted`` (and ``updated_at``) change; path, depth and
        child count are left alone and descendants are untouched.

        Returns:
            The updated comment, None if it does not exist
        """
        pass

    @abstractmethod
    async def count_by_post(self, post_id: PostId) -> int:
        """Count comments for a post (excluding deleted).

        Args:
            post_id: The post ID

        Returns:
            Number of comments
        """
        pass

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager[None]:
        """Group writes so they commit or roll back together.

        Usage:
            async with repository.atomic():
                await repository.conditional_increment_child_count(...)
                await repository.insert_node(...)
        """
        pass
