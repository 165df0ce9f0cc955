"""Comment tree domain service."""

from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from datetime import datetime

import logfire
from sqlalchemy.exc import IntegrityError

from threadline.domain.error import (
    ConcurrentModificationError,
    InconsistentStateError,
    MalformedSegmentError,
    NotFoundError,
    ValidationError,
)
from threadline.domain.model.comment import Comment, CommentDraft
from threadline.domain.repository import CommentTreeRepository
from threadline.domain.value import CommentId, CommentPath, PostId, UserId

from .base import Service
from .path_algebra import PathAlgebra

DEFAULT_MAX_WRITE_ATTEMPTS = 3


class CommentTreeService(Service):
    """Domain service for creating and reading comment trees.

    Writes allocate a path for the new comment and persist it. Replies also
    bump the parent's child count with an optimistic compare-and-set; the
    bump and the insert run in one atomic block. Losing a race raises
    ConcurrentModificationError, and the whole operation is retried from
    the first read up to ``max_write_attempts`` times.
    """

    def __init__(
        self,
        comment_repository: CommentTreeRepository,
        path_algebra: PathAlgebra,
        max_write_attempts: int = DEFAULT_MAX_WRITE_ATTEMPTS,
    ) -> None:
        """Initialize comment tree service.

        Args:
            comment_repository: Comment tree repository
            path_algebra: Path algebra for the configured tree shape
            max_write_attempts: Attempts per write before a conflict surfaces
        """
        if max_write_attempts < 1:
            raise ValueError("max_write_attempts must be at least 1")
        self.comment_repository = comment_repository
        self.path_algebra = path_algebra
        self.max_write_attempts = max_write_attempts

    async def create_root_comment(
        self, post_id: PostId, author_id: UserId, message: str
    ) -> Comment:
        """Create a top-level comment on a post.

        The first root comment gets path ``root_path(1)``; later ones take
        the next sibling of the current last root.

        Args:
            post_id: Post ID
            author_id: Author user ID
            message: Comment text (trimmed before saving)

        Returns:
            Created comment

        Raises:
            ValidationError: If an id is missing or the message is blank
            PathOverflowError: If the post has no root index left
            ConcurrentModificationError: If every attempt lost a path race
        """
        with logfire.span(
            "comment_tree_service.create_root_comment",
            post_id=post_id,
            author_id=author_id,
        ):
            self._require_ids(post_id=post_id, author_id=author_id)
            text = self._clean_message(message)

            async def attempt() -> Comment:
                return await self._insert_root(post_id, author_id, text)

            saved = await self._retry_on_conflict(
                "create_root_comment", attempt, post_id=post_id
            )
            logfire.info(
                "Root comment created",
                comment_id=saved.id,
                post_id=post_id,
                path=str(saved.path),
            )
            return saved

    async def create_reply(
        self,
        parent_id: CommentId,
        post_id: PostId,
        author_id: UserId,
        message: str,
    ) -> Comment:
        """Reply to an existing comment.

        Args:
            parent_id: ID of the comment being replied to
            post_id: Post the parent belongs to
            author_id: Author user ID
            message: Comment text (trimmed before saving)

        Returns:
            Created reply

        Raises:
            ValidationError: If an id is missing or the message is blank
            NotFoundError: If the parent does not exist on the post
            PathOverflowError: If the parent has no child index left
            InconsistentStateError: If the parent claims children but none
                are stored
            ConcurrentModificationError: If every attempt lost a race
        """
        with logfire.span(
            "comment_tree_service.create_reply",
            parent_id=parent_id,
            post_id=post_id,
            author_id=author_id,
        ):
            self._require_ids(
                parent_id=parent_id, post_id=post_id, author_id=author_id
            )
            text = self._clean_message(message)

            async def attempt() -> Comment:
                return await self._insert_reply(parent_id, post_id, author_id, text)

            saved = await self._retry_on_conflict(
                "create_reply", attempt, post_id=post_id, parent_id=parent_id
            )
            logfire.info(
                "Reply created",
                comment_id=saved.id,
                parent_id=parent_id,
                post_id=post_id,
                path=str(saved.path),
                depth=saved.depth,
            )
            return saved

    async def fetch_comment_with_replies(
        self,
        comment_id: CommentId,
        post_id: PostId,
        include_replies: bool = False,
    ) -> list[Comment]:
        """Get a comment, optionally followed by its whole subtree.

        Args:
            comment_id: Comment ID
            post_id: Post ID
            include_replies: Whether to append all descendants

        Returns:
            The comment first, then its descendants in pre-order

        Raises:
            ValidationError: If an id is missing
            NotFoundError: If the comment does not exist on the post
        """
        with logfire.span(
            "comment_tree_service.fetch_comment_with_replies",
            comment_id=comment_id,
            post_id=post_id,
            include_replies=include_replies,
        ):
            self._require_ids(comment_id=comment_id, post_id=post_id)
            comment = await self.comment_repository.find_by_id(comment_id, post_id)
            if comment is None:
                logfire.warn(
                    "Comment not found", comment_id=comment_id, post_id=post_id
                )
                raise NotFoundError("Comment", str(comment_id))

            if not include_replies or comment.num_children == 0:
                return [comment]

            bounds = self.path_algebra.subtree_bounds(comment.path)
            replies = await self.comment_repository.scan_subtree(bounds, post_id)
            logfire.info(
                "Comment subtree retrieved",
                comment_id=comment_id,
                post_id=post_id,
                replies=len(replies),
            )
            return [comment, *replies]

    async def delete_comment(self, comment_id: CommentId, post_id: PostId) -> Comment:
        """Soft delete a single comment.

        Replies are left as they are; the deleted comment keeps its path so
        they remain reachable.

        Raises:
            ValidationError: If an id is missing
            NotFoundError: If the comment does not exist on the post
        """
        with logfire.span(
            "comment_tree_service.delete_comment",
            comment_id=comment_id,
            post_id=post_id,
        ):
            self._require_ids(comment_id=comment_id, post_id=post_id)
            deleted = await self.comment_repository.mark_deleted(comment_id, post_id)
            if deleted is None:
                logfire.warn(
                    "Comment not found for deletion",
                    comment_id=comment_id,
                    post_id=post_id,
                )
                raise NotFoundError("Comment", str(comment_id))

            logfire.info(
                "Comment soft deleted",
                comment_id=comment_id,
                post_id=post_id,
                path=str(deleted.path),
            )
            return deleted

    async def get_comments_for_post(
        self, post_id: PostId, include_deleted: bool = False
    ) -> list[Comment]:
        """Get all comments for a post in tree order."""
        with logfire.span(
            "comment_tree_service.get_comments_for_post",
            post_id=post_id,
            include_deleted=include_deleted,
        ):
            self._require_ids(post_id=post_id)
            comments = await self.comment_repository.find_by_post(
                post_id=post_id,
                include_deleted=include_deleted,
            )
            logfire.info(
                "Comments retrieved for post", post_id=post_id, count=len(comments)
            )
            return comments

    async def count_comments(self, post_id: PostId) -> int:
        """Count live comments on a post."""
        self._require_ids(post_id=post_id)
        return await self.comment_repository.count_by_post(post_id)

    async def _insert_root(
        self, post_id: PostId, author_id: UserId, text: str
    ) -> Comment:
        with self._corruption_logged("create_root_comment", post_id=post_id):
            last_root = await self.comment_repository.find_last_root_path(post_id)
            if last_root is None:
                path = self.path_algebra.root_path(1)
            else:
                path = self.path_algebra.next_sibling_path(last_root)

        draft = self._draft(post_id, author_id, path, text)
        try:
            async with self.comment_repository.atomic():
                return await self.comment_repository.insert_node(draft)
        except IntegrityError as e:
            raise ConcurrentModificationError(
                f"Path {path} already taken on post {post_id}"
            ) from e

    async def _insert_reply(
        self,
        parent_id: CommentId,
        post_id: PostId,
        author_id: UserId,
        text: str,
    ) -> Comment:
        parent = await self.comment_repository.find_by_id(parent_id, post_id)
        if parent is None:
            logfire.warn(
                "Parent comment not found", parent_id=parent_id, post_id=post_id
            )
            raise NotFoundError("Comment", str(parent_id))

        with self._corruption_logged(
            "create_reply", post_id=post_id, parent_id=parent_id
        ):
            if parent.num_children == 0:
                path = self.path_algebra.first_child_path(parent.path)
            else:
                bounds = self.path_algebra.subtree_bounds(parent.path)
                last_child = await self.comment_repository.find_last_child_path(
                    post_id, parent.path, parent.depth, bounds
                )
                if last_child is None:
                    raise InconsistentStateError(
                        f"Comment {parent_id} has num_children="
                        f"{parent.num_children} but no stored replies"
                    )
                path = self.path_algebra.next_sibling_path(last_child)

        draft = self._draft(post_id, author_id, path, text)
        try:
            async with self.comment_repository.atomic():
                count = await self.comment_repository.conditional_increment_child_count(
                    parent.id, parent.path, parent.num_children
                )
                if count is None:
                    raise ConcurrentModificationError(
                        f"Child count of comment {parent_id} changed "
                        f"(expected {parent.num_children})"
                    )
                return await self.comment_repository.insert_node(draft)
        except IntegrityError as e:
            raise ConcurrentModificationError(
                f"Path {path} already taken on post {post_id}"
            ) from e

    async def _retry_on_conflict(
        self,
        operation: str,
        attempt: Callable[[], Awaitable[Comment]],
        **context: object,
    ) -> Comment:
        attempt_no = 1
        while True:
            try:
                return await attempt()
            except ConcurrentModificationError as e:
                logfire.warn(
                    "Comment write conflict",
                    operation=operation,
                    attempt=attempt_no,
                    max_attempts=self.max_write_attempts,
                    error=str(e),
                    **context,
                )
                if attempt_no >= self.max_write_attempts:
                    raise
                attempt_no += 1

    @staticmethod
    @contextmanager
    def _corruption_logged(operation: str, **context: object) -> Iterator[None]:
        """Log decode and counter corruption loudly before it propagates."""
        try:
            yield
        except (MalformedSegmentError, InconsistentStateError) as e:
            logfire.error(
                "Comment tree corruption detected",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
                **context,
            )
            raise

    @staticmethod
    def _draft(
        post_id: PostId, author_id: UserId, path: CommentPath, text: str
    ) -> CommentDraft:
        now = datetime.now()
        return CommentDraft(
            post_id=post_id,
            author_id=author_id,
            path=path,
            depth=path.depth,
            message=text,
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def _clean_message(message: str | None) -> str:
        text = (message or "").strip()
        if not text:
            raise ValidationError("Message is empty")
        return text

    @staticmethod
    def _require_ids(**ids: int | None) -> None:
        for name, value in ids.items():
            if not value or value < 0:
                raise ValidationError(f"{name} is required")
