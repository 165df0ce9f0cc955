"""In-memory comment tree repository for testing."""

import itertools
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from threadline.domain.model.comment import Comment, CommentDraft
from threadline.domain.repository.comment import CommentTreeRepository
from threadline.domain.value import CommentId, CommentPath, PostId, SubtreeBounds

# Undo entries (comment id, previous version or None if inserted) for the
# atomic block running in the current task.
_journal: ContextVar[list[tuple[CommentId, Optional[Comment]]] | None] = ContextVar(
    "inmemory_comment_journal", default=None
)


class InMemoryCommentTreeRepository(CommentTreeRepository):
    """In-memory implementation of CommentTreeRepository for testing.

    Mirrors the PostgreSQL adapter: serial ids, a unique ``(post_id, path)``
    constraint reported as IntegrityError, and ``atomic()`` blocks that undo
    their own writes when they fail.
    """

    def __init__(self) -> None:
        self._comments: dict[CommentId, Comment] = {}
        self._ids = itertools.count(1)

    async def find_by_id(
        self, comment_id: CommentId, post_id: PostId
    ) -> Optional[Comment]:
        """Find a comment by ID within a post."""
        comment = self._comments.get(comment_id)
        if comment is None or comment.post_id != post_id:
            return None
        return comment

    async def find_last_root_path(self, post_id: PostId) -> Optional[CommentPath]:
        """Find the highest depth-1 path on a post."""
        roots = [
            c.path
            for c in self._comments.values()
            if c.post_id == post_id and c.depth == 1
        ]
        return max(roots, key=str, default=None)

    async def find_last_child_path(
        self,
        post_id: PostId,
        parent_path: CommentPath,
        parent_depth: int,
        bounds: SubtreeBounds,
    ) -> Optional[CommentPath]:
        """Find the highest path directly below a parent."""
        children = [
            c.path
            for c in self._comments.values()
            if c.post_id == post_id
            and c.depth == parent_depth + 1
            and bounds.contains(str(c.path))
        ]
        return max(children, key=str, default=None)

    async def scan_subtree(
        self, bounds: SubtreeBounds, post_id: PostId
    ) -> list[Comment]:
        """Find every descendant inside the bounds, ascending by path."""
        comments = [
            c
            for c in self._comments.values()
            if c.post_id == post_id and bounds.contains(str(c.path))
        ]
        comments.sort(key=lambda c: str(c.path))
        return comments

    async def find_by_post(
        self,
        post_id: PostId,
        include_deleted: bool = False,
    ) -> list[Comment]:
        """Find all comments for a post in tree order."""
        comments = [c for c in self._comments.values() if c.post_id == post_id]

        # Filter deleted
        if not include_deleted:
            comments = [c for c in comments if not c.is_deleted]

        # Sort by path (tree order)
        comments.sort(key=lambda c: str(c.path))

        return comments

    async def insert_node(self, draft: CommentDraft) -> Comment:
        """Insert a new comment.

        Raises:
            IntegrityError: If the post already has a comment at that path
        """
        taken = any(
            c.post_id == draft.post_id and c.path == draft.path
            for c in self._comments.values()
        )
        if taken:
            raise IntegrityError(
                "Duplicate comment path", None, Exception(str(draft.path))
            )

        comment = Comment.from_draft(draft, CommentId(next(self._ids)))
        self._write(comment.id, comment)
        return comment

    async def conditional_increment_child_count(
        self,
        parent_id: CommentId,
        parent_path: CommentPath,
        expected: int,
    ) -> Optional[int]:
        """Increment child count only if it still equals ``expected``."""
        parent = self._comments.get(parent_id)
        if (
            parent is None
            or parent.path != parent_path
            or parent.num_children != expected
        ):
            return None

        # Comments are immutable, store an updated copy
        updated = parent.model_copy(update={"num_children": expected + 1})
        self._write(parent_id, updated)
        return updated.num_children

    async def mark_deleted(
        self, comment_id: CommentId, post_id: PostId
    ) -> Optional[Comment]:
        """Soft delete a comment."""
        comment = await self.find_by_id(comment_id, post_id)
        if comment is None:
            return None

        updated = comment.model_copy(
            update={"is_deleted": True, "updated_at": datetime.now()}
        )
        self._write(comment_id, updated)
        return updated

    async def count_by_post(self, post_id: PostId) -> int:
        """Count comments for a post (excluding deleted)."""
        return sum(
            1
            for c in self._comments.values()
            if c.post_id == post_id and not c.is_deleted
        )

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Undo this block's writes if it raises."""
        outer = _journal.get()
        journal: list[tuple[CommentId, Optional[Comment]]] = []
        token = _journal.set(journal)
        try:
            yield
        except BaseException:
            for comment_id, previous in reversed(journal):
                if previous is None:
                    self._comments.pop(comment_id, None)
                else:
                    self._comments[comment_id] = previous
            raise
        else:
            if outer is not None:
                outer.extend(journal)
        finally:
            _journal.reset(token)

    def _write(self, comment_id: CommentId, comment: Comment) -> None:
        journal = _journal.get()
        if journal is not None:
            journal.append((comment_id, self._comments.get(comment_id)))
        self._comments[comment_id] = comment
