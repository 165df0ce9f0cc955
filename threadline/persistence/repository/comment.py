"""PostgreSQL implementation of the comment tree repository."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy import ColumnElement, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from threadline.domain.model import Comment, CommentDraft
from threadline.domain.repository import CommentTreeRepository
from threadline.domain.service import PathAlgebra
from threadline.domain.value import CommentId, CommentPath, PostId, SubtreeBounds
from threadline.persistence.mappers import draft_to_dict, row_to_comment
from threadline.persistence.tables import comments_table


def _within(bounds: SubtreeBounds) -> ColumnElement[bool]:
    """SQL form of SubtreeBounds.contains."""
    path = comments_table.c.path
    return or_(
        path.between(bounds.lower, bounds.upper),
        path.startswith(bounds.upper, autoescape=True) & (path != bounds.upper),
    )


class PostgresCommentTreeRepository(CommentTreeRepository):
    """PostgreSQL implementation of CommentTreeRepository."""

    def __init__(self, session: AsyncSession, path_algebra: PathAlgebra) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
            path_algebra: Parses stored path keys
        """
        self.session = session
        self.path_algebra = path_algebra

    async def find_by_id(
        self, comment_id: CommentId, post_id: PostId
    ) -> Optional[Comment]:
        """Find a comment by ID within a post."""
        stmt = (
            select(comments_table)
            .where(comments_table.c.id == comment_id)
            .where(comments_table.c.post_id == post_id)
        )
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_comment(row._asdict(), self.path_algebra) if row else None

    async def find_last_root_path(self, post_id: PostId) -> Optional[CommentPath]:
        """Find the highest depth-1 path on a post."""
        stmt = (
            select(comments_table.c.path)
            .where(comments_table.c.post_id == post_id)
            .where(comments_table.c.depth == 1)
            .order_by(comments_table.c.path.desc())
            .limit(1)
        )
        raw = (await self.session.execute(stmt)).scalar_one_or_none()
        return self.path_algebra.parse(raw) if raw is not None else None

    async def find_last_child_path(
        self,
        post_id: PostId,
        parent_path: CommentPath,
        parent_depth: int,
        bounds: SubtreeBounds,
    ) -> Optional[CommentPath]:
        """Find the highest path directly below a parent."""
        stmt = (
            select(comments_table.c.path)
            .where(comments_table.c.post_id == post_id)
            .where(comments_table.c.depth == parent_depth + 1)
            .where(_within(bounds))
            .order_by(comments_table.c.path.desc())
            .limit(1)
        )
        raw = (await self.session.execute(stmt)).scalar_one_or_none()
        return self.path_algebra.parse(raw) if raw is not None else None

    async def scan_subtree(
        self, bounds: SubtreeBounds, post_id: PostId
    ) -> List[Comment]:
        """Find every descendant inside the bounds, ascending by path."""
        stmt = (
            select(comments_table)
            .where(comments_table.c.post_id == post_id)
            .where(_within(bounds))
            .order_by(comments_table.c.path)
        )
        result = await self.session.execute(stmt)
        return [
            row_to_comment(row._asdict(), self.path_algebra)
            for row in result.fetchall()
        ]

    async def find_by_post(
        self,
        post_id: PostId,
        include_deleted: bool = False,
    ) -> List[Comment]:
        """Find all comments for a post in tree order."""
        stmt = select(comments_table).where(comments_table.c.post_id == post_id)

        if not include_deleted:
            stmt = stmt.where(comments_table.c.is_deleted.is_(False))

        # Order by path for proper tree structure
        stmt = stmt.order_by(comments_table.c.path)

        result = await self.session.execute(stmt)
        return [
            row_to_comment(row._asdict(), self.path_algebra)
            for row in result.fetchall()
        ]

    async def insert_node(self, draft: CommentDraft) -> Comment:
        """Insert a new comment and fetch the store-assigned ID.

        Raises:
            IntegrityError: On a (post_id, path) collision
        """
        stmt = (
            comments_table.insert()
            .values(**draft_to_dict(draft))
            .returning(comments_table.c.id)
        )
        result = await self.session.execute(stmt)
        comment_id = CommentId(result.scalar_one())
        await self.session.flush()
        return Comment.from_draft(draft, comment_id)

    async def conditional_increment_child_count(
        self,
        parent_id: CommentId,
        parent_path: CommentPath,
        expected: int,
    ) -> Optional[int]:
        """Increment child count only if it still equals ``expected``."""
        stmt = (
            update(comments_table)
            .where(comments_table.c.id == parent_id)
            .where(comments_table.c.path == str(parent_path))
            .where(comments_table.c.num_children == expected)
            .values(
                num_children=comments_table.c.num_children + 1,
                updated_at=datetime.now(),
            )
            .returning(comments_table.c.num_children)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_deleted(
        self, comment_id: CommentId, post_id: PostId
    ) -> Optional[Comment]:
        """Soft delete a comment."""
        stmt = (
            update(comments_table)
            .where(comments_table.c.id == comment_id)
            .where(comments_table.c.post_id == post_id)
            .values(is_deleted=True, updated_at=datetime.now())
            .returning(comments_table)
        )
        result = await self.session.execute(stmt)
        row = result.fetchone()

        if row is None:
            return None

        await self.session.flush()
        return row_to_comment(row._asdict(), self.path_algebra)

    async def count_by_post(self, post_id: PostId) -> int:
        """Count comments for a post (excluding deleted)."""
        stmt = (
            select(func.count())
            .select_from(comments_table)
            .where(comments_table.c.post_id == post_id)
            .where(comments_table.c.is_deleted.is_(False))
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Run the block inside a savepoint.

        A failed block rolls back to the savepoint, leaving the request
        transaction usable for a retry.
        """
        async with self.session.begin_nested():
            yield
