"""Unit tests for CommentTreeService."""

import asyncio

import pytest

from threadline.domain.error import (
    ConcurrentModificationError,
    InconsistentStateError,
    MalformedSegmentError,
    NotFoundError,
    PathOverflowError,
    ValidationError,
)
from threadline.domain.model import CommentDraft
from threadline.domain.repository import CommentTreeRepository
from threadline.domain.service import CommentTreeService, PathAlgebra, SegmentCodec
from threadline.domain.value import (
    CommentId,
    CommentPath,
    PostId,
    Segment,
    TreeShape,
    UserId,
)
from threadline.persistence.repository.inmemory import InMemoryCommentTreeRepository
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked, no docker needed
unit_env = create_env_fixture()

POST = PostId(1)
OTHER_POST = PostId(2)
AUTHOR = UserId(10)


def make_service(
    repository: CommentTreeRepository,
    shape: TreeShape | None = None,
    max_write_attempts: int = 3,
) -> CommentTreeService:
    """Build a service over a given repository, bypassing the container."""
    algebra = PathAlgebra(SegmentCodec(shape or TreeShape()))
    return CommentTreeService(repository, algebra, max_write_attempts)


class TestCreateRootComment:
    """Tests for create_root_comment."""

    @pytest.mark.asyncio
    async def test_first_root_on_empty_post(self, unit_env):
        service = await unit_env.get(CommentTreeService)

        comment = await service.create_root_comment(POST, AUTHOR, "First!")

        assert str(comment.path) == "0001"
        assert comment.depth == 1
        assert comment.num_children == 0
        assert comment.is_root
        assert not comment.is_deleted
        assert comment.created_at == comment.updated_at

    @pytest.mark.asyncio
    async def test_sequential_roots(self, unit_env):
        service = await unit_env.get(CommentTreeService)

        paths = [
            str((await service.create_root_comment(POST, AUTHOR, f"c{i}")).path)
            for i in range(3)
        ]

        assert paths == ["0001", "0002", "0003"]

    @pytest.mark.asyncio
    async def test_roots_are_allocated_per_post(self, unit_env):
        service = await unit_env.get(CommentTreeService)

        await service.create_root_comment(POST, AUTHOR, "on post 1")
        await service.create_root_comment(POST, AUTHOR, "again on post 1")
        other = await service.create_root_comment(OTHER_POST, AUTHOR, "on post 2")

        assert str(other.path) == "0001"

    @pytest.mark.asyncio
    async def test_message_is_trimmed(self, unit_env):
        service = await unit_env.get(CommentTreeService)

        comment = await service.create_root_comment(POST, AUTHOR, "  hello  \n")

        assert comment.message == "hello"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", ["", "   ", "\n\t"])
    async def test_blank_message_rejected(self, unit_env, message):
        service = await unit_env.get(CommentTreeService)
        repository = await unit_env.get(CommentTreeRepository)

        with pytest.raises(ValidationError):
            await service.create_root_comment(POST, AUTHOR, message)

        assert await repository.count_by_post(POST) == 0

    @pytest.mark.asyncio
    async def test_missing_ids_rejected(self, unit_env):
        service = await unit_env.get(CommentTreeService)

        with pytest.raises(ValidationError):
            await service.create_root_comment(PostId(0), AUTHOR, "hi")
        with pytest.raises(ValidationError):
            await service.create_root_comment(POST, UserId(0), "hi")

    @pytest.mark.asyncio
    async def test_root_level_overflow(self):
        """A binary alphabet with width 1 leaves room for a single root."""
        service = make_service(
            InMemoryCommentTreeRepository(),
            shape=TreeShape(alphabet="01", segment_width=1),
        )

        first = await service.create_root_comment(POST, AUTHOR, "only one fits")

        assert str(first.path) == "1"
        with pytest.raises(PathOverflowError):
            await service.create_root_comment(POST, AUTHOR, "no room")

    @pytest.mark.asyncio
    async def test_path_collision_retried_until_exhausted(self):
        """A stale root lookup collides on insert and surfaces as a conflict."""

        class StaleRootRepository(InMemoryCommentTreeRepository):
            lookups = 0

            async def find_last_root_path(self, post_id):
                self.lookups += 1
                return None

        repository = StaleRootRepository()
        service = make_service(repository, max_write_attempts=3)
        await service.create_root_comment(POST, AUTHOR, "takes 0001")

        with pytest.raises(ConcurrentModificationError):
            await service.create_root_comment(POST, AUTHOR, "collides")

        assert repository.lookups == 1 + 3
        assert await repository.count_by_post(POST) == 1

    @pytest.mark.asyncio
    async def test_malformed_stored_path_is_not_retried(self):
        repository = InMemoryCommentTreeRepository()
        service = make_service(repository)
        corrupt = CommentPath(segments=(Segment("00a1"),))
        await repository.insert_node(
            CommentDraft(
                post_id=POST, author_id=AUTHOR, path=corrupt, depth=1, message="x"
            )
        )

        with pytest.raises(MalformedSegmentError):
            await service.create_root_comment(POST, AUTHOR, "after corruption")


class TestCreateReply:
    """Tests for create_reply."""

    @pytest.mark.asyncio
    async def test_first_reply(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        repository = await unit_env.get(CommentTreeRepository)
        parent = await service.create_root_comment(POST, AUTHOR, "parent")

        reply = await service.create_reply(parent.id, POST, AUTHOR, "reply")

        assert str(reply.path) == "00010001"
        assert reply.depth == 2
        assert not reply.is_root
        stored_parent = await repository.find_by_id(parent.id, POST)
        assert stored_parent.num_children == 1

    @pytest.mark.asyncio
    async def test_sibling_reply(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        repository = await unit_env.get(CommentTreeRepository)
        parent = await service.create_root_comment(POST, AUTHOR, "parent")
        await service.create_reply(parent.id, POST, AUTHOR, "first")

        second = await service.create_reply(parent.id, POST, AUTHOR, "second")

        assert str(second.path) == "00010002"
        assert second.depth == 2
        stored_parent = await repository.find_by_id(parent.id, POST)
        assert stored_parent.num_children == 2

    @pytest.mark.asyncio
    async def test_next_sibling_ignores_grandchildren(self, unit_env):
        """Deeper descendants never count as the last direct child."""
        service = await unit_env.get(CommentTreeService)
        parent = await service.create_root_comment(POST, AUTHOR, "parent")
        child = await service.create_reply(parent.id, POST, AUTHOR, "child")
        await service.create_reply(child.id, POST, AUTHOR, "grandchild")

        second = await service.create_reply(parent.id, POST, AUTHOR, "second child")

        assert str(second.path) == "00010002"

    @pytest.mark.asyncio
    async def test_deep_reply_chain(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        node = await service.create_root_comment(POST, AUTHOR, "level 1")

        for _ in range(4):
            node = await service.create_reply(node.id, POST, AUTHOR, "deeper")

        assert node.depth == 5
        assert str(node.path) == "0001" * 5

    @pytest.mark.asyncio
    async def test_reply_to_missing_parent(self, unit_env):
        service = await unit_env.get(CommentTreeService)

        with pytest.raises(NotFoundError):
            await service.create_reply(CommentId(999), POST, AUTHOR, "orphan")

    @pytest.mark.asyncio
    async def test_reply_to_parent_on_other_post(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        parent = await service.create_root_comment(POST, AUTHOR, "parent")

        with pytest.raises(NotFoundError):
            await service.create_reply(parent.id, OTHER_POST, AUTHOR, "wrong post")

    @pytest.mark.asyncio
    async def test_blank_reply_rejected(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        repository = await unit_env.get(CommentTreeRepository)
        parent = await service.create_root_comment(POST, AUTHOR, "parent")

        with pytest.raises(ValidationError):
            await service.create_reply(parent.id, POST, AUTHOR, "  ")

        stored_parent = await repository.find_by_id(parent.id, POST)
        assert stored_parent.num_children == 0

    @pytest.mark.asyncio
    async def test_child_level_overflow_leaves_parent_untouched(self):
        repository = InMemoryCommentTreeRepository()
        service = make_service(
            repository, shape=TreeShape(alphabet="01", segment_width=1)
        )
        parent = await service.create_root_comment(POST, AUTHOR, "parent")
        await service.create_reply(parent.id, POST, AUTHOR, "only child")

        with pytest.raises(PathOverflowError):
            await service.create_reply(parent.id, POST, AUTHOR, "no room")

        stored_parent = await repository.find_by_id(parent.id, POST)
        assert stored_parent.num_children == 1

    @pytest.mark.asyncio
    async def test_counter_without_children_is_inconsistent(self):
        repository = InMemoryCommentTreeRepository()
        service = make_service(repository)
        parent = await service.create_root_comment(POST, AUTHOR, "parent")
        # Bump the counter without storing a reply
        await repository.conditional_increment_child_count(parent.id, parent.path, 0)

        with pytest.raises(InconsistentStateError):
            await service.create_reply(parent.id, POST, AUTHOR, "reply")


class TestConcurrentReplies:
    """Optimistic concurrency on the parent's child counter."""

    @pytest.mark.asyncio
    async def test_concurrent_replies_one_conflict_then_both_succeed(self):
        """Two writers read the same child count; one loses and retries."""

        class InterleavingRepository(InMemoryCommentTreeRepository):
            def __init__(self):
                super().__init__()
                self.reads = 0
                self.both_read = asyncio.Event()
                self.lost_updates = 0

            async def find_by_id(self, comment_id, post_id):
                comment = await super().find_by_id(comment_id, post_id)
                self.reads += 1
                if self.reads >= 2:
                    self.both_read.set()
                # Hold the first reader until the second has read too
                if self.reads <= 2:
                    await self.both_read.wait()
                return comment

            async def conditional_increment_child_count(
                self, parent_id, parent_path, expected
            ):
                count = await super().conditional_increment_child_count(
                    parent_id, parent_path, expected
                )
                if count is None:
                    self.lost_updates += 1
                return count

        repository = InterleavingRepository()
        service = make_service(repository)
        parent = await service.create_root_comment(POST, AUTHOR, "parent")

        first, second = await asyncio.gather(
            service.create_reply(parent.id, POST, AUTHOR, "writer a"),
            service.create_reply(parent.id, POST, AUTHOR, "writer b"),
        )

        assert repository.lost_updates == 1
        assert sorted([str(first.path), str(second.path)]) == [
            "00010001",
            "00010002",
        ]
        stored_parent = await repository.find_by_id(parent.id, POST)
        assert stored_parent.num_children == 2

    @pytest.mark.asyncio
    async def test_lost_counter_race_surfaces_after_max_attempts(self):
        class AlwaysStaleRepository(InMemoryCommentTreeRepository):
            attempts = 0

            async def conditional_increment_child_count(
                self, parent_id, parent_path, expected
            ):
                self.attempts += 1
                return None

        repository = AlwaysStaleRepository()
        service = make_service(repository, max_write_attempts=2)
        parent = await service.create_root_comment(POST, AUTHOR, "parent")

        with pytest.raises(ConcurrentModificationError):
            await service.create_reply(parent.id, POST, AUTHOR, "never lands")

        assert repository.attempts == 2
        assert await repository.count_by_post(POST) == 1

    @pytest.mark.asyncio
    async def test_failed_insert_rolls_back_counter(self):
        """Counter bump and insert are atomic: a colliding insert undoes both."""

        class StaleChildRepository(InMemoryCommentTreeRepository):
            async def find_last_child_path(
                self, post_id, parent_path, parent_depth, bounds
            ):
                # Always report the first child, so the next path collides
                return parent_path.child(Segment("0001"))

        repository = StaleChildRepository()
        service = make_service(repository, max_write_attempts=1)
        parent = await service.create_root_comment(POST, AUTHOR, "parent")
        await service.create_reply(parent.id, POST, AUTHOR, "0001")
        await service.create_reply(parent.id, POST, AUTHOR, "0002")

        with pytest.raises(ConcurrentModificationError):
            await service.create_reply(parent.id, POST, AUTHOR, "collides")

        stored_parent = await repository.find_by_id(parent.id, POST)
        assert stored_parent.num_children == 2
        assert await repository.count_by_post(POST) == 3

    @pytest.mark.asyncio
    async def test_collision_recovers_on_retry(self):
        class OnceStaleChildRepository(InMemoryCommentTreeRepository):
            stale = False

            async def find_last_child_path(
                self, post_id, parent_path, parent_depth, bounds
            ):
                if self.stale:
                    self.stale = False
                    return parent_path.child(Segment("0001"))
                return await super().find_last_child_path(
                    post_id, parent_path, parent_depth, bounds
                )

        repository = OnceStaleChildRepository()
        service = make_service(repository)
        parent = await service.create_root_comment(POST, AUTHOR, "parent")
        await service.create_reply(parent.id, POST, AUTHOR, "0001")
        await service.create_reply(parent.id, POST, AUTHOR, "0002")
        repository.stale = True

        third = await service.create_reply(parent.id, POST, AUTHOR, "third")

        assert str(third.path) == "00010003"
        stored_parent = await repository.find_by_id(parent.id, POST)
        assert stored_parent.num_children == 3

    def test_max_write_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            make_service(InMemoryCommentTreeRepository(), max_write_attempts=0)


class TestFetchCommentWithReplies:
    """Tests for fetch_comment_with_replies."""

    @pytest.mark.asyncio
    async def test_subtree_scan_scope(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        root = await service.create_root_comment(POST, AUTHOR, "root")
        child_a = await service.create_reply(root.id, POST, AUTHOR, "a")
        await service.create_reply(root.id, POST, AUTHOR, "b")
        await service.create_reply(child_a.id, POST, AUTHOR, "a.1")
        await service.create_root_comment(POST, AUTHOR, "unrelated root")

        comments = await service.fetch_comment_with_replies(
            root.id, POST, include_replies=True
        )

        assert [str(c.path) for c in comments] == [
            "0001",
            "00010001",
            "000100010001",
            "00010002",
        ]

    @pytest.mark.asyncio
    async def test_without_replies_returns_only_the_comment(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        root = await service.create_root_comment(POST, AUTHOR, "root")
        await service.create_reply(root.id, POST, AUTHOR, "reply")

        comments = await service.fetch_comment_with_replies(root.id, POST)

        assert [c.id for c in comments] == [root.id]

    @pytest.mark.asyncio
    async def test_leaf_with_replies_requested(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        root = await service.create_root_comment(POST, AUTHOR, "root")

        comments = await service.fetch_comment_with_replies(
            root.id, POST, include_replies=True
        )

        assert len(comments) == 1

    @pytest.mark.asyncio
    async def test_subtree_excludes_other_posts(self, unit_env):
        """Posts share path keys; scans are always scoped to one post."""
        service = await unit_env.get(CommentTreeService)
        root = await service.create_root_comment(POST, AUTHOR, "root")
        await service.create_reply(root.id, POST, AUTHOR, "reply")
        other_root = await service.create_root_comment(OTHER_POST, AUTHOR, "root")
        await service.create_reply(other_root.id, OTHER_POST, AUTHOR, "reply")

        comments = await service.fetch_comment_with_replies(
            root.id, POST, include_replies=True
        )

        assert len(comments) == 2
        assert all(c.post_id == POST for c in comments)

    @pytest.mark.asyncio
    async def test_missing_comment(self, unit_env):
        service = await unit_env.get(CommentTreeService)

        with pytest.raises(NotFoundError):
            await service.fetch_comment_with_replies(CommentId(42), POST)


class TestDeleteComment:
    """Tests for delete_comment."""

    @pytest.mark.asyncio
    async def test_soft_delete_keeps_tree_position(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        root = await service.create_root_comment(POST, AUTHOR, "root")
        child = await service.create_reply(root.id, POST, AUTHOR, "child")
        await service.create_reply(child.id, POST, AUTHOR, "grandchild")
        child = (await service.fetch_comment_with_replies(child.id, POST))[0]

        deleted = await service.delete_comment(child.id, POST)

        assert deleted.is_deleted
        assert deleted.path == child.path
        assert deleted.depth == child.depth
        assert deleted.num_children == child.num_children == 1

    @pytest.mark.asyncio
    async def test_deleted_comment_reachable_from_ancestor(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        root = await service.create_root_comment(POST, AUTHOR, "root")
        child = await service.create_reply(root.id, POST, AUTHOR, "child")
        grandchild = await service.create_reply(child.id, POST, AUTHOR, "grandchild")

        await service.delete_comment(child.id, POST)
        subtree = await service.fetch_comment_with_replies(
            root.id, POST, include_replies=True
        )

        by_id = {c.id: c for c in subtree}
        assert by_id[child.id].is_deleted
        # No cascade
        assert not by_id[grandchild.id].is_deleted

    @pytest.mark.asyncio
    async def test_delete_missing_comment(self, unit_env):
        service = await unit_env.get(CommentTreeService)

        with pytest.raises(NotFoundError):
            await service.delete_comment(CommentId(7), POST)

    @pytest.mark.asyncio
    async def test_reply_to_deleted_comment_still_allocates(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        root = await service.create_root_comment(POST, AUTHOR, "root")
        await service.delete_comment(root.id, POST)

        reply = await service.create_reply(root.id, POST, AUTHOR, "late reply")

        assert str(reply.path) == "00010001"


class TestListAndCount:
    """Tests for get_comments_for_post and count_comments."""

    @pytest.mark.asyncio
    async def test_forest_in_pre_order(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        first = await service.create_root_comment(POST, AUTHOR, "first")
        second = await service.create_root_comment(POST, AUTHOR, "second")
        await service.create_reply(second.id, POST, AUTHOR, "second.1")
        first_child = await service.create_reply(first.id, POST, AUTHOR, "first.1")
        await service.create_reply(first_child.id, POST, AUTHOR, "first.1.1")

        comments = await service.get_comments_for_post(POST)

        assert [c.message for c in comments] == [
            "first",
            "first.1",
            "first.1.1",
            "second",
            "second.1",
        ]

    @pytest.mark.asyncio
    async def test_deleted_comments_hidden_by_default(self, unit_env):
        service = await unit_env.get(CommentTreeService)
        keep = await service.create_root_comment(POST, AUTHOR, "keep")
        drop = await service.create_root_comment(POST, AUTHOR, "drop")
        await service.delete_comment(drop.id, POST)

        live = await service.get_comments_for_post(POST)
        everything = await service.get_comments_for_post(POST, include_deleted=True)

        assert [c.id for c in live] == [keep.id]
        assert [c.id for c in everything] == [keep.id, drop.id]
        assert await service.count_comments(POST) == 1
