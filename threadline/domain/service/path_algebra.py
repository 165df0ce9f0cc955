"""Path algebra over fixed-width segments."""

from threadline.domain.value import CommentPath, SubtreeBounds

from .base import Service
from .segment_codec import SegmentCodec


class PathAlgebra(Service):
    """Derive new paths and range bounds from existing ones."""

    def __init__(self, codec: SegmentCodec) -> None:
        """Initialize path algebra.

        Args:
            codec: Segment codec for the tree shape
        """
        self.codec = codec

    @property
    def segment_width(self) -> int:
        return self.codec.shape.segment_width

    def parse(self, raw: str) -> CommentPath:
        """Parse a stored path key, validating every segment.

        Raises:
            MalformedSegmentError: If the key cannot be decoded
        """
        path = CommentPath.parse(raw, self.segment_width)
        for segment in path.segments:
            self.codec.decode(segment)
        return path

    def root_path(self, index: int = 1) -> CommentPath:
        """Path of the root comment with the given sibling index."""
        return CommentPath().child(self.codec.encode(index))

    def first_child_path(self, parent: CommentPath) -> CommentPath:
        """Path of the first reply to a comment with no replies yet."""
        return parent.child(self.codec.encode(1))

    def next_sibling_path(self, path: CommentPath) -> CommentPath:
        """Path right after ``path`` among its siblings.

        Raises:
            ValueError: If path is empty
            PathOverflowError: If the level has no index left
            MalformedSegmentError: If the last segment cannot be decoded
        """
        if path.is_empty:
            raise ValueError("Empty path has no siblings")
        index = self.codec.decode(path.last)
        return path.prefix.child(self.codec.encode(index + 1))

    def parent_prefix(self, path: CommentPath) -> CommentPath:
        """Path of the parent comment (empty for root comments)."""
        return path.prefix

    def subtree_bounds(self, path: CommentPath) -> SubtreeBounds:
        """Inclusive key range covering every descendant of ``path``.

        The node itself and its siblings fall outside the range.
        """
        prefix = str(path)
        return SubtreeBounds(
            prefix=prefix,
            lower=prefix + self.codec.min_segment.root,
            upper=prefix + self.codec.max_segment.root,
        )
