"""Value objects describing positions in a comment tree.

A comment's position is a materialized path: one fixed-width segment per
tree level, from the root comment of a post down to the comment itself.
Because every segment has the same width and the alphabet sorts in numeric
order, comparing the joined strings orders comments in pre-order.
"""

import string

from pydantic import Field, field_validator

from threadline.domain.error import MalformedSegmentError
from threadline.domain.value.common import RootValueObject, ValueObject

DEFAULT_ALPHABET = string.digits + string.ascii_uppercase
DEFAULT_SEGMENT_WIDTH = 4


class TreeShape(ValueObject):
    """Alphabet and segment width shared by every path of one tree.

    The alphabet must be strictly ascending so that string comparison of
    segments agrees with comparison of the sibling indexes they encode.
    """

    alphabet: str = DEFAULT_ALPHABET
    segment_width: int = Field(default=DEFAULT_SEGMENT_WIDTH, ge=1)

    @field_validator("alphabet")
    @classmethod
    def validate_alphabet(cls, v: str) -> str:
        """Validate alphabet size and ordering."""
        if len(v) < 2:
            raise ValueError("Alphabet must contain at least 2 characters")
        if any(a >= b for a, b in zip(v, v[1:])):
            raise ValueError(
                "Alphabet must be strictly ascending with no repeated characters"
            )
        return v

    @property
    def base(self) -> int:
        return len(self.alphabet)

    @property
    def capacity(self) -> int:
        """Number of distinct segments (largest index is capacity - 1)."""
        return self.base**self.segment_width


class Segment(RootValueObject[str]):
    """One encoded sibling index, e.g. '0001'."""

    @field_validator("root")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Segment must not be empty")
        return v


class CommentPath(ValueObject):
    """Ordered sequence of segments from a root comment to a node.

    The empty path is the (virtual) parent of all root comments.
    """

    segments: tuple[Segment, ...] = ()

    @classmethod
    def parse(cls, raw: str, segment_width: int) -> "CommentPath":
        """Split a stored path key into fixed-width segments.

        Only the length is checked here; character validity is the codec's
        job (see PathAlgebra.parse).

        Raises:
            MalformedSegmentError: If the key length is not a positive
                multiple of the segment width
        """
        if not raw or len(raw) % segment_width:
            raise MalformedSegmentError(
                raw, f"length {len(raw)} is not a multiple of {segment_width}"
            )
        return cls(
            segments=tuple(
                Segment(raw[i : i + segment_width])
                for i in range(0, len(raw), segment_width)
            )
        )

    @property
    def depth(self) -> int:
        return len(self.segments)

    @property
    def is_empty(self) -> bool:
        return not self.segments

    @property
    def last(self) -> Segment:
        if not self.segments:
            raise ValueError("Empty path has no last segment")
        return self.segments[-1]

    @property
    def prefix(self) -> "CommentPath":
        """Path with the final segment removed."""
        return CommentPath(segments=self.segments[:-1])

    def child(self, segment: Segment) -> "CommentPath":
        return CommentPath(segments=(*self.segments, segment))

    def __str__(self) -> str:
        return "".join(segment.root for segment in self.segments)


class SubtreeBounds(ValueObject):
    """Inclusive key range holding every descendant of ``prefix``.

    ``lower`` is the prefix followed by the smallest segment and ``upper``
    the prefix followed by the largest one. Descendants of the child whose
    segment is the largest sort after ``upper`` (they extend it), so
    ``contains`` also accepts keys that strictly extend ``upper``.
    """

    prefix: str
    lower: str
    upper: str

    def contains(self, raw: str) -> bool:
        if self.lower <= raw <= self.upper:
            return True
        return raw.startswith(self.upper) and len(raw) > len(self.upper)
