"""Fixed-width segment codec.

Maps a sibling index to a base-N token padded to the segment width, and
back. With the default shape (digits then uppercase letters, width 4)
index 1 is '0001' and the largest index, 36**4 - 1, is 'ZZZZ'.
"""

from threadline.domain.error import MalformedSegmentError, PathOverflowError
from threadline.domain.value import Segment, TreeShape

from .base import Service


class SegmentCodec(Service):
    """Encode and decode sibling indexes for one tree shape."""

    def __init__(self, shape: TreeShape) -> None:
        """Initialize segment codec.

        Args:
            shape: Alphabet and segment width
        """
        self.shape = shape
        self._digits = {char: value for value, char in enumerate(shape.alphabet)}

    @property
    def min_segment(self) -> Segment:
        return Segment(self.shape.alphabet[0] * self.shape.segment_width)

    @property
    def max_segment(self) -> Segment:
        return Segment(self.shape.alphabet[-1] * self.shape.segment_width)

    def encode(self, index: int) -> Segment:
        """Encode a sibling index.

        Args:
            index: Non-negative sibling index

        Returns:
            Segment of exactly ``segment_width`` characters

        Raises:
            ValueError: If index is negative
            PathOverflowError: If index >= capacity
        """
        if index < 0:
            raise ValueError(f"Sibling index must be non-negative, got {index}")
        if index >= self.shape.capacity:
            raise PathOverflowError(index, self.shape.capacity)

        alphabet = self.shape.alphabet
        chars = []
        remaining = index
        for _ in range(self.shape.segment_width):
            remaining, digit = divmod(remaining, self.shape.base)
            chars.append(alphabet[digit])
        return Segment("".join(reversed(chars)))

    def decode(self, segment: Segment | str) -> int:
        """Decode a segment back to its sibling index.

        Args:
            segment: Segment (or raw token) to decode

        Returns:
            The sibling index

        Raises:
            MalformedSegmentError: If the width is wrong or a character is
                outside the alphabet
        """
        raw = segment.root if isinstance(segment, Segment) else segment
        if len(raw) != self.shape.segment_width:
            raise MalformedSegmentError(
                raw,
                f"expected {self.shape.segment_width} characters, got {len(raw)}",
            )

        value = 0
        for char in raw:
            digit = self._digits.get(char)
            if digit is None:
                raise MalformedSegmentError(raw, f"{char!r} is not in the alphabet")
            value = value * self.shape.base + digit
        return value
