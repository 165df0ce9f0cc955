"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Caller-supplied content is invalid (empty message, missing id)."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class PathOverflowError(DomainError, OverflowError):
    """Raised when a sibling index does not fit in one segment.

    Capacity is exhausted for that level, so retrying cannot help.
    """

    def __init__(self, index: int, capacity: int):
        self.index = index
        self.capacity = capacity
        super().__init__(
            f"Sibling index {index} exceeds segment capacity ({capacity - 1} max)"
        )


class MalformedSegmentError(DomainError):
    """Raised when a stored path cannot be decoded.

    Indicates corrupted data upstream; never retried.
    """

    def __init__(self, value: str, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Malformed path segment {value!r}: {reason}")


class ConcurrentModificationError(DomainError):
    """Raised when an optimistic child-count update or a path insert loses a race."""

    pass


class InconsistentStateError(DomainError):
    """Raised when a parent's child count disagrees with the stored tree."""

    pass
