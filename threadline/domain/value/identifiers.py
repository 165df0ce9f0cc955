"""Strongly typed identifiers for threadline domain entities.

Comment ids are assigned by the store (serial column), so all identifiers
are plain integers wrapped in NewType to keep them from being mixed up.
"""

from typing import NewType

CommentId = NewType("CommentId", int)
PostId = NewType("PostId", int)
UserId = NewType("UserId", int)
