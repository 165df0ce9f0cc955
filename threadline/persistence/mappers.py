"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict

from threadline.domain.model import Comment, CommentDraft
from threadline.domain.service import PathAlgebra
from threadline.domain.value import CommentId, PostId, UserId


def row_to_comment(row: Dict[str, Any], path_algebra: PathAlgebra) -> Comment:
    """Convert database row to Comment domain model.

    Args:
        row: Database row as dict
        path_algebra: Parses and validates the stored path key

    Returns:
        Comment domain model

    Raises:
        MalformedSegmentError: If the stored path cannot be decoded
    """
    return Comment(
        id=CommentId(row["id"]),
        post_id=PostId(row["post_id"]),
        author_id=UserId(row["author_id"]),
        path=path_algebra.parse(row["path"]),
        depth=row["depth"],
        num_children=row["num_children"],
        message=row["message"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        is_deleted=row["is_deleted"],
    )


def draft_to_dict(draft: CommentDraft) -> Dict[str, Any]:
    """Convert CommentDraft domain model to database dict.

    Args:
        draft: Comment draft

    Returns:
        Dict suitable for database insertion
    """
    data = draft.model_dump(exclude={"path"})
    data["path"] = str(draft.path)
    return data
