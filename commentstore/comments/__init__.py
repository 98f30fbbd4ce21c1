"""Threaded comment storage.

Provides:
- The Comment entity and its stored record format
- CommentStore: create/fetch/replies/delete over a flat object store

Note: Router is not exported here to avoid circular imports.
Import directly from commentstore.comments.router when needed.
"""

from .models import TOPLEVEL, Comment, new_comment_id
from .service import (
    CommentError,
    CommentNotFoundError,
    CommentStorageError,
    CommentStore,
    CommentValidationError,
    PermissionDeniedError,
)


__all__ = [
    "TOPLEVEL",
    "Comment",
    "CommentError",
    "CommentNotFoundError",
    "CommentStorageError",
    "CommentStore",
    "CommentValidationError",
    "PermissionDeniedError",
    "new_comment_id",
]
