"""Post existence lookups."""

from commentstore.posts.dependencies import build_post_store
from commentstore.posts.service import (
    HTTPPostStore,
    PostError,
    PostNotFoundError,
    PostStore,
    StaticPostStore,
)


__all__ = [
    "HTTPPostStore",
    "PostError",
    "PostNotFoundError",
    "PostStore",
    "StaticPostStore",
    "build_post_store",
]
