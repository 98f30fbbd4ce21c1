"""Construction of the configured post store."""

from commentstore.config.settings import Settings

from .service import HTTPPostStore, PostStore, StaticPostStore


def build_post_store(settings: Settings) -> PostStore:
    """Build the post store selected by ``settings.posts_backend``.

    Raises:
        ValueError: If the HTTP backend is selected without a base URL.
    """
    if settings.posts_backend == "http":
        if not settings.posts_base_url:
            msg = "posts_base_url is required when posts_backend is 'http'"
            raise ValueError(msg)
        return HTTPPostStore(
            settings.posts_base_url, timeout=settings.posts_timeout_seconds
        )
    return StaticPostStore(settings.posts_known)
