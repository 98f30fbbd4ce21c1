"""Post existence oracle.

Comments may only be attached to posts that exist. The blog that owns the
posts is the authority; this module asks it, or a fixed list of post IDs
when no blog is reachable (development and tests).
"""

from collections.abc import Iterable
from typing import Protocol
from urllib.parse import quote

import httpx
import structlog


logger = structlog.get_logger(__name__)


class PostError(Exception):
    """Base post lookup error."""

    def __init__(self, message: str, code: str = "post_error") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class PostNotFoundError(PostError):
    """The referenced post does not exist."""

    def __init__(self, post: str) -> None:
        self.post = post
        super().__init__(f"post not found: {post}", "post_not_found")


class PostStore(Protocol):
    """Answers whether a post exists."""

    def exists(self, post: str) -> None:
        """Return normally if ``post`` exists, else raise ``PostNotFoundError``."""
        ...


class StaticPostStore:
    """Post store backed by a fixed set of post IDs."""

    def __init__(self, posts: Iterable[str] = ()) -> None:
        self.posts = set(posts)

    def add(self, post: str) -> None:
        self.posts.add(post)

    def exists(self, post: str) -> None:
        if post not in self.posts:
            raise PostNotFoundError(post)


class HTTPPostStore:
    """Checks post existence with a HEAD request against the blog.

    ``{base_url}/{post}`` answering 404 means the post does not exist; any
    other non-success status or transport failure is a lookup error, not a
    verdict about the post.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def exists(self, post: str) -> None:
        url = f"{self.base_url}/{quote(post, safe='')}"
        try:
            response = self._client.head(url)
        except httpx.TimeoutException as e:
            logger.error("post_lookup_timeout", post=post, url=url, error=str(e))
            raise PostError(
                f"post lookup timed out: {post}", "post_lookup_failed"
            ) from e
        except httpx.RequestError as e:
            logger.error("post_lookup_request_error", post=post, url=url, error=str(e))
            raise PostError(
                f"post lookup request error: {e}", "post_lookup_failed"
            ) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            raise PostNotFoundError(post)
        if not response.is_success:
            logger.error(
                "post_lookup_failed",
                post=post,
                url=url,
                status_code=response.status_code,
            )
            raise PostError(
                f"post lookup failed with status {response.status_code}",
                "post_lookup_failed",
            )

    def close(self) -> None:
        self._client.close()
