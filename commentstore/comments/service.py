"""Hierarchical comment store on top of a flat object store.

Every comment is two objects: the record holding its data and an empty link
under its parent's namespace that makes it discoverable as a reply. The
object store offers no transactions, so writes are ordered to keep one
invariant: a link is never visible while its record is missing.

- Create writes the record, then the link.
- Delete removes the link, then the record.

A crash between the two steps leaves a record nobody links to, never a link
pointing at nothing. Deleting a comment does not touch its replies; they
stay linked under the deleted ID and keep their ``parent`` field.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime

import structlog

from commentstore.objectstore import ObjectNotFoundError, ObjectStore, ObjectStoreError
from commentstore.posts import PostError, PostNotFoundError, PostStore

from .models import (
    Comment,
    comment_id_from_link,
    link_key,
    links_prefix,
    new_comment_id,
    record_key,
    utcnow,
)


logger = structlog.get_logger(__name__)

_EARLIEST = datetime.min.replace(tzinfo=UTC)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CommentError(Exception):
    """Base comment error."""

    def __init__(self, message: str, code: str = "comment_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class CommentNotFoundError(CommentError):
    """Comment not found."""

    def __init__(self, post: str, comment: str, message: str | None = None):
        self.post = post
        self.comment = comment
        super().__init__(
            message or f"comment not found: post={post} comment={comment}",
            "comment_not_found",
        )


class CommentValidationError(CommentError):
    """Structurally invalid input."""

    def __init__(self, message: str):
        super().__init__(message, "validation_error")


class CommentStorageError(CommentError):
    """Underlying object store failure, with the operation that failed."""

    def __init__(self, message: str):
        super().__init__(message, "storage_error")


class PermissionDeniedError(CommentError):
    """Permission denied for operation."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, "permission_denied")


# ==============================================================================
# Comment Store
# ==============================================================================


def _check_component(name: str, value: str) -> None:
    if "/" in value:
        msg = f"{name} must not contain '/': {value!r}"
        raise CommentValidationError(msg)


class CommentStore:
    """Creates, fetches, lists and deletes threaded comments.

    The store keeps no state of its own and takes no locks; each call is a
    sequence of blocking object store requests with no retries.
    """

    def __init__(
        self,
        object_store: ObjectStore,
        post_store: PostStore,
        bucket: str,
        prefix: str = "",
        id_func: Callable[[], str] = new_comment_id,
        time_func: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the store.

        Args:
            object_store: Durable blob storage.
            post_store: Post existence oracle.
            bucket: Bucket every object is written to.
            prefix: Optional key prefix joined before every object key.
            id_func: Comment ID allocator. Must not repeat within a post.
            time_func: Clock used to stamp ``created`` and ``modified``.
        """
        self.object_store = object_store
        self.post_store = post_store
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.id_func = id_func
        self.time_func = time_func

    def _key(self, path: str) -> str:
        if not self.prefix:
            return path
        return f"{self.prefix}/{path}"

    # ==========================================================================
    # Create
    # ==========================================================================

    def create(self, comment: Comment) -> Comment:
        """Persist a new comment and link it under its parent.

        Any ``id``, ``created`` or ``modified`` on the input is replaced.

        Raises:
            CommentValidationError: If ``post`` is empty or an identifier
                contains ``/``.
            PostNotFoundError: If the post does not exist.
            CommentNotFoundError: If ``parent`` is set but does not exist.
            CommentStorageError: If the post lookup or a write fails. When
                the link write fails the record already exists but is not
                listed as a reply; nothing is rolled back.
        """
        if not comment.post:
            msg = "comment post is required"
            raise CommentValidationError(msg)
        _check_component("post", comment.post)
        _check_component("parent", comment.parent)

        try:
            self.post_store.exists(comment.post)
        except PostNotFoundError:
            raise
        except PostError as e:
            raise CommentStorageError(f"checking post existence: {e}") from e

        if comment.parent:
            try:
                self.fetch(comment.post, comment.parent)
            except CommentNotFoundError as e:
                raise CommentNotFoundError(
                    comment.post,
                    comment.parent,
                    f"parent not found: post={comment.post} comment={comment.parent}",
                ) from e

        now = self.time_func()
        created = replace(comment, id=self.id_func(), created=now, modified=now)

        try:
            self.object_store.put_object(
                self.bucket,
                self._key(record_key(created.post, created.id)),
                created.to_record(),
            )
        except ObjectStoreError as e:
            raise CommentStorageError(f"putting comment object: {e}") from e

        try:
            self.object_store.put_object(
                self.bucket,
                self._key(link_key(created.post, created.parent, created.id)),
                b"",
            )
        except ObjectStoreError as e:
            logger.error(
                "parent_link_write_failed",
                post=created.post,
                parent=created.parent,
                comment=created.id,
                error=str(e),
            )
            raise CommentStorageError(f"putting parent link: {e}") from e

        logger.info(
            "comment_created",
            post=created.post,
            parent=created.parent,
            comment=created.id,
            author=created.author,
        )
        return created

    # ==========================================================================
    # Read
    # ==========================================================================

    def fetch(self, post: str, comment: str) -> Comment:
        """Read one comment by ID.

        Raises:
            CommentValidationError: If an identifier contains ``/``.
            CommentNotFoundError: If no record exists.
            CommentStorageError: On any other read failure or a corrupt record.
        """
        _check_component("post", post)
        _check_component("comment", comment)
        try:
            data = self.object_store.get_object(
                self.bucket, self._key(record_key(post, comment))
            )
        except ObjectNotFoundError as e:
            raise CommentNotFoundError(post, comment) from e
        except ObjectStoreError as e:
            raise CommentStorageError(f"getting comment: {e}") from e

        try:
            return Comment.from_record(data)
        except ValueError as e:
            raise CommentStorageError(
                f"decoding comment post={post} comment={comment}: {e}"
            ) from e

    def replies(self, post: str, parent: str = "") -> list[Comment]:
        """List the direct replies of ``parent``, oldest first.

        An empty ``parent`` lists top-level comments. The parent itself is
        not checked, so an unknown parent simply has no replies.

        Raises:
            CommentNotFoundError: If a link points at a missing record. The
                whole listing fails rather than hiding the dangling link.
            CommentStorageError: If listing or reading fails.
        """
        _check_component("post", post)
        _check_component("parent", parent)
        prefix = links_prefix(post, parent)
        try:
            keys = self.object_store.list_objects(self.bucket, self._key(prefix))
        except ObjectStoreError as e:
            raise CommentStorageError(
                f"listing objects with prefix '{prefix}': {e}"
            ) from e

        comments = []
        for key in keys:
            child = comment_id_from_link(key)
            try:
                comments.append(self.fetch(post, child))
            except CommentNotFoundError:
                logger.warning("dangling_link", post=post, parent=parent, comment=child)
                raise

        comments.sort(key=lambda c: c.created or _EARLIEST)
        return comments

    # ==========================================================================
    # Delete
    # ==========================================================================

    def delete(self, post: str, comment: str) -> None:
        """Unlink and delete a comment. Replies are left in place.

        Raises:
            CommentNotFoundError: If the comment does not exist, including
                when it was already deleted.
            CommentStorageError: If unlinking or deleting fails. A missing
                link is logged and tolerated.
        """
        existing = self.fetch(post, comment)

        try:
            self.object_store.delete_object(
                self.bucket, self._key(link_key(post, existing.parent, existing.id))
            )
        except ObjectNotFoundError as e:
            logger.warning(
                "parent_link_not_found",
                post=post,
                parent=existing.parent,
                comment=comment,
                error=str(e),
            )
        except ObjectStoreError as e:
            raise CommentStorageError(f"deleting parent link: {e}") from e

        try:
            self.object_store.delete_object(
                self.bucket, self._key(record_key(post, comment))
            )
        except ObjectNotFoundError as e:
            raise CommentNotFoundError(post, comment) from e
        except ObjectStoreError as e:
            raise CommentStorageError(f"deleting comment: {e}") from e

        logger.info(
            "comment_deleted", post=post, parent=existing.parent, comment=comment
        )
