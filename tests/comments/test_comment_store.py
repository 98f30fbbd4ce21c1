"""Tests for the hierarchical comment store.

Covers:
- create: ID allocation, timestamps, post and parent gating, write ordering
- fetch: not-found translation and storage failures
- replies: chronological order, empty namespaces, dangling links
- delete: link-before-record ordering, orphaned replies, repeat deletes
"""

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from commentstore.comments.models import Comment, link_key, record_key
from commentstore.comments.service import (
    CommentNotFoundError,
    CommentStorageError,
    CommentStore,
    CommentValidationError,
)
from commentstore.objectstore import InMemoryObjectStore, ObjectStoreError
from commentstore.posts import PostError, PostNotFoundError, StaticPostStore


BUCKET = "comments"
POST = "hello-world"


class FlakyObjectStore(InMemoryObjectStore):
    """In-memory store whose operations can be made to fail per key."""

    def __init__(self) -> None:
        super().__init__()
        self.failing: dict[str, Callable[[str], bool]] = {}

    def fail(self, operation: str, predicate: Callable[[str], bool]) -> None:
        self.failing[operation] = predicate

    def _check(self, operation: str, key: str) -> None:
        predicate = self.failing.get(operation)
        if predicate is not None and predicate(key):
            msg = f"{operation} failed for {key}"
            raise ObjectStoreError(msg)

    def put_object(self, bucket: str, key: str, data: bytes) -> None:
        self._check("put", key)
        super().put_object(bucket, key, data)

    def get_object(self, bucket: str, key: str) -> bytes:
        self._check("get", key)
        return super().get_object(bucket, key)

    def list_objects(self, bucket: str, prefix: str) -> list[str]:
        self._check("list", prefix)
        return super().list_objects(bucket, prefix)

    def delete_object(self, bucket: str, key: str) -> None:
        self._check("delete", key)
        super().delete_object(bucket, key)


class FailingPostStore:
    def exists(self, post: str) -> None:
        raise PostError("post service unavailable", "post_lookup_failed")


def is_link(key: str) -> bool:
    return not key.endswith("/__comment__")


def is_record(key: str) -> bool:
    return key.endswith("/__comment__")


@pytest.fixture
def flaky_store() -> FlakyObjectStore:
    return FlakyObjectStore()


@pytest.fixture
def flaky_comment_store(
    flaky_store: FlakyObjectStore, post_store: StaticPostStore, clock
) -> CommentStore:
    ids = iter(f"f{i}" for i in range(1, 100))
    return CommentStore(
        object_store=flaky_store,
        post_store=post_store,
        bucket=BUCKET,
        id_func=lambda: next(ids),
        time_func=clock,
    )


def new_comment(parent: str = "", body: str = "hello, world") -> Comment:
    return Comment(post=POST, author="adam", body=body, parent=parent)


class TestCreate:
    """Tests for CommentStore.create."""

    def test_create_then_fetch_round_trips(self, comment_store: CommentStore):
        """Fetch returns exactly what create returned."""
        created = comment_store.create(new_comment())

        assert comment_store.fetch(POST, created.id) == created

    def test_create_allocates_id_and_stamps_times(self, comment_store: CommentStore):
        """Caller-supplied id and timestamps are replaced."""
        supplied = new_comment()
        supplied.id = "chosen-by-caller"
        supplied.created = datetime(1999, 1, 1, tzinfo=UTC)

        created = comment_store.create(supplied)

        assert created.id == "c1"
        assert created.created == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        assert created.modified == created.created
        assert created.author == "adam"
        assert created.body == "hello, world"
        assert supplied.id == "chosen-by-caller"

    def test_create_writes_record_and_toplevel_link(
        self, comment_store: CommentStore, object_store: InMemoryObjectStore
    ):
        """A top-level comment is linked under the sentinel parent."""
        comment_store.create(new_comment())

        assert object_store.keys(BUCKET) == [
            "posts/hello-world/comments/__toplevel__/comments/c1",
            "posts/hello-world/comments/c1/__comment__",
        ]
        assert object_store.get_object(BUCKET, link_key(POST, "", "c1")) == b""

    def test_create_reply_links_under_parent(
        self, comment_store: CommentStore, object_store: InMemoryObjectStore
    ):
        """A reply is linked under its parent's namespace."""
        parent = comment_store.create(new_comment())
        reply = comment_store.create(new_comment(parent=parent.id))

        assert reply.parent == parent.id
        assert f"posts/hello-world/comments/{parent.id}/comments/{reply.id}" in (
            object_store.keys(BUCKET)
        )

    def test_create_with_missing_parent_fails(
        self, comment_store: CommentStore, object_store: InMemoryObjectStore
    ):
        """A non-empty parent must exist on the same post."""
        with pytest.raises(CommentNotFoundError) as exc_info:
            comment_store.create(new_comment(parent="nope"))

        assert exc_info.value.comment == "nope"
        assert "parent not found" in exc_info.value.message
        assert object_store.keys(BUCKET) == []

    def test_create_parent_must_be_on_same_post(
        self, comment_store: CommentStore, post_store: StaticPostStore
    ):
        """A parent on another post does not count."""
        post_store.add("other-post")
        other = comment_store.create(
            Comment(post="other-post", author="adam", body="elsewhere")
        )

        with pytest.raises(CommentNotFoundError):
            comment_store.create(new_comment(parent=other.id))

    def test_create_toplevel_needs_no_other_comments(
        self, comment_store: CommentStore
    ):
        """Top-level creation succeeds on a post with no comments."""
        created = comment_store.create(new_comment())

        assert created.parent == ""

    def test_create_on_missing_post_writes_nothing(
        self, comment_store: CommentStore, object_store: InMemoryObjectStore
    ):
        """Post gating happens before any object is written."""
        with pytest.raises(PostNotFoundError):
            comment_store.create(
                Comment(post="no-such-post", author="adam", body="hello")
            )

        assert object_store.keys(BUCKET) == []

    def test_create_without_post_is_rejected(self, comment_store: CommentStore):
        with pytest.raises(CommentValidationError):
            comment_store.create(Comment(post="", author="adam", body="hello"))

    @pytest.mark.parametrize(
        ("post", "parent"), [("a/b", ""), (POST, "../c1")]
    )
    def test_create_rejects_slashes_in_identifiers(
        self, comment_store: CommentStore, post: str, parent: str
    ):
        with pytest.raises(CommentValidationError):
            comment_store.create(
                Comment(post=post, author="adam", body="hello", parent=parent)
            )

    def test_create_wraps_post_lookup_failure(self, object_store, clock):
        """Post oracle failures other than not-found become storage errors."""
        store = CommentStore(
            object_store=object_store,
            post_store=FailingPostStore(),
            bucket=BUCKET,
            time_func=clock,
        )

        with pytest.raises(CommentStorageError, match="checking post existence"):
            store.create(new_comment())

    def test_record_write_failure_writes_no_link(
        self, flaky_comment_store: CommentStore, flaky_store: FlakyObjectStore
    ):
        """Nothing becomes discoverable when the record write fails."""
        flaky_store.fail("put", is_record)

        with pytest.raises(CommentStorageError, match="putting comment object"):
            flaky_comment_store.create(new_comment())

        assert flaky_store.keys(BUCKET) == []

    def test_link_write_failure_leaves_undiscoverable_record(
        self, flaky_comment_store: CommentStore, flaky_store: FlakyObjectStore
    ):
        """The record survives but is not listed; the error reaches the caller."""
        flaky_store.fail("put", is_link)

        with pytest.raises(CommentStorageError, match="putting parent link"):
            flaky_comment_store.create(new_comment())

        assert flaky_store.keys(BUCKET) == [record_key(POST, "f1")]
        assert flaky_comment_store.replies(POST) == []
        assert flaky_comment_store.fetch(POST, "f1").id == "f1"

    def test_prefix_applies_to_every_key(
        self, object_store: InMemoryObjectStore, post_store: StaticPostStore, clock
    ):
        """Records and links live under the configured prefix."""
        store = CommentStore(
            object_store=object_store,
            post_store=post_store,
            bucket=BUCKET,
            prefix="blog/",
            id_func=lambda: "p1",
            time_func=clock,
        )

        created = store.create(new_comment())

        assert object_store.keys(BUCKET) == [
            "blog/posts/hello-world/comments/__toplevel__/comments/p1",
            "blog/posts/hello-world/comments/p1/__comment__",
        ]
        assert store.replies(POST) == [created]
        store.delete(POST, created.id)
        assert object_store.keys(BUCKET) == []


class TestFetch:
    """Tests for CommentStore.fetch."""

    def test_fetch_missing_comment(self, comment_store: CommentStore):
        with pytest.raises(CommentNotFoundError) as exc_info:
            comment_store.fetch(POST, "missing")

        assert exc_info.value.post == POST
        assert exc_info.value.comment == "missing"
        assert exc_info.value.code == "comment_not_found"

    def test_fetch_storage_failure_is_wrapped(
        self, flaky_comment_store: CommentStore, flaky_store: FlakyObjectStore
    ):
        created = flaky_comment_store.create(new_comment())
        flaky_store.fail("get", is_record)

        with pytest.raises(CommentStorageError, match="getting comment") as exc_info:
            flaky_comment_store.fetch(POST, created.id)

        assert isinstance(exc_info.value.__cause__, ObjectStoreError)

    def test_fetch_corrupt_record(
        self, comment_store: CommentStore, object_store: InMemoryObjectStore
    ):
        object_store.put_object(BUCKET, record_key(POST, "bad"), b"not json")

        with pytest.raises(CommentStorageError, match="decoding comment"):
            comment_store.fetch(POST, "bad")

    def test_fetch_record_with_offsetless_timestamp(
        self, comment_store: CommentStore, object_store: InMemoryObjectStore
    ):
        object_store.put_object(
            BUCKET,
            record_key(POST, "naive"),
            b'{"id": "naive", "post": "hello-world", "created": "2021-03-04T05:06:07"}',
        )

        with pytest.raises(CommentStorageError, match="decoding comment"):
            comment_store.fetch(POST, "naive")


class TestReplies:
    """Tests for CommentStore.replies."""

    def test_replies_sorted_by_created(
        self, object_store: InMemoryObjectStore, post_store: StaticPostStore
    ):
        """Creation order A, B, C with timestamps C < A < B lists C, A, B."""
        t_c = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
        t_a = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
        t_b = datetime(2024, 1, 1, 11, 0, tzinfo=UTC)
        stamps = iter([t_a, t_b, t_c])
        ids = iter(["a", "b", "c"])
        store = CommentStore(
            object_store=object_store,
            post_store=post_store,
            bucket=BUCKET,
            id_func=lambda: next(ids),
            time_func=lambda: next(stamps),
        )

        for _ in range(3):
            store.create(new_comment())

        assert [c.id for c in store.replies(POST)] == ["c", "a", "b"]

    def test_replies_of_parent(self, comment_store: CommentStore):
        """Only direct replies are listed, not grandchildren."""
        root = comment_store.create(new_comment())
        first = comment_store.create(new_comment(parent=root.id))
        second = comment_store.create(new_comment(parent=root.id))
        comment_store.create(new_comment(parent=first.id))

        assert comment_store.replies(POST, root.id) == [first, second]
        assert comment_store.replies(POST) == [root]

    def test_replies_of_childless_comment_is_empty(self, comment_store: CommentStore):
        leaf = comment_store.create(new_comment())

        assert comment_store.replies(POST, leaf.id) == []

    def test_replies_of_post_without_comments_is_empty(
        self, comment_store: CommentStore
    ):
        assert comment_store.replies(POST) == []

    def test_replies_does_not_validate_parent(self, comment_store: CommentStore):
        """An unknown parent simply has no replies."""
        assert comment_store.replies(POST, "never-created") == []

    def test_dangling_link_fails_listing(
        self, comment_store: CommentStore, object_store: InMemoryObjectStore
    ):
        """A link whose record is gone aborts the whole listing."""
        kept = comment_store.create(new_comment())
        lost = comment_store.create(new_comment())
        object_store.delete_object(BUCKET, record_key(POST, lost.id))

        with pytest.raises(CommentNotFoundError) as exc_info:
            comment_store.replies(POST)

        assert exc_info.value.comment == lost.id
        assert kept.id != lost.id

    def test_offsetless_timestamp_fails_listing_as_storage_error(
        self, comment_store: CommentStore, object_store: InMemoryObjectStore
    ):
        """A stored local time next to a UTC one is reported, not compared."""
        comment_store.create(new_comment())
        object_store.put_object(
            BUCKET,
            record_key(POST, "naive"),
            b'{"id": "naive", "post": "hello-world", "created": "2021-03-04T05:06:07"}',
        )
        object_store.put_object(BUCKET, link_key(POST, "", "naive"), b"")

        with pytest.raises(CommentStorageError, match="decoding comment"):
            comment_store.replies(POST)

    def test_listing_failure_is_wrapped(
        self, flaky_comment_store: CommentStore, flaky_store: FlakyObjectStore
    ):
        flaky_store.fail("list", lambda prefix: True)

        with pytest.raises(CommentStorageError, match="listing objects"):
            flaky_comment_store.replies(POST)


class TestDelete:
    """Tests for CommentStore.delete."""

    def test_delete_removes_record_and_link(
        self, comment_store: CommentStore, object_store: InMemoryObjectStore
    ):
        created = comment_store.create(new_comment())

        comment_store.delete(POST, created.id)

        with pytest.raises(CommentNotFoundError):
            comment_store.fetch(POST, created.id)
        assert comment_store.replies(POST) == []
        assert object_store.keys(BUCKET) == []

    def test_delete_reply_hides_it_from_parent(self, comment_store: CommentStore):
        parent = comment_store.create(new_comment())
        keep = comment_store.create(new_comment(parent=parent.id))
        drop = comment_store.create(new_comment(parent=parent.id))

        comment_store.delete(POST, drop.id)

        assert comment_store.replies(POST, parent.id) == [keep]

    def test_delete_leaves_orphaned_replies(self, comment_store: CommentStore):
        """Deleting X keeps its reply Y, still listed under X's ID."""
        x = comment_store.create(new_comment())
        y = comment_store.create(new_comment(parent=x.id))

        comment_store.delete(POST, x.id)

        assert comment_store.replies(POST) == []
        assert comment_store.replies(POST, x.id) == [y]
        with pytest.raises(CommentNotFoundError):
            comment_store.fetch(POST, x.id)
        assert comment_store.fetch(POST, y.id).parent == x.id

    def test_delete_missing_comment(self, comment_store: CommentStore):
        with pytest.raises(CommentNotFoundError):
            comment_store.delete(POST, "missing")

    def test_delete_twice_fails_second_time(self, comment_store: CommentStore):
        """Deleting an already-deleted comment is reported as not found."""
        created = comment_store.create(new_comment())
        comment_store.delete(POST, created.id)

        with pytest.raises(CommentNotFoundError):
            comment_store.delete(POST, created.id)

    def test_delete_tolerates_missing_link(
        self, comment_store: CommentStore, object_store: InMemoryObjectStore
    ):
        """A link already removed by an earlier partial delete is not an error."""
        created = comment_store.create(new_comment())
        object_store.delete_object(BUCKET, link_key(POST, "", created.id))

        comment_store.delete(POST, created.id)

        assert object_store.keys(BUCKET) == []

    def test_link_delete_failure_keeps_record(
        self, flaky_comment_store: CommentStore, flaky_store: FlakyObjectStore
    ):
        """Unlink failures abort before the record is touched."""
        created = flaky_comment_store.create(new_comment())
        flaky_store.fail("delete", is_link)

        with pytest.raises(CommentStorageError, match="deleting parent link"):
            flaky_comment_store.delete(POST, created.id)

        assert flaky_comment_store.fetch(POST, created.id) == created
        assert flaky_comment_store.replies(POST) == [created]

    def test_record_delete_failure_leaves_unlinked_record(
        self, flaky_comment_store: CommentStore, flaky_store: FlakyObjectStore
    ):
        """Failing after the unlink leaves the safe state: no dangling link."""
        created = flaky_comment_store.create(new_comment())
        flaky_store.fail("delete", is_record)

        with pytest.raises(CommentStorageError, match="deleting comment"):
            flaky_comment_store.delete(POST, created.id)

        assert flaky_comment_store.replies(POST) == []
        assert flaky_comment_store.fetch(POST, created.id) == created
