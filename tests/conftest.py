"""Shared fixtures: an in-memory object store, a fixed set of posts and a
comment store with deterministic IDs and timestamps."""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from commentstore.comments.service import CommentStore
from commentstore.config import Settings
from commentstore.main import create_app
from commentstore.objectstore import InMemoryObjectStore
from commentstore.posts import StaticPostStore


BUCKET = "comments"
POST = "hello-world"


class FakeClock:
    """Clock that advances one second per reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        now = self.current
        self.current += timedelta(seconds=1)
        return now


def sequential_ids(prefix: str = "c") -> Callable[[], str]:
    counter = 0

    def next_id() -> str:
        nonlocal counter
        counter += 1
        return f"{prefix}{counter}"

    return next_id


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    """Empty in-memory object store."""
    return InMemoryObjectStore()


@pytest.fixture
def post_store() -> StaticPostStore:
    """Post store that knows a single post."""
    return StaticPostStore({POST})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def comment_store(
    object_store: InMemoryObjectStore,
    post_store: StaticPostStore,
    clock: FakeClock,
) -> CommentStore:
    """Comment store with sequential IDs (c1, c2, ...) and a ticking clock."""
    return CommentStore(
        object_store=object_store,
        post_store=post_store,
        bucket=BUCKET,
        id_func=sequential_ids(),
        time_func=clock,
    )


@pytest.fixture
def settings() -> Settings:
    """Settings for the test app; nothing is read from the environment that
    would change storage."""
    return Settings(
        environment="testing",
        log_level="WARNING",
        log_requests=False,
        storage_backend="memory",
        storage_bucket=BUCKET,
        storage_prefix="",
        storage_gzip=False,
        posts_backend="static",
        posts_known=[POST],
    )


@pytest.fixture
def client(settings: Settings, comment_store: CommentStore) -> Iterator[TestClient]:
    """Test client for an app wired to the fixture comment store."""
    with TestClient(create_app(settings, comment_store=comment_store)) as test_client:
        yield test_client
