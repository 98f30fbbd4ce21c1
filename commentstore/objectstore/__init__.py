"""Object store adapters used as the comment store's only durable storage."""

from commentstore.objectstore.base import (
    ObjectNotFoundError,
    ObjectStore,
    ObjectStoreError,
)
from commentstore.objectstore.compression import GzipObjectStore
from commentstore.objectstore.dependencies import build_object_store
from commentstore.objectstore.gcs import GCSObjectStore
from commentstore.objectstore.memory import InMemoryObjectStore


__all__ = [
    "GCSObjectStore",
    "GzipObjectStore",
    "InMemoryObjectStore",
    "ObjectNotFoundError",
    "ObjectStore",
    "ObjectStoreError",
    "build_object_store",
]
