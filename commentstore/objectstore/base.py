"""Object store contract and errors.

The comment store only needs four operations against a flat, bucket and
key addressed blob store. Every adapter in this package implements them and
raises ``ObjectNotFoundError`` for a missing key so callers can translate the
condition into their own domain errors.
"""

from typing import Protocol


class ObjectStoreError(Exception):
    """Base error for object store operations."""

    def __init__(self, message: str, code: str = "object_store_error") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class ObjectNotFoundError(ObjectStoreError):
    """The requested key does not exist in the bucket."""

    def __init__(self, bucket: str, key: str) -> None:
        self.bucket = bucket
        self.key = key
        super().__init__(f"object not found: {bucket}/{key}", "object_not_found")


class ObjectStore(Protocol):
    """Flat blob storage addressed by bucket and key."""

    def put_object(self, bucket: str, key: str, data: bytes) -> None:
        """Store ``data`` at ``key``, replacing any existing object."""
        ...

    def get_object(self, bucket: str, key: str) -> bytes:
        """Return the object's bytes or raise ``ObjectNotFoundError``."""
        ...

    def list_objects(self, bucket: str, prefix: str) -> list[str]:
        """Return the full keys of every object whose key starts with ``prefix``."""
        ...

    def delete_object(self, bucket: str, key: str) -> None:
        """Delete the object or raise ``ObjectNotFoundError``."""
        ...
