"""In-process object store for development and tests."""

from threading import Lock

from .base import ObjectNotFoundError


class InMemoryObjectStore:
    """Dict backed object store. Buckets are created on first write."""

    def __init__(self) -> None:
        self._buckets: dict[str, dict[str, bytes]] = {}
        self._lock = Lock()

    def put_object(self, bucket: str, key: str, data: bytes) -> None:
        with self._lock:
            self._buckets.setdefault(bucket, {})[key] = bytes(data)

    def get_object(self, bucket: str, key: str) -> bytes:
        with self._lock:
            try:
                return self._buckets[bucket][key]
            except KeyError:
                raise ObjectNotFoundError(bucket, key) from None

    def list_objects(self, bucket: str, prefix: str) -> list[str]:
        with self._lock:
            objects = self._buckets.get(bucket, {})
            return sorted(key for key in objects if key.startswith(prefix))

    def delete_object(self, bucket: str, key: str) -> None:
        with self._lock:
            try:
                del self._buckets[bucket][key]
            except KeyError:
                raise ObjectNotFoundError(bucket, key) from None

    def keys(self, bucket: str) -> list[str]:
        """Every key currently stored in ``bucket``."""
        with self._lock:
            return sorted(self._buckets.get(bucket, {}))
