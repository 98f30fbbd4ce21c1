"""Gzip decorator for any object store."""

import gzip
import zlib

from .base import ObjectStore, ObjectStoreError


class GzipObjectStore:
    """Compresses payloads on write and decompresses them on read.

    Keys are untouched, so listing and deletion pass straight through to the
    wrapped store.
    """

    def __init__(self, inner: ObjectStore, compresslevel: int = 6) -> None:
        self.inner = inner
        self.compresslevel = compresslevel

    def put_object(self, bucket: str, key: str, data: bytes) -> None:
        self.inner.put_object(
            bucket, key, gzip.compress(data, compresslevel=self.compresslevel)
        )

    def get_object(self, bucket: str, key: str) -> bytes:
        data = self.inner.get_object(bucket, key)
        try:
            return gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise ObjectStoreError(
                f"decompressing object {bucket}/{key}: {e}", "corrupt_object"
            ) from e

    def list_objects(self, bucket: str, prefix: str) -> list[str]:
        return self.inner.list_objects(bucket, prefix)

    def delete_object(self, bucket: str, key: str) -> None:
        self.inner.delete_object(bucket, key)
