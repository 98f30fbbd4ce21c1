"""Google Cloud Storage object store.

Buckets map one to one onto GCS buckets and keys onto blob names. A missing
blob is reported as ``ObjectNotFoundError``; every other client failure is
logged and wrapped in ``ObjectStoreError`` with the operation that failed.
"""

from typing import TYPE_CHECKING

import structlog
from google.api_core.exceptions import NotFound

from .base import ObjectNotFoundError, ObjectStoreError


if TYPE_CHECKING:
    from google.cloud.storage import Bucket, Client


logger = structlog.get_logger(__name__)


class GCSObjectStore:
    """Object store backed by Google Cloud Storage."""

    CONTENT_TYPE = "application/octet-stream"

    def __init__(self, client: "Client | None" = None, project: str | None = None):
        """Initialize the store.

        Args:
            client: Storage client to use. Created lazily from application
                default credentials when omitted.
            project: Google Cloud project for the lazily created client.
        """
        self._client = client
        self._project = project

    def _get_client(self) -> "Client":
        """Get the storage client (lazy initialization)."""
        if self._client is None:
            # Lazy import to avoid loading the GCS SDK unless needed
            from google.cloud import storage  # noqa: PLC0415

            self._client = storage.Client(project=self._project)
            logger.info("gcs_client_initialized", project=self._project)
        return self._client

    def _bucket(self, bucket: str) -> "Bucket":
        return self._get_client().bucket(bucket)

    def put_object(self, bucket: str, key: str, data: bytes) -> None:
        try:
            blob = self._bucket(bucket).blob(key)
            blob.upload_from_string(data, content_type=self.CONTENT_TYPE)
        except Exception as e:
            logger.exception("gcs_put_failed", bucket=bucket, key=key, error=str(e))
            raise ObjectStoreError(f"putting object {bucket}/{key}: {e}") from e

    def get_object(self, bucket: str, key: str) -> bytes:
        try:
            return self._bucket(bucket).blob(key).download_as_bytes()
        except NotFound as e:
            raise ObjectNotFoundError(bucket, key) from e
        except Exception as e:
            logger.exception("gcs_get_failed", bucket=bucket, key=key, error=str(e))
            raise ObjectStoreError(f"getting object {bucket}/{key}: {e}") from e

    def list_objects(self, bucket: str, prefix: str) -> list[str]:
        try:
            return [
                blob.name
                for blob in self._get_client().list_blobs(bucket, prefix=prefix)
            ]
        except Exception as e:
            logger.exception(
                "gcs_list_failed", bucket=bucket, prefix=prefix, error=str(e)
            )
            raise ObjectStoreError(
                f"listing objects {bucket}/{prefix}: {e}"
            ) from e

    def delete_object(self, bucket: str, key: str) -> None:
        try:
            self._bucket(bucket).blob(key).delete()
        except NotFound as e:
            raise ObjectNotFoundError(bucket, key) from e
        except Exception as e:
            logger.exception(
                "gcs_delete_failed", bucket=bucket, key=key, error=str(e)
            )
            raise ObjectStoreError(f"deleting object {bucket}/{key}: {e}") from e
