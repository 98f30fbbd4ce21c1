"""Construction of the configured object store."""

import structlog

from commentstore.config.settings import Settings

from .base import ObjectStore
from .compression import GzipObjectStore
from .gcs import GCSObjectStore
from .memory import InMemoryObjectStore


logger = structlog.get_logger(__name__)


def build_object_store(settings: Settings) -> ObjectStore:
    """Build the object store selected by ``settings.storage_backend``.

    Args:
        settings: Application settings.

    Returns:
        The backend, wrapped in ``GzipObjectStore`` when ``storage_gzip`` is set.
    """
    store: ObjectStore
    if settings.storage_backend == "gcs":
        store = GCSObjectStore(project=settings.gcs_project)
    else:
        store = InMemoryObjectStore()

    if settings.storage_gzip:
        store = GzipObjectStore(store)

    logger.info(
        "object_store_configured",
        backend=settings.storage_backend,
        bucket=settings.storage_bucket,
        prefix=settings.storage_prefix,
        gzip=settings.storage_gzip,
    )
    return store
