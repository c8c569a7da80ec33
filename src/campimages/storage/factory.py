"""Storage backend selection."""

from campimages.core.config import settings
from campimages.storage.base import StorageBackend
from campimages.storage.gcs import gcs_backend
from campimages.storage.local import local_backend


def get_storage_backend() -> StorageBackend:
    """Return the backend named by STORAGE_BACKEND."""
    if settings.STORAGE_BACKEND == "gcs":
        return gcs_backend
    if settings.STORAGE_BACKEND == "local":
        return local_backend
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
