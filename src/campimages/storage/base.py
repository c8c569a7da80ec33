"""Abstract storage backend interface."""

from abc import ABC, abstractmethod
from typing import BinaryIO, Iterable


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod
    async def upload(self, path: str, content_type: str, file_data: BinaryIO) -> str:
        """Store file bytes at a path.

        Args:
            path: Object key inside the image bucket
            content_type: MIME type
            file_data: File content stream

        Returns:
            The stored object's path
        """
        pass

    @abstractmethod
    def get_public_url(self, path: str) -> str:
        """Return the public address of a stored object."""
        pass

    @abstractmethod
    def remove(self, paths: Iterable[str]) -> None:
        """Delete stored objects; missing objects are ignored."""
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        """Return backend identifier."""
        pass

    def supports_signed_uploads(self) -> bool:
        """Whether the backend can issue signed upload URLs."""
        return False
