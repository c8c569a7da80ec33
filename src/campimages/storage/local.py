"""Local filesystem storage backend."""

import logging
from pathlib import Path
from typing import BinaryIO, Iterable

from campimages.core.config import settings
from campimages.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class LocalStorageBackend(StorageBackend):
    """Local filesystem storage backend."""

    def __init__(self, base_path: str | Path | None = None):
        self.base_path = Path(base_path or settings.LOCAL_STORAGE_PATH)

    def _resolve(self, path: str) -> Path:
        target = (self.base_path / path).resolve()
        if not target.is_relative_to(self.base_path.resolve()):
            raise ValueError(f"Path escapes storage root: {path}")
        return target

    async def upload(self, path: str, content_type: str, file_data: BinaryIO) -> str:
        """Write file to local filesystem; existing objects are never replaced."""
        target_path = self._resolve(path)
        target_path.parent.mkdir(parents=True, exist_ok=True)

        with open(target_path, "xb") as f:
            while chunk := file_data.read(65536):  # 64KB chunks
                f.write(chunk)

        return path

    def get_public_url(self, path: str) -> str:
        return f"{settings.public_base_url}/{path}"

    def remove(self, paths: Iterable[str]) -> None:
        for path in paths:
            self._resolve(path).unlink(missing_ok=True)
            logger.info("Deleted image object", extra={"path": path})

    def get_backend_name(self) -> str:
        return "local"


# Singleton instance
local_backend = LocalStorageBackend()
