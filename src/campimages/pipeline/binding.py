"""Storage binding: authorizing and transferring image bytes."""

import io
import logging
from datetime import datetime
from typing import AsyncIterator, Callable, Optional, Protocol

import httpx

from campimages.core.config import settings
from campimages.core.logging import storage_path_context
from campimages.exceptions import (
    AuthorizationError,
    RecordingError,
    StorageBindingError,
    TransferError,
)
from campimages.pipeline.models import CandidateFile, UploadAuthorization
from campimages.storage.base import StorageBackend
from campimages.storage.paths import temp_image_path

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class StorageBinding(Protocol):
    """What the upload manager needs from the storage collaborator."""

    async def authorize(self, parent_id: int, file: CandidateFile) -> UploadAuthorization:
        ...

    async def transfer(
        self, authorization: UploadAuthorization, file: CandidateFile, on_progress: ProgressCallback
    ) -> None:
        ...

    async def upload_direct(self, namespace: str, file: CandidateFile) -> str:
        ...

    def public_url(self, path: str) -> str:
        ...


class ImageRecorder(Protocol):
    """Persists an uploaded image against its campground."""

    async def record(self, parent_id: int, path: str, alt: Optional[str] = None) -> None:
        ...


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)


class HttpStorageBinding:
    """Storage binding over the image API and a direct storage backend.

    Campgrounds that already exist get a signed URL from ``/api/v1/images/sign``
    and the bytes are PUT straight to it. New campgrounds have no id to sign
    against, so their files go through the storage SDK into a temp namespace.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        backend: StorageBackend,
        api_base_url: str | None = None,
        chunk_size: int | None = None,
    ):
        self.client = client
        self.backend = backend
        self.api_base_url = (api_base_url or settings.API_BASE_URL).rstrip("/")
        self.chunk_size = chunk_size or settings.UPLOAD_CHUNK_BYTES

    async def authorize(self, parent_id: int, file: CandidateFile) -> UploadAuthorization:
        """Request a single-use upload target for one file.

        Raises:
            AuthorizationError: If the sign request fails or is refused
        """
        try:
            response = await self.client.post(
                f"{self.api_base_url}/api/v1/images/sign",
                json={
                    "campground_id": parent_id,
                    "original_name": file.name,
                    "content_type": file.content_type,
                },
            )
        except httpx.HTTPError as e:
            logger.warning(
                "Sign request failed",
                extra={"campground_id": parent_id, "file_name": file.name, "error": str(e)},
            )
            raise AuthorizationError(f"Could not authorize upload: {e}") from e

        if response.is_error:
            detail = _error_detail(response)
            logger.warning(
                "Sign request refused",
                extra={
                    "campground_id": parent_id,
                    "file_name": file.name,
                    "status_code": response.status_code,
                    "detail": detail,
                },
            )
            raise AuthorizationError(f"Could not authorize upload: {detail}")

        try:
            body = response.json()
            expires_at = body.get("expires_at")
            return UploadAuthorization(
                path=body["path"],
                signed_url=body["signed_url"],
                expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
                public_url=body.get("public_url"),
            )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(
                "Malformed sign response",
                extra={"campground_id": parent_id, "file_name": file.name, "error": repr(e)},
            )
            raise AuthorizationError(f"Could not authorize upload: malformed response ({e!r})") from e

    async def transfer(
        self, authorization: UploadAuthorization, file: CandidateFile, on_progress: ProgressCallback
    ) -> None:
        """PUT the file to its signed URL, reporting byte-level progress.

        Raises:
            TransferError: On network failure or a non-2xx response
        """
        total = file.size
        token = storage_path_context.set(authorization.path)

        async def chunks() -> AsyncIterator[bytes]:
            sent = 0
            on_progress(0)
            for offset in range(0, total, self.chunk_size):
                chunk = file.data[offset:offset + self.chunk_size]
                yield chunk
                sent += len(chunk)
                on_progress(sent * 100 // total)

        try:
            response = await self.client.put(
                authorization.signed_url,
                content=chunks(),
                headers={
                    "Content-Type": file.content_type,
                    "Content-Length": str(total),
                },
            )
        except httpx.HTTPError as e:
            logger.warning("Transfer failed", extra={"file_name": file.name, "error": str(e)})
            raise TransferError(f"Upload failed: {e}") from e
        finally:
            storage_path_context.reset(token)

        if response.is_error:
            logger.warning(
                "Transfer rejected",
                extra={
                    "file_name": file.name,
                    "path": authorization.path,
                    "status_code": response.status_code,
                },
            )
            raise TransferError(f"Upload failed with status {response.status_code}")

        on_progress(100)
        logger.info(
            "Transfer completed",
            extra={"path": authorization.path, "size_bytes": total},
        )

    async def upload_direct(self, namespace: str, file: CandidateFile) -> str:
        """Upload through the storage SDK into ``namespace``.

        Raises:
            TransferError: If the backend rejects or fails the write
        """
        path = temp_image_path(file.name, file.content_type, scope=namespace)
        try:
            await self.backend.upload(path, file.content_type, io.BytesIO(file.data))
        except Exception as e:
            logger.warning(
                "Direct upload failed",
                extra={"file_name": file.name, "path": path, "error": str(e)},
            )
            raise TransferError(f"Upload failed: {e}") from e

        logger.info(
            "Direct upload completed",
            extra={"path": path, "backend": self.backend.get_backend_name()},
        )
        return path

    def public_url(self, path: str) -> str:
        return self.backend.get_public_url(path)


class HttpImageRecorder:
    """Client for the image record and removal routes."""

    def __init__(self, client: httpx.AsyncClient, api_base_url: str | None = None):
        self.client = client
        self.api_base_url = (api_base_url or settings.API_BASE_URL).rstrip("/")

    async def record(self, parent_id: int, path: str, alt: Optional[str] = None) -> None:
        """Persist an image record.

        Raises:
            RecordingError: If the record route fails or refuses the image
        """
        try:
            response = await self.client.post(
                f"{self.api_base_url}/api/v1/images/record",
                json={"campground_id": parent_id, "path": path, "alt": alt},
            )
        except httpx.HTTPError as e:
            raise RecordingError(f"Could not record image: {e}") from e

        if response.is_error:
            raise RecordingError(f"Could not record image: {_error_detail(response)}")

        logger.info("Image recorded", extra={"campground_id": parent_id, "path": path})

    async def remove(self, paths: list[str]) -> None:
        """Delete uploaded objects the user dropped before submitting."""
        if not paths:
            return
        try:
            response = await self.client.request(
                "DELETE", f"{self.api_base_url}/api/v1/images", json={"paths": paths}
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed to remove images", extra={"paths": paths, "error": str(e)})
            raise StorageBindingError(f"Failed to remove image: {e}") from e
