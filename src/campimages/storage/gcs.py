"""Google Cloud Storage backend."""

import logging
from datetime import timedelta
from typing import BinaryIO, Iterable, Optional

from google.cloud import storage
from google.cloud.exceptions import NotFound
from google.oauth2 import service_account
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from campimages.core.config import settings
from campimages.exceptions import StorageError
from campimages.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class GCSStorageBackend(StorageBackend):
    """Google Cloud Storage backend."""

    def __init__(self):
        self._client: Optional[storage.Client] = None
        self._bucket: Optional[storage.Bucket] = None

    def _get_bucket(self) -> storage.Bucket:
        """Lazy-load and cache GCS bucket."""
        if self._bucket is None:
            if not settings.GCS_BUCKET_NAME:
                raise ValueError("GCS_BUCKET_NAME not configured")

            self._client = storage.Client(project=settings.GCP_PROJECT_ID or None)
            self._bucket = self._client.bucket(settings.GCS_BUCKET_NAME)

        return self._bucket

    def supports_signed_uploads(self) -> bool:
        return True

    def create_signed_upload_url(
        self,
        path: str,
        content_type: str,
        expiration_minutes: int = 5,
    ) -> str:
        """Generate a V4 signed PUT URL for one object using IAM signBlob.

        Returns:
            The signed URL
        """
        from google.auth import compute_engine
        from google.auth import iam
        from google.auth.transport import requests as auth_requests

        blob = self._get_bucket().blob(path)

        # Compute engine credentials resolve the runtime service account
        credentials = compute_engine.Credentials()
        auth_request = auth_requests.Request()
        credentials.refresh(auth_request)
        service_account_email = credentials.service_account_email

        # The service account needs roles/iam.serviceAccountTokenCreator on itself.
        signer = iam.Signer(
            request=auth_request,
            credentials=credentials,
            service_account_email=service_account_email,
        )
        signing_creds = service_account.Credentials(
            signer=signer,
            service_account_email=service_account_email,
            token_uri="https://oauth2.googleapis.com/token",
        )

        return blob.generate_signed_url(
            version="v4",
            expiration=timedelta(minutes=expiration_minutes),
            method="PUT",
            content_type=content_type,
            headers={"Content-Type": content_type},
            credentials=signing_creds,
            service_account_email=service_account_email,
        )

    async def upload(self, path: str, content_type: str, file_data: BinaryIO) -> str:
        """Upload bytes to GCS without overwriting an existing object."""
        blob = self._get_bucket().blob(path)
        blob.content_type = content_type
        blob.cache_control = "public, max-age=3600"
        # if_generation_match=0 refuses to replace an existing object
        blob.upload_from_file(file_data, rewind=True, if_generation_match=0)
        return path

    def get_public_url(self, path: str) -> str:
        return f"{settings.public_base_url}/{path}"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(StorageError),
        reraise=True,
    )
    def remove(self, paths: Iterable[str]) -> None:
        """Delete objects from GCS, retrying transient failures."""
        bucket = self._get_bucket()
        for path in paths:
            try:
                bucket.blob(path).delete()
                logger.info("Deleted image object", extra={"path": path})
            except NotFound:
                logger.info("Image object already gone", extra={"path": path})
            except Exception as e:
                logger.error(
                    "Failed to delete image object",
                    extra={"path": path, "error": str(e)},
                )
                raise StorageError(f"Failed to delete {path}: {e}") from e

    def get_backend_name(self) -> str:
        return "gcs"


# Singleton instance
gcs_backend = GCSStorageBackend()
