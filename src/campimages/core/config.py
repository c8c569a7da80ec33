"""Configuration management for the campground image service."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    ENV: str = "local"
    SERVICE_NAME: str = "campground-images"
    SERVICE_VERSION: str = "0.1.0"

    # GCP Configuration
    GCP_PROJECT_ID: str = ""

    # Storage Configuration
    STORAGE_BACKEND: str = "local"  # "gcs" or "local"
    GCS_BUCKET_NAME: str = "campground-images"
    LOCAL_STORAGE_PATH: str = "data/campground-images"
    PUBLIC_BASE_URL: str = ""  # Empty = derive from backend

    # Image Constraints
    MAX_IMAGES: int = 10
    MAX_IMAGE_MB: int = 5
    ALLOWED_IMAGE_MIME_TYPES: str = "image/jpeg,image/png,image/webp,image/gif"
    SIGNED_URL_EXPIRATION_MINUTES: int = 5

    # Client Configuration
    API_BASE_URL: str = "http://localhost:8080"
    REQUEST_TIMEOUT: int = 60  # seconds for sign/record/transfer calls
    UPLOAD_CHUNK_BYTES: int = 256 * 1024
    LOG_LEVEL: str = "INFO"

    @property
    def allowed_mime_types(self) -> list[str]:
        """Parse ALLOWED_IMAGE_MIME_TYPES into a list."""
        return [mt.strip() for mt in self.ALLOWED_IMAGE_MIME_TYPES.split(",") if mt.strip()]

    @property
    def max_image_bytes(self) -> int:
        """Convert MAX_IMAGE_MB to bytes."""
        return self.MAX_IMAGE_MB * 1024 * 1024

    @property
    def public_base_url(self) -> str:
        """Public prefix for stored objects, without trailing slash."""
        if self.PUBLIC_BASE_URL:
            return self.PUBLIC_BASE_URL.rstrip("/")
        if self.STORAGE_BACKEND == "gcs":
            return f"https://storage.googleapis.com/{self.GCS_BUCKET_NAME}"
        return f"{self.API_BASE_URL.rstrip('/')}/media"


# Singleton settings instance
settings = Settings()
