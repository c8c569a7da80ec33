"""Data models for the client-side image upload pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import NamedTuple, Optional
from uuid import uuid4

from campimages.core.config import settings


class UploadStatus(str, Enum):
    """Per-item upload state."""

    QUEUED = "queued"  # Accepted, transfer not started
    UPLOADING = "uploading"  # Authorization or transfer in flight
    DONE = "done"  # Transferred and reconciled
    ERROR = "error"  # Failed; stays visible until removed


class FileFingerprint(NamedTuple):
    """Identity of a physical file: (name, byte size, last-modified)."""

    name: str
    size: int
    last_modified: float


@dataclass(frozen=True)
class CandidateFile:
    """A file offered by the user through selection or drop."""

    name: str
    content_type: str
    data: bytes = field(repr=False)
    last_modified: float = 0.0

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def fingerprint(self) -> FileFingerprint:
        return FileFingerprint(self.name, self.size, self.last_modified)


@dataclass(frozen=True)
class PendingUploadItem:
    """One file in flight. Updated by replacement, never in place."""

    file: CandidateFile
    preview: Optional[str]
    status: UploadStatus = UploadStatus.QUEUED
    progress: int = 0
    error: Optional[str] = None
    storage_path: Optional[str] = None
    public_url: Optional[str] = None
    upload_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def fingerprint(self) -> FileFingerprint:
        return self.file.fingerprint


@dataclass(frozen=True)
class AssociatedImage:
    """A committed image reference belonging to a campground."""

    url: str
    storage_path: str
    sort_order: int


@dataclass(frozen=True)
class UploadAuthorization:
    """Single-use permission to write one object."""

    path: str
    signed_url: str
    expires_at: Optional[datetime] = None
    public_url: Optional[str] = None


@dataclass(frozen=True)
class UploadLimits:
    """Intake constraints."""

    max_images: int = 10
    max_file_bytes: int = 5 * 1024 * 1024
    allowed_mime_types: frozenset[str] = frozenset(
        {"image/jpeg", "image/png", "image/webp", "image/gif"}
    )

    @classmethod
    def from_settings(cls) -> "UploadLimits":
        return cls(
            max_images=settings.MAX_IMAGES,
            max_file_bytes=settings.max_image_bytes,
            allowed_mime_types=frozenset(settings.allowed_mime_types),
        )
