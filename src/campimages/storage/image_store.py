"""Recorded campground image tracking store."""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional


@dataclass
class ImageRecord:
    """Image metadata recorded against a campground."""

    campground_id: int
    path: str
    url: str
    alt: Optional[str]
    created_at: datetime


class DuplicateImageError(Exception):
    """Raised when a path is already recorded for a campground."""
    pass


class ImageRecordStore:
    """In-memory store for recorded images, keyed by campground then path."""

    def __init__(self):
        self._images: Dict[int, Dict[str, ImageRecord]] = {}

    def create(self, record: ImageRecord) -> None:
        """Store a new image record, refusing duplicate paths."""
        images = self._images.setdefault(record.campground_id, {})
        if record.path in images:
            raise DuplicateImageError(
                f"Image {record.path} already recorded for campground {record.campground_id}"
            )
        images[record.path] = record

    def list_for(self, campground_id: int) -> list[ImageRecord]:
        """List a campground's images in recording order."""
        return list(self._images.get(campground_id, {}).values())


# Singleton instance
image_store = ImageRecordStore()
