"""Merging uploaded images into a campground's ordered image list."""

import logging
from typing import Iterable, Sequence

from campimages.pipeline.models import AssociatedImage

logger = logging.getLogger(__name__)


class AssociationReconciler:
    """Append-only merge of uploaded paths, deduplicated by storage path.

    The seen-set lives on the instance so completions arriving out of order
    cannot merge the same path twice even when they race on a stale list.
    """

    def __init__(self, existing: Iterable[AssociatedImage] = ()):
        self._seen: set[str] = {image.storage_path for image in existing}

    def merge(
        self, current: Sequence[AssociatedImage], path: str, url: str
    ) -> list[AssociatedImage]:
        if path in self._seen:
            logger.debug("Path already associated", extra={"path": path})
            return list(current)
        self._seen.add(path)
        return [*current, AssociatedImage(url=url, storage_path=path, sort_order=len(current))]

    def remove(self, current: Sequence[AssociatedImage], path: str) -> list[AssociatedImage]:
        # Paths stay in the seen-set so a late duplicate completion cannot
        # resurrect a removed image. sort_order gaps are left as-is.
        return [image for image in current if image.storage_path != path]


def images_from_urls(urls: Iterable[str]) -> list[AssociatedImage]:
    """Load a persisted campground's image URLs as associated images.

    Persisted images carry no storage path of their own, so each gets a
    synthetic ``existing-<n>`` key that never collides with an uploaded path.
    """
    return [
        AssociatedImage(url=url, storage_path=f"existing-{index}", sort_order=index)
        for index, url in enumerate(urls)
    ]


def ordered_urls(images: Sequence[AssociatedImage]) -> list[str]:
    """URLs in display order, as submitted with the campground form."""
    return [image.url for image in images]
