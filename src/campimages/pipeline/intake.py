"""File intake and validation."""

import logging
from typing import AbstractSet, Iterable, Sequence

from campimages.exceptions import FileTooLargeError, UnsupportedFileTypeError, ValidationError
from campimages.pipeline.models import (
    CandidateFile,
    FileFingerprint,
    PendingUploadItem,
    UploadLimits,
    UploadStatus,
)
from campimages.pipeline.previews import PreviewRegistry

logger = logging.getLogger(__name__)

UNSUPPORTED_TYPE_MESSAGE = "Unsupported file type."
TOO_LARGE_MESSAGE = "File too large"


def validate_file(file: CandidateFile, limits: UploadLimits) -> None:
    """Raise a ValidationError subclass if the file cannot be uploaded."""
    if file.content_type not in limits.allowed_mime_types:
        raise UnsupportedFileTypeError(UNSUPPORTED_TYPE_MESSAGE)
    if file.size > limits.max_file_bytes:
        raise FileTooLargeError(TOO_LARGE_MESSAGE)


def remaining_slots(
    limits: UploadLimits, associated_count: int, pending: Sequence[PendingUploadItem]
) -> int:
    """Free capacity: max images less associated and pending, failed items included."""
    return max(0, limits.max_images - associated_count - len(pending))


def stage_files(
    candidates: Iterable[CandidateFile],
    pending: Sequence[PendingUploadItem],
    associated_count: int,
    limits: UploadLimits,
    previews: PreviewRegistry,
    known: AbstractSet[FileFingerprint] = frozenset(),
) -> list[PendingUploadItem]:
    """Turn offered files into new pending items.

    Files whose fingerprint is already pending (or in ``known``) are skipped
    silently, as is every file beyond the remaining capacity, valid or not.
    Invalid files within capacity come back as items already in ``error``
    status and hold their slot until removed.
    """
    seen = {item.fingerprint for item in pending} | set(known)
    slots = remaining_slots(limits, associated_count, pending)
    staged: list[PendingUploadItem] = []
    dropped = 0

    for file in candidates:
        fingerprint = file.fingerprint
        if fingerprint in seen:
            logger.debug("Skipping duplicate file", extra={"file_name": file.name})
            continue

        if slots <= 0:
            dropped += 1
            continue

        seen.add(fingerprint)
        slots -= 1

        try:
            validate_file(file, limits)
        except ValidationError as e:
            staged.append(
                PendingUploadItem(file=file, preview=None, status=UploadStatus.ERROR, error=str(e))
            )
            logger.info(
                "Rejected file at intake",
                extra={"file_name": file.name, "content_type": file.content_type, "reason": str(e)},
            )
            continue

        staged.append(PendingUploadItem(file=file, preview=previews.allocate(file.data)))

    if dropped:
        logger.info("Dropped files beyond capacity", extra={"dropped": dropped})

    return staged
