"""Upload session manager: per-file state machine for campground images."""

import asyncio
import logging
from dataclasses import replace
from typing import Callable, Iterable, Optional

from campimages.exceptions import NotAuthenticatedError, UploadPipelineError
from campimages.pipeline.binding import ImageRecorder, StorageBinding
from campimages.pipeline.intake import stage_files
from campimages.pipeline.models import (
    AssociatedImage,
    CandidateFile,
    FileFingerprint,
    PendingUploadItem,
    UploadLimits,
    UploadStatus,
)
from campimages.pipeline.previews import PreviewRegistry
from campimages.pipeline.reconciler import AssociationReconciler, ordered_urls
from campimages.pipeline.session_provider import SessionProvider, UserSession
from campimages.storage.paths import TEMP_SCOPE

logger = logging.getLogger(__name__)

ChangeListener = Callable[["UploadSessionManager"], None]


class UploadSessionManager:
    """Drives each staged file through ``queued -> uploading -> done | error``.

    The pending items and the associated images are held as immutable
    snapshots. Every change computes the next snapshot from the latest one
    and swaps it in without awaiting in between, so completions that resolve
    in overlapping turns of the event loop cannot lose each other's updates.

    Completed items leave the pending set and join ``images`` in completion
    order, which need not match the order files were selected in. Failed
    items stay pending with their message until removed; nothing is retried.

    Args:
        binding: Storage collaborator used for authorize/transfer/direct upload
        session_provider: Source of the signed-in user's session
        parent_id: Existing campground id, or None for a campground being created
        recorder: Record endpoint client, required when ``auto_record`` is set
        auto_record: Record each upload against ``parent_id`` as it completes
        limits: Intake constraints; defaults to the configured ones
        existing: Images the campground already has
        on_change: Called after every state change
    """

    def __init__(
        self,
        binding: StorageBinding,
        session_provider: SessionProvider,
        *,
        parent_id: Optional[int] = None,
        recorder: Optional[ImageRecorder] = None,
        auto_record: bool = False,
        limits: Optional[UploadLimits] = None,
        previews: Optional[PreviewRegistry] = None,
        existing: Iterable[AssociatedImage] = (),
        on_change: Optional[ChangeListener] = None,
    ):
        if auto_record and (recorder is None or parent_id is None):
            raise ValueError("auto_record needs a recorder and an existing parent_id")

        self.binding = binding
        self.parent_id = parent_id
        self.recorder = recorder
        self.auto_record = auto_record
        self.limits = limits or UploadLimits.from_settings()
        self.previews = previews or PreviewRegistry()
        self.on_change = on_change

        existing = tuple(existing)
        self._reconciler = AssociationReconciler(existing)
        self._pending: tuple[PendingUploadItem, ...] = ()
        self._images: tuple[AssociatedImage, ...] = existing
        self._started: set[FileFingerprint] = set()
        self._removed_uploads: tuple[str, ...] = ()
        self._tasks: set[asyncio.Task] = set()

        self._session_provider = session_provider
        self._session: Optional[UserSession] = session_provider.get()
        self._unsubscribe = session_provider.subscribe(self._on_session_change)

    # -- state -------------------------------------------------------------

    @property
    def pending(self) -> list[PendingUploadItem]:
        return list(self._pending)

    @property
    def images(self) -> list[AssociatedImage]:
        return list(self._images)

    @property
    def removed_uploads(self) -> list[str]:
        """Paths uploaded in this session and then removed by the user.

        Their stored objects are orphaned; deleting them is left to the caller.
        """
        return list(self._removed_uploads)

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def is_uploading(self) -> bool:
        return any(item.status == UploadStatus.UPLOADING for item in self._pending)

    def image_urls(self) -> list[str]:
        """Ordered URLs to submit with the campground form.

        Raises:
            UploadPipelineError: While any item is still uploading
        """
        if self.is_uploading:
            raise UploadPipelineError("Images are still uploading")
        return ordered_urls(self._images)

    def _find(self, upload_id: str) -> Optional[PendingUploadItem]:
        for item in self._pending:
            if item.upload_id == upload_id:
                return item
        return None

    def _update(self, upload_id: str, **changes) -> Optional[PendingUploadItem]:
        """Replace one pending item; returns None if it is no longer tracked."""
        updated = None
        next_pending = []
        for item in self._pending:
            if item.upload_id == upload_id:
                updated = replace(item, **changes)
                item = updated
            next_pending.append(item)
        if updated is not None:
            self._pending = tuple(next_pending)
            self._notify()
        return updated

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def _on_session_change(self, session: Optional[UserSession]) -> None:
        self._session = session
        logger.debug("Session changed", extra={"authenticated": session is not None})

    # -- intake ------------------------------------------------------------

    def add_files(self, files: Iterable[CandidateFile]) -> list[PendingUploadItem]:
        """Validate and stage files, then start uploading the accepted ones.

        Must be called from within a running event loop.

        Raises:
            NotAuthenticatedError: If there is no signed-in session
        """
        if self._session is None:
            raise NotAuthenticatedError("You must be logged in to upload images")

        staged = stage_files(
            files,
            self._pending,
            len(self._images),
            self.limits,
            self.previews,
            known=self._started,
        )
        if staged:
            self._pending = (*self._pending, *staged)
            self._notify()
        self.start_uploads()
        return staged

    def start_uploads(self) -> list[asyncio.Task]:
        """Schedule a transfer for every queued item not yet started.

        Safe to call repeatedly: the started-set is checked and updated before
        scheduling, so a file is never handed to the binding twice.
        """
        tasks = []
        for item in self._pending:
            if item.status != UploadStatus.QUEUED or item.fingerprint in self._started:
                continue
            self._started.add(item.fingerprint)
            task = asyncio.create_task(self._run(item.upload_id))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)
        return tasks

    async def wait(self) -> None:
        """Wait until every scheduled transfer has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # -- per-item pipeline --------------------------------------------------

    def _report_progress(self, upload_id: str, percent: int) -> None:
        item = self._find(upload_id)
        percent = max(0, min(100, int(percent)))
        if item is not None and percent > item.progress:
            self._update(upload_id, progress=percent)

    async def _run(self, upload_id: str) -> None:
        item = self._find(upload_id)
        if item is None or item.status != UploadStatus.QUEUED:
            # Removed before it started
            return

        file = item.file
        self._update(upload_id, status=UploadStatus.UPLOADING, progress=0)

        try:
            if self.parent_id is None:
                path = await self.binding.upload_direct(TEMP_SCOPE, file)
                url = self.binding.public_url(path)
                self._report_progress(upload_id, 100)
            else:
                authorization = await self.binding.authorize(self.parent_id, file)
                await self.binding.transfer(
                    authorization,
                    file,
                    lambda percent: self._report_progress(upload_id, percent),
                )
                path = authorization.path
                url = authorization.public_url or self.binding.public_url(path)
                if self.auto_record:
                    await self.recorder.record(self.parent_id, path)
        except UploadPipelineError as e:
            self._fail(upload_id, file, str(e))
            return
        except Exception as e:
            logger.error(
                "Unexpected upload failure",
                extra={"file_name": file.name, "error": str(e)},
                exc_info=True,
            )
            self._fail(upload_id, file, "Upload failed")
            return

        self._complete(upload_id, file, path, url)

    def _fail(self, upload_id: str, file: CandidateFile, message: str) -> None:
        logger.warning("Upload failed", extra={"file_name": file.name, "error": message})
        if self._update(upload_id, status=UploadStatus.ERROR, error=message) is None:
            self._started.discard(file.fingerprint)

    def _complete(self, upload_id: str, file: CandidateFile, path: str, url: str) -> None:
        item = self._find(upload_id)
        if item is None:
            # Removed while in flight; the stored object is left orphaned
            logger.info("Discarding upload of removed item", extra={"path": path})
            self._started.discard(file.fingerprint)
            self._removed_uploads = (*self._removed_uploads, path)
            self._notify()
            return

        self._update(
            upload_id,
            status=UploadStatus.DONE,
            progress=100,
            storage_path=path,
            public_url=url,
        )
        self._images = tuple(self._reconciler.merge(self._images, path, url))
        self._pending = tuple(p for p in self._pending if p.upload_id != upload_id)
        self.previews.release(item.preview)
        logger.info(
            "Image associated",
            extra={"path": path, "parent_id": self.parent_id, "images": len(self._images)},
        )
        self._notify()

    # -- removal -----------------------------------------------------------

    def remove_pending(self, upload_id: str) -> bool:
        """Drop a pending item and release its preview.

        A queued item will never start. An uploading item is not aborted; its
        result is discarded when it arrives.
        """
        item = self._find(upload_id)
        if item is None:
            return False

        self.previews.release(item.preview)
        self._pending = tuple(p for p in self._pending if p.upload_id != upload_id)
        if item.status != UploadStatus.UPLOADING:
            self._started.discard(item.fingerprint)
        self._notify()
        return True

    def remove_image(self, path: str) -> bool:
        """Drop an associated image from the list to be submitted."""
        if not any(image.storage_path == path for image in self._images):
            return False
        self._images = tuple(self._reconciler.remove(self._images, path))
        if not path.startswith("existing-"):
            self._removed_uploads = (*self._removed_uploads, path)
        self._notify()
        return True

    def close(self) -> None:
        """Stop listening for session changes and release every preview."""
        self._unsubscribe()
        for item in self._pending:
            self.previews.release(item.preview)
