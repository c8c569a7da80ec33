"""Campground image API routes."""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Body, HTTPException

from campimages.core.config import settings
from campimages.exceptions import StorageError
from campimages.models.upload import (
    ImageRecordModel,
    RecordImageRequest,
    RecordImageResponse,
    RemoveImagesRequest,
    RemoveImagesResponse,
    SignUploadRequest,
    SignUploadResponse,
)
from campimages.storage.factory import get_storage_backend
from campimages.storage.image_store import DuplicateImageError, ImageRecord, image_store
from campimages.storage.paths import campground_image_path, is_managed_path

router = APIRouter(prefix="/api/v1/images", tags=["images"])
logger = logging.getLogger(__name__)


@router.post("/sign", response_model=SignUploadResponse, status_code=200)
async def sign_upload(request: SignUploadRequest = Body(...)) -> SignUploadResponse:
    """Issue a signed upload URL scoped to one campground."""
    try:
        if request.campground_id <= 0:
            raise HTTPException(
                status_code=400, detail="campground_id must be a positive number"
            )
        if not request.original_name or not request.original_name.strip():
            raise HTTPException(status_code=400, detail="original_name is required")

        if request.content_type not in settings.allowed_mime_types:
            raise HTTPException(
                status_code=400,
                detail=f"Content type {request.content_type} not allowed",
            )

        try:
            backend = get_storage_backend()
        except ValueError as e:
            logger.error(f"Storage backend configuration error: {e}")
            raise HTTPException(status_code=500, detail="Storage configuration error")

        if not backend.supports_signed_uploads():
            raise HTTPException(
                status_code=400,
                detail=f"Signed uploads require GCS backend. Current backend: {backend.get_backend_name()}",
            )

        path = campground_image_path(request.campground_id, request.original_name.strip())
        try:
            signed_url = backend.create_signed_upload_url(
                path,
                content_type=request.content_type,
                expiration_minutes=settings.SIGNED_URL_EXPIRATION_MINUTES,
            )
        except Exception as e:
            logger.error(f"Failed to generate signed URL: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail=f"Failed to generate signed URL: {str(e)}")

        expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=settings.SIGNED_URL_EXPIRATION_MINUTES
        )
        logger.info(
            f"Signed upload issued: campground_id={request.campground_id}, path={path}"
        )

        return SignUploadResponse(
            signed_url=signed_url,
            path=path,
            public_url=backend.get_public_url(path),
            expires_at=expires_at,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during signing: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/record", response_model=RecordImageResponse, status_code=201)
async def record_image(request: RecordImageRequest = Body(...)) -> RecordImageResponse:
    """Record an uploaded image against its campground."""
    try:
        if request.campground_id <= 0:
            raise HTTPException(
                status_code=400,
                detail="Invalid campground_id - must be a positive number",
            )
        if not request.path or not request.path.strip():
            raise HTTPException(status_code=400, detail="path is required")
        if not is_managed_path(request.path):
            raise HTTPException(status_code=400, detail="path is outside the image namespace")

        backend = get_storage_backend()
        record = ImageRecord(
            campground_id=request.campground_id,
            path=request.path,
            url=backend.get_public_url(request.path),
            alt=request.alt,
            created_at=datetime.now(timezone.utc),
        )

        try:
            image_store.create(record)
        except DuplicateImageError:
            raise HTTPException(
                status_code=409, detail="Image already exists for this campground"
            )

        logger.info(
            f"Image recorded: campground_id={request.campground_id}, path={request.path}"
        )

        return RecordImageResponse(
            image=ImageRecordModel(
                campground_id=record.campground_id,
                path=record.path,
                url=record.url,
                alt=record.alt,
            )
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during image recording: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("", response_model=RemoveImagesResponse, status_code=200)
async def remove_images(request: RemoveImagesRequest = Body(...)) -> RemoveImagesResponse:
    """Delete stored objects for images dropped before form submission."""
    rejected = [p for p in request.paths if not is_managed_path(p)]
    if rejected:
        raise HTTPException(
            status_code=400, detail=f"Paths outside the image namespace: {rejected}"
        )

    try:
        get_storage_backend().remove(request.paths)
    except StorageError as e:
        logger.error(f"Failed to remove images: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to remove image")

    return RemoveImagesResponse(removed=request.paths)
