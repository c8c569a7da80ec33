"""Image upload API models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SignUploadRequest(BaseModel):
    """Request model for a signed campground image upload."""

    campground_id: int
    original_name: str
    content_type: str = "application/octet-stream"


class SignUploadResponse(BaseModel):
    """Response model carrying a single-use upload target."""

    signed_url: str
    path: str
    public_url: str
    expires_at: datetime


class RecordImageRequest(BaseModel):
    """Request model for recording an uploaded image."""

    campground_id: int
    path: str
    alt: Optional[str] = None


class ImageRecordModel(BaseModel):
    """Recorded image as returned to clients."""

    campground_id: int
    path: str
    url: str
    alt: Optional[str] = None


class RecordImageResponse(BaseModel):
    """Response model for image recording."""

    success: bool = True
    message: str = "Image recorded successfully"
    image: ImageRecordModel


class RemoveImagesRequest(BaseModel):
    """Request model for deleting uploaded but unsubmitted images."""

    paths: list[str] = Field(..., min_length=1)


class RemoveImagesResponse(BaseModel):
    """Response model for image deletion."""

    removed: list[str]
