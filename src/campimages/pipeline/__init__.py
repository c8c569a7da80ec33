"""
Image upload pipeline

Client-side half of campground image handling: files are validated and
staged, transferred to object storage (signed URL for existing campgrounds,
direct SDK upload otherwise) and merged into the campground's ordered image
list for submission with the campground form.
"""

from campimages.pipeline.binding import HttpImageRecorder, HttpStorageBinding
from campimages.pipeline.models import (
    AssociatedImage,
    CandidateFile,
    PendingUploadItem,
    UploadLimits,
    UploadStatus,
)
from campimages.pipeline.reconciler import AssociationReconciler, images_from_urls
from campimages.pipeline.session import UploadSessionManager
from campimages.pipeline.session_provider import StaticSessionProvider, UserSession

__all__ = [
    "AssociatedImage",
    "AssociationReconciler",
    "CandidateFile",
    "HttpImageRecorder",
    "HttpStorageBinding",
    "PendingUploadItem",
    "StaticSessionProvider",
    "UploadLimits",
    "UploadSessionManager",
    "UploadStatus",
    "UserSession",
    "images_from_urls",
]
