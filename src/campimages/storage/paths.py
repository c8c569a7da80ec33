"""Storage path construction for campground images."""

import re
from uuid import uuid4

CAMPGROUND_SCOPE = "campgrounds"
TEMP_SCOPE = "temp"
FALLBACK_EXTENSION = "bin"
MAX_SAFE_NAME_LENGTH = 80

MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/avif": "avif",
    "image/heic": "heic",
}


def sanitize_filename(filename: str) -> str:
    """Lowercase a file name and strip anything unsafe for an object key."""
    safe = filename.lower()
    safe = re.sub(r"\s+", "-", safe)
    safe = re.sub(r"[^a-z0-9._-]", "", safe)
    # Leading dots would yield hidden or traversal-like segments
    safe = safe.lstrip(".")
    return safe[:MAX_SAFE_NAME_LENGTH]


def resolve_extension(filename: str, content_type: str | None = None) -> str:
    """Pick a file extension from the name, then the MIME type.

    A name without a dot, or whose only dot is leading (``".jpg"``), has no
    usable extension and falls through to the MIME mapping.
    """
    base, dot, ext = filename.rpartition(".")
    ext = re.sub(r"[^a-z0-9]", "", ext.lower())
    if dot and base and ext:
        return ext
    if content_type:
        mapped = MIME_EXTENSIONS.get(content_type.lower())
        if mapped:
            return mapped
    return FALLBACK_EXTENSION


def campground_image_path(campground_id: int | str, original_name: str) -> str:
    """Build ``campgrounds/<id>/<uuid>-<safe name>`` for a signed upload."""
    safe_name = sanitize_filename(original_name) or "image"
    return f"{CAMPGROUND_SCOPE}/{campground_id}/{uuid4()}-{safe_name}"


def temp_image_path(
    filename: str, content_type: str | None = None, scope: str = TEMP_SCOPE
) -> str:
    """Build ``<scope>/<uuid>.<ext>`` for an upload with no campground yet."""
    return f"{scope}/{uuid4()}.{resolve_extension(filename, content_type)}"


def is_managed_path(path: str) -> bool:
    """Whether a path lives in a namespace this service writes to."""
    if ".." in path or path.startswith("/"):
        return False
    return path.startswith(f"{CAMPGROUND_SCOPE}/") or path.startswith(f"{TEMP_SCOPE}/")
