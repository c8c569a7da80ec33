"""Tests for storage path construction."""

import re

from campimages.storage.paths import (
    campground_image_path,
    is_managed_path,
    resolve_extension,
    sanitize_filename,
    temp_image_path,
)


def test_sanitize_filename():
    """Test filename sanitization."""
    assert sanitize_filename("My Photo (1).JPG") == "my-photo-1.jpg"
    assert "/" not in sanitize_filename("../../etc/passwd")
    assert not sanitize_filename("../secret").startswith(".")
    assert sanitize_filename("valid-file_name.123.png") == "valid-file_name.123.png"
    assert len(sanitize_filename("a" * 200 + ".jpg")) == 80


def test_resolve_extension_prefers_filename():
    """Test that the filename's own extension wins."""
    assert resolve_extension("photo.PNG", "image/jpeg") == "png"


def test_resolve_extension_degenerate_names_use_mime():
    """Test names without a usable extension fall back to the MIME type."""
    assert resolve_extension("photo", "image/webp") == "webp"
    assert resolve_extension(".jpg", "image/png") == "png"
    assert resolve_extension("photo.", "image/gif") == "gif"


def test_resolve_extension_fallback():
    """Test the fallback when neither name nor MIME type resolves."""
    assert resolve_extension("photo", "application/x-unknown") == "bin"
    assert resolve_extension("photo") == "bin"


def test_campground_image_path():
    """Test signed upload path structure and uniqueness."""
    path = campground_image_path(42, "Lake View.jpg")

    assert re.fullmatch(r"campgrounds/42/[0-9a-f-]{36}-lake-view\.jpg", path)
    assert campground_image_path(42, "Lake View.jpg") != path


def test_temp_image_path():
    """Test temp path structure."""
    path = temp_image_path("sunset", "image/png")

    assert re.fullmatch(r"temp/[0-9a-f-]{36}\.png", path)


def test_is_managed_path():
    """Test namespace checks for removal and recording."""
    assert is_managed_path("campgrounds/1/abc-photo.jpg")
    assert is_managed_path("temp/abc.jpg")
    assert not is_managed_path("other/abc.jpg")
    assert not is_managed_path("campgrounds/../secrets")
    assert not is_managed_path("/campgrounds/1/x.jpg")
