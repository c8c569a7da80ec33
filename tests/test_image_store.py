"""Tests for the image record store."""

from datetime import datetime, timezone

import pytest

from campimages.storage.image_store import DuplicateImageError, ImageRecord, ImageRecordStore


@pytest.fixture
def image_store():
    """Create a fresh image store for each test."""
    return ImageRecordStore()


def make_record(campground_id=1, path="campgrounds/1/a.jpg"):
    return ImageRecord(
        campground_id=campground_id,
        path=path,
        url=f"https://cdn.test/{path}",
        alt=None,
        created_at=datetime.now(timezone.utc),
    )


def test_create_and_list(image_store):
    """Test creating and listing an image record."""
    record = make_record()
    image_store.create(record)

    assert image_store.list_for(1) == [record]
    assert image_store.list_for(2) == []


def test_duplicate_path_rejected(image_store):
    """Test that a path can only be recorded once per campground."""
    image_store.create(make_record())

    with pytest.raises(DuplicateImageError):
        image_store.create(make_record())


def test_same_path_on_other_campground_allowed(image_store):
    """Test that duplicate detection is scoped per campground."""
    image_store.create(make_record(1))
    image_store.create(make_record(2))

    assert len(image_store.list_for(1)) == 1
    assert len(image_store.list_for(2)) == 1


def test_list_preserves_recording_order(image_store):
    """Test that images are listed in the order they were recorded."""
    for name in ("c", "a", "b"):
        image_store.create(make_record(path=f"campgrounds/1/{name}.jpg"))

    assert [r.path for r in image_store.list_for(1)] == [
        "campgrounds/1/c.jpg",
        "campgrounds/1/a.jpg",
        "campgrounds/1/b.jpg",
    ]
