"""Tests for the association reconciler."""

from campimages.pipeline.models import AssociatedImage
from campimages.pipeline.reconciler import AssociationReconciler, images_from_urls, ordered_urls


def test_merge_appends_with_sort_order():
    """Test that merge appends and assigns the current length as sort order."""
    reconciler = AssociationReconciler()

    images = reconciler.merge([], "campgrounds/1/a.jpg", "https://cdn/a.jpg")
    images = reconciler.merge(images, "campgrounds/1/b.jpg", "https://cdn/b.jpg")

    assert [image.storage_path for image in images] == ["campgrounds/1/a.jpg", "campgrounds/1/b.jpg"]
    assert [image.sort_order for image in images] == [0, 1]


def test_merge_is_idempotent():
    """Test that merging the same path twice keeps one entry."""
    reconciler = AssociationReconciler()

    images = reconciler.merge([], "campgrounds/1/a.jpg", "https://cdn/a.jpg")
    images = reconciler.merge(images, "campgrounds/1/a.jpg", "https://cdn/a.jpg")

    assert len(images) == 1


def test_merge_dedup_survives_stale_list():
    """Test that a duplicate completion applied to an older list is still a no-op."""
    reconciler = AssociationReconciler()
    stale = []

    reconciler.merge(stale, "campgrounds/1/a.jpg", "https://cdn/a.jpg")
    result = reconciler.merge(stale, "campgrounds/1/a.jpg", "https://cdn/a.jpg")

    assert result == []


def test_merge_does_not_mutate_input():
    """Test that merge returns a new list."""
    reconciler = AssociationReconciler()
    current = [AssociatedImage(url="u0", storage_path="p0", sort_order=0)]

    result = reconciler.merge(current, "p1", "u1")

    assert len(current) == 1
    assert len(result) == 2


def test_remove_filters_and_leaves_gaps():
    """Test removal filters by path without resequencing."""
    reconciler = AssociationReconciler()
    images = reconciler.merge([], "p0", "u0")
    images = reconciler.merge(images, "p1", "u1")
    images = reconciler.merge(images, "p2", "u2")

    images = reconciler.remove(images, "p1")

    assert [image.storage_path for image in images] == ["p0", "p2"]
    assert [image.sort_order for image in images] == [0, 2]


def test_existing_images_are_seeded():
    """Test that persisted images count as already seen."""
    existing = images_from_urls(["https://cdn/old-1.jpg", "https://cdn/old-2.jpg"])
    reconciler = AssociationReconciler(existing)

    assert reconciler.merge(existing, "existing-0", "x") == existing
    assert reconciler.merge(existing, "existing-1", "x") == existing
    assert ordered_urls(existing) == ["https://cdn/old-1.jpg", "https://cdn/old-2.jpg"]
