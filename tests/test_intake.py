"""Tests for file intake and validation."""

import pytest
from conftest import make_file

from campimages.exceptions import FileTooLargeError, UnsupportedFileTypeError
from campimages.pipeline.intake import remaining_slots, stage_files, validate_file
from campimages.pipeline.models import PendingUploadItem, UploadLimits, UploadStatus
from campimages.pipeline.previews import PreviewRegistry


@pytest.fixture
def previews():
    return PreviewRegistry()


def test_validate_rejects_unsupported_type(limits):
    """Test that non-whitelisted MIME types are rejected."""
    with pytest.raises(UnsupportedFileTypeError, match="Unsupported file type."):
        validate_file(make_file("doc.pdf", content_type="application/pdf"), limits)


def test_validate_rejects_oversized_file():
    """Test that files above the size limit are rejected."""
    limits = UploadLimits(max_file_bytes=100)
    with pytest.raises(FileTooLargeError, match="File too large"):
        validate_file(make_file(size=101), limits)


def test_stage_valid_files_allocates_previews(limits, previews):
    """Test that accepted files are queued with a preview handle."""
    staged = stage_files([make_file("a.jpg"), make_file("b.png", content_type="image/png")], [], 0, limits, previews)

    assert [item.status for item in staged] == [UploadStatus.QUEUED, UploadStatus.QUEUED]
    assert all(item.preview in previews.active for item in staged)
    assert len(previews.active) == 2


def test_stage_invalid_file_becomes_error_item(limits, previews):
    """Test that an invalid file is returned in error status without a preview."""
    staged = stage_files([make_file("doc.pdf", content_type="application/pdf")], [], 0, limits, previews)

    assert len(staged) == 1
    assert staged[0].status == UploadStatus.ERROR
    assert staged[0].error == "Unsupported file type."
    assert staged[0].preview is None
    assert previews.active == set()


def test_stage_skips_file_already_pending(limits, previews):
    """Test that selecting the same file twice yields a single item."""
    first = stage_files([make_file()], [], 0, limits, previews)
    second = stage_files([make_file()], first, 0, limits, previews)

    assert len(first) == 1
    assert second == []


def test_stage_skips_duplicates_within_one_batch(limits, previews):
    """Test that the same file dropped twice in one batch is staged once."""
    staged = stage_files([make_file(), make_file()], [], 0, limits, previews)

    assert len(staged) == 1


def test_same_name_different_modification_time_is_distinct(limits, previews):
    """Test that the fingerprint includes the last-modified timestamp."""
    staged = stage_files(
        [make_file(last_modified=1.0), make_file(last_modified=2.0)], [], 0, limits, previews
    )

    assert len(staged) == 2


def test_stage_drops_files_beyond_capacity(previews):
    """Test capacity: 3 max, 2 associated, 4 selected leaves exactly 1 queued."""
    limits = UploadLimits(max_images=3)
    files = [make_file(f"{n}.jpg") for n in range(4)]

    staged = stage_files(files, [], 2, limits, previews)

    assert len(staged) == 1
    assert staged[0].file.name == "0.jpg"
    assert len(previews.active) == 1


def test_pending_items_consume_capacity(previews):
    """Test that queued items count against the remaining slots."""
    limits = UploadLimits(max_images=2)
    pending = stage_files([make_file("a.jpg")], [], 0, limits, previews)

    staged = stage_files([make_file("b.jpg"), make_file("c.jpg")], pending, 0, limits, previews)

    assert [item.file.name for item in staged] == ["b.jpg"]


def test_error_items_consume_capacity(previews):
    """Test that failed items still pending hold their slot."""
    limits = UploadLimits(max_images=2)
    failed = PendingUploadItem(file=make_file("x.jpg"), preview=None, status=UploadStatus.ERROR, error="boom")

    assert remaining_slots(limits, 0, [failed]) == 1

    staged = stage_files([make_file("a.jpg"), make_file("b.jpg")], [failed], 0, limits, previews)

    assert [item.file.name for item in staged] == ["a.jpg"]


def test_invalid_files_beyond_capacity_are_dropped(previews):
    """Test that files past capacity are neither queued nor erred."""
    limits = UploadLimits(max_images=1)

    staged = stage_files(
        [make_file("a.jpg"), make_file("doc.pdf", content_type="application/pdf")],
        [],
        0,
        limits,
        previews,
    )

    assert [item.file.name for item in staged] == ["a.jpg"]
    assert staged[0].status == UploadStatus.QUEUED


def test_invalid_file_within_capacity_takes_a_slot(previews):
    """Test that a rejected file occupies one of the remaining slots."""
    limits = UploadLimits(max_images=1)

    staged = stage_files(
        [make_file("doc.pdf", content_type="application/pdf"), make_file("a.jpg")],
        [],
        0,
        limits,
        previews,
    )

    assert [(item.file.name, item.status) for item in staged] == [("doc.pdf", UploadStatus.ERROR)]


def test_known_fingerprints_are_skipped(limits, previews):
    """Test that files already transferred are not staged again."""
    file = make_file()

    assert stage_files([file], [], 0, limits, previews, known={file.fingerprint}) == []
