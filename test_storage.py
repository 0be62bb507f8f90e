"""
Unit tests for the filesystem image store, filename validation and pagination.
"""

import os

import pytest

from imagehost.storage import (
    ImageRecord,
    InvalidFilename,
    is_image_filename,
    paginate,
    validate_filename,
)


class TestValidateFilename:
    @pytest.mark.parametrize("name", ["photo.jpg", "my photo (1).PNG", ".hidden.webp", "ünïcode.jpeg"])
    def test_accepts_flat_names(self, name):
        assert validate_filename(name) == name

    @pytest.mark.parametrize(
        "name",
        ["", "   ", ".", "..", "...", "../etc/passwd", "a/b.jpg", "a\\b.jpg", "nul\x00.jpg", "x" * 256],
    )
    def test_rejects_unsafe_names(self, name):
        with pytest.raises(InvalidFilename):
            validate_filename(name)

    def test_rejects_none(self):
        with pytest.raises(InvalidFilename):
            validate_filename(None)


def test_image_extension_match_is_case_insensitive():
    assert is_image_filename("a.JPG")
    assert is_image_filename("b.webp")
    assert not is_image_filename("c.gif")
    assert not is_image_filename("jpg")


class TestPaginate:
    RECORDS = [ImageRecord(f"{i}.jpg", 1, float(i)) for i in range(25)]

    def test_pages(self):
        assert len(paginate(self.RECORDS, 1, 10).records) == 10
        assert [r.filename for r in paginate(self.RECORDS, 3, 10).records] == [f"{i}.jpg" for i in range(20, 25)]
        assert paginate(self.RECORDS, 4, 10).records == []

    def test_total_pages(self):
        assert paginate(self.RECORDS, 1, 10).total_pages == 3
        assert paginate(self.RECORDS, 1, 25).total_pages == 1
        assert paginate(self.RECORDS, 1, 100).total_pages == 1
        assert paginate([], 1, 10).total_pages == 0
        assert paginate(self.RECORDS, 1, 10 ** 400).total_pages == 1


class TestImageStore:
    def test_save_overwrites(self, store):
        store.save_original("a.jpg", b"first")
        store.save_original("a.jpg", b"second")
        assert (store.originals_dir / "a.jpg").read_bytes() == b"second"
        assert [r.filename for r in store.list_images()] == ["a.jpg"]

    def test_save_rejects_traversal(self, store):
        with pytest.raises(InvalidFilename):
            store.save_original("../escape.jpg", b"x")
        assert not (store.originals_dir.parent / "escape.jpg").exists()

    def test_list_sorted_newest_first_with_name_tiebreak(self, store):
        for name, ts in [("old.jpg", 100), ("b.png", 500), ("a.png", 500), ("new.webp", 900)]:
            path = store.originals_dir / name
            path.write_bytes(b"data")
            os.utime(path, (ts, ts))

        records = store.list_images()
        assert [r.filename for r in records] == ["new.webp", "a.png", "b.png", "old.jpg"]
        assert records[0].size_bytes == 4
        assert records[0].modified_at == 900

    def test_has_original(self, store):
        store.save_original("here.jpg", b"x")
        assert store.has_original("here.jpg")
        assert not store.has_original("gone.jpg")
        assert not store.has_original("..")

    def test_list_missing_directory_raises(self, store, tmp_path):
        store.originals_dir = tmp_path / "does-not-exist"
        with pytest.raises(OSError):
            store.list_images()
