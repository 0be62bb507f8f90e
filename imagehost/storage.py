"""
Filesystem-backed image store: originals and their previews, addressed by filename.

Originals live in one directory and previews in a sibling directory under the
same filename. There is no index; listing reads the directory on every call.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from imagehost.config import IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)

_MAX_FILENAME_BYTES = 255
_FORBIDDEN_CHARS = ("/", "\\", "\x00")


class InvalidFilename(ValueError):
    """Raised when a client-supplied filename cannot be used as a storage key."""


def validate_filename(name: str | None) -> str:
    """Return *name* unchanged if it is safe to use as a flat filename."""
    if not name or not name.strip():
        raise InvalidFilename("Filename is empty.")
    if any(c in name for c in _FORBIDDEN_CHARS):
        raise InvalidFilename(f"Filename '{name}' contains a path separator.")
    if set(name) == {"."}:
        raise InvalidFilename(f"Filename '{name}' is not allowed.")
    if len(name.encode("utf-8")) > _MAX_FILENAME_BYTES:
        raise InvalidFilename("Filename is too long.")
    return name


def is_image_filename(name: str) -> bool:
    return os.path.splitext(name)[1].lower() in IMAGE_EXTENSIONS


@dataclass(frozen=True)
class ImageRecord:
    filename: str
    size_bytes: int
    modified_at: float


@dataclass(frozen=True)
class Page:
    records: list[ImageRecord]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit)


def paginate(records: list[ImageRecord], page: int, limit: int) -> Page:
    """Slice a 1-based *page* of *limit* items; out-of-range pages are empty."""
    start = (page - 1) * limit
    return Page(records=records[start:start + limit], page=page, limit=limit, total=len(records))


class ImageStore:
    """Originals directory plus a parallel previews directory."""

    def __init__(self, originals_dir: Path, previews_dir: Path) -> None:
        self.originals_dir = Path(originals_dir)
        self.previews_dir = Path(previews_dir)

    def ensure_dirs(self) -> None:
        for folder in (self.originals_dir, self.previews_dir):
            folder.mkdir(parents=True, exist_ok=True)

    def original_path(self, filename: str) -> Path:
        return self.originals_dir / validate_filename(filename)

    def preview_path(self, filename: str) -> Path:
        return self.previews_dir / validate_filename(filename)

    def save_original(self, filename: str, content: bytes) -> Path:
        """Write *content* verbatim, replacing any existing original of that name."""
        path = self.original_path(filename)
        self.originals_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        logger.info("Stored original %s (%d bytes)", filename, len(content))
        return path

    def has_original(self, filename: str) -> bool:
        try:
            return self.original_path(filename).is_file()
        except InvalidFilename:
            return False

    def list_images(self) -> list[ImageRecord]:
        """Return every image original, most recently modified first.

        Raises OSError if the originals directory cannot be read. Entries that
        disappear between the directory read and their stat are skipped.
        """
        records = []
        with os.scandir(self.originals_dir) as entries:
            for entry in entries:
                if not is_image_filename(entry.name):
                    continue
                try:
                    if not entry.is_file():
                        continue
                    st = entry.stat()
                except FileNotFoundError:
                    continue
                records.append(ImageRecord(entry.name, st.st_size, st.st_mtime))

        records.sort(key=lambda r: r.filename)
        records.sort(key=lambda r: r.modified_at, reverse=True)
        return records
