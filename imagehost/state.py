"""
Shared mutable state: image store, download admission gate, runtime stats.
"""

import asyncio
import threading
import time

from imagehost.config import IMGS_DIR, MAX_DOWNLOADS, PREVIEW_DIR
from imagehost.preview import PreviewGenerator
from imagehost.storage import ImageStore

# Created lazily so tests can swap in a store rooted in a temp directory
_store: ImageStore | None = None
_preview_generator: PreviewGenerator | None = None


def get_store() -> ImageStore:
    global _store
    if _store is None:
        _store = ImageStore(IMGS_DIR, PREVIEW_DIR)
        _store.ensure_dirs()
    return _store


def get_preview_generator() -> PreviewGenerator:
    global _preview_generator
    if _preview_generator is None:
        _preview_generator = PreviewGenerator()
    return _preview_generator


# ── Download gate ─────────────────────────────────────────────────────────────
# Process-wide count of file downloads in flight. New downloads are refused
# (not queued) once the ceiling is reached.
class DownloadGate:
    def __init__(self, limit: int = MAX_DOWNLOADS) -> None:
        self.limit = limit
        self.active = 0
        self._lock = threading.Lock()

    @property
    def full(self) -> bool:
        return self.active >= self.limit

    def try_acquire(self) -> bool:
        """Admit one download if below the ceiling. Check and increment are atomic."""
        with self._lock:
            if self.active >= self.limit:
                return False
            self.active += 1
            return True

    def release(self) -> None:
        with self._lock:
            self.active = max(0, self.active - 1)


download_gate = DownloadGate()


class Stats:
    """Runtime statistics. All mutations go through async methods that hold the lock."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self.started_at = time.time()
        self.files_uploaded = 0
        self.files_failed = 0
        self.previews_created = 0
        self.previews_failed = 0
        self.downloads_served = 0
        self.downloads_rejected = 0
        self._errors: list[dict] = []

    async def record_upload(self, *, filename: str, stored: bool, preview: bool, error: str | None = None) -> None:
        """Record the outcome of one file from an upload batch."""
        async with self._lock:
            if not stored:
                self.files_failed += 1
                self._add_error(filename, error or "Storage failed")
                return
            self.files_uploaded += 1
            if preview:
                self.previews_created += 1
            else:
                self.previews_failed += 1
                self._add_error(filename, "Preview generation failed")

    async def record_download(self, *, admitted: bool) -> None:
        async with self._lock:
            if admitted:
                self.downloads_served += 1
            else:
                self.downloads_rejected += 1

    def _add_error(self, filename: str, error: str) -> None:
        self._errors.append({"time": time.time(), "filename": filename, "error": error})
        self._errors = self._errors[-20:]

    def snapshot(self, *, include_errors: bool = False) -> dict:
        """Return current counters as a plain dict for API responses."""
        result = {
            "uptime_seconds": round(time.time() - self.started_at),
            "files_uploaded": self.files_uploaded,
            "files_failed": self.files_failed,
            "previews_created": self.previews_created,
            "previews_failed": self.previews_failed,
            "downloads_served": self.downloads_served,
            "downloads_rejected": self.downloads_rejected,
            "active_downloads": download_gate.active,
        }
        if include_errors:
            result["recent_errors"] = self._errors[-5:]
        return result


stats = Stats()
