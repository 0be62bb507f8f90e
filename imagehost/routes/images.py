"""
Paginated image listing and throttled downloads.

GET /api/imgs
GET /api/download/{file}
"""

import asyncio
import logging
import re
from urllib.parse import quote

from fastapi import APIRouter, Query
from fastapi.exceptions import HTTPException
from fastapi.responses import FileResponse

from imagehost import config
from imagehost.state import DownloadGate, download_gate, get_store, stats
from imagehost.storage import paginate

logger = logging.getLogger(__name__)

router = APIRouter()

_LEADING_INT_RE = re.compile(r"^\s*([+-]?)0*(\d+)")
_MAX_DIGITS = 18


def parse_positive_int(value: str | None, default: int) -> int:
    """Parse the leading integer of *value*.

    Falls back to *default* if absent, below 1, or longer than 18 digits.
    """
    match = _LEADING_INT_RE.match(value or "")
    if not match:
        return default
    sign, digits = match.groups()
    if len(digits) > _MAX_DIGITS:
        return default
    number = int(sign + digits)
    return number if number > 0 else default


@router.get("/api/imgs")
async def list_images(
    page: str | None = Query(None, description="1-based page number (default 1)."),
    limit: str | None = Query(None, description="Images per page (default 10)."),
):
    """List stored images, newest first, one page at a time."""
    page_no = parse_positive_int(page, 1)
    page_size = parse_positive_int(limit, 10)

    try:
        records = await asyncio.to_thread(get_store().list_images)
    except OSError as exc:
        logger.error("Error reading images directory: %s", exc)
        raise HTTPException(status_code=500, detail="Error reading images")

    result = paginate(records, page_no, page_size)
    return {
        "currentPage": result.page,
        "totalPages": result.total_pages,
        "totalImages": result.total,
        "pageSize": result.limit,
        "images": [
            {
                "url": f"{config.BASE_URL}/preview/{quote(r.filename)}",
                "downloadUrl": f"{config.BASE_URL}/api/download/{quote(r.filename)}",
                "filename": r.filename,
            }
            for r in result.records
        ],
    }


class GatedFileResponse(FileResponse):
    """File response that hands its admission slot back once sending ends.

    The slot is released on completion, on I/O error and on cancellation
    (client disconnect), so the gate cannot leak.
    """

    def __init__(self, path, *, gate: DownloadGate, **kwargs) -> None:
        super().__init__(path, **kwargs)
        self._gate = gate

    async def __call__(self, scope, receive, send) -> None:
        try:
            await stats.record_download(admitted=True)
            await super().__call__(scope, receive, send)
        except OSError as exc:
            # File read errors mid-stream. A failed send on client disconnect
            # reaches this frame as cancellation and is re-raised by the
            # outer middleware, so only the finally below runs for it.
            logger.error("Download error for %s: %s", self.filename, exc)
        finally:
            self._gate.release()
            logger.info("Download finished: %s (Active: %d)", self.filename, self._gate.active)


@router.get("/api/download/{file}")
async def download_image(file: str):
    """
    Download an original as an attachment.

    At most 200 downloads run at once; beyond that the request is refused
    with 429 and should be retried later.
    """
    if download_gate.full:
        await stats.record_download(admitted=False)
        logger.warning("Download rejected, gate full: %s", file)
        raise HTTPException(
            status_code=429, detail="Too many users downloading now. Please wait..."
        )

    store = get_store()
    if not store.has_original(file):
        raise HTTPException(status_code=404, detail="File not found")

    if not download_gate.try_acquire():
        await stats.record_download(admitted=False)
        raise HTTPException(
            status_code=429, detail="Too many users downloading now. Please wait..."
        )

    logger.info("Download started: %s (Active: %d)", file, download_gate.active)
    return GatedFileResponse(
        store.original_path(file),
        gate=download_gate,
        filename=file,
        content_disposition_type="attachment",
    )
