"""
Upload pipeline: store originals and generate their previews.

POST /api/upload
POST /api/admin/upload
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.exceptions import HTTPException

from imagehost import config
from imagehost.auth import require_upload_secret
from imagehost.state import get_preview_generator, get_store, stats
from imagehost.storage import InvalidFilename, validate_filename

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_batch(files: list[UploadFile] | None, max_files: int) -> list[tuple[str, bytes]]:
    """Validate a whole batch before anything is written.

    Returns (filename, content) pairs in arrival order.
    """
    # Browsers send an empty part when no file was selected
    files = [f for f in files or [] if f.filename]
    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")

    if len(files) > max_files:
        raise HTTPException(
            status_code=400,
            detail=f"Too many files: {len(files)} received, at most {max_files} allowed.",
        )

    for file in files:
        if not (file.content_type or "").startswith("image/"):
            raise HTTPException(status_code=400, detail="Only image files are allowed")
        try:
            validate_filename(file.filename)
        except InvalidFilename as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    limit_mb = config.MAX_UPLOAD_SIZE_BYTES // (1024 * 1024)
    batch = []
    for file in files:
        # Check declared size before reading into memory when available
        if file.size is not None and file.size > config.MAX_UPLOAD_SIZE_BYTES:
            raise HTTPException(
                status_code=413,
                detail=f"File '{file.filename}' exceeds the {limit_mb} MB limit.",
            )
        content = await file.read()
        if len(content) > config.MAX_UPLOAD_SIZE_BYTES:
            raise HTTPException(
                status_code=413,
                detail=f"File '{file.filename}' exceeds the {limit_mb} MB limit.",
            )
        batch.append((file.filename, content))
    return batch


async def _process_file(filename: str, content: bytes) -> dict:
    """Store one original, then render its preview. Never raises."""
    store = get_store()
    try:
        source = await asyncio.to_thread(store.save_original, filename, content)
    except OSError as exc:
        logger.error("Failed to store %s: %s", filename, exc)
        await stats.record_upload(filename=filename, stored=False, preview=False, error=str(exc))
        return {"filename": filename, "status": "error", "error": str(exc), "preview": False}

    preview_ok = await asyncio.to_thread(
        get_preview_generator().generate, source, store.preview_path(filename)
    )
    await stats.record_upload(filename=filename, stored=True, preview=preview_ok)

    if not preview_ok and config.PREVIEW_FAILURE_IS_ERROR:
        logger.warning("Marking %s as failed: preview generation failed", filename)
        return {
            "filename": filename,
            "size": len(content),
            "status": "error",
            "error": "Preview generation failed",
            "preview": False,
        }

    logger.info("Processed: %s", filename)
    return {"filename": filename, "size": len(content), "status": "success", "preview": preview_ok}


async def run_upload_batch(files: list[UploadFile] | None, max_files: int) -> list[dict]:
    """Validate, then process each file strictly in order, one at a time."""
    batch = await _read_batch(files, max_files)
    logger.info("Received %d file(s)", len(batch))

    results = []
    for filename, content in batch:
        results.append(await _process_file(filename, content))
    return results


@router.post("/api/upload")
async def upload_images(
    images: list[UploadFile] | None = File(None),
    _: None = Depends(require_upload_secret),
):
    """
    Upload up to 5 images and generate a preview for each.

    Each file must declare an `image/*` content type and be at most 10 MB.
    An existing image with the same filename is replaced.
    """
    results = await run_upload_batch(images, config.MAX_PUBLIC_UPLOAD_FILES)
    return {
        "message": "Upload completed",
        "results": results,
        "totalFiles": len(results),
    }


@router.post("/api/admin/upload")
async def admin_upload_images(
    images: list[UploadFile] | None = File(None),
    _: None = Depends(require_upload_secret),
):
    """Upload up to 10 images from the admin panel."""
    results = await run_upload_batch(images, config.MAX_ADMIN_UPLOAD_FILES)
    return {
        "message": "Files uploaded successfully",
        "results": results,
    }
