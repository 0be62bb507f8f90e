"""
Health checks and runtime stats.

GET /health
GET /api/stats
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from imagehost import config
from imagehost.auth import has_valid_secret
from imagehost.state import download_gate, stats

router = APIRouter()


@router.api_route("/health", methods=["GET", "HEAD"])
async def health_check():
    """Health check. Also reports how many downloads are in flight."""
    return {
        "status": "healthy",
        # Millisecond precision with a Z suffix, e.g. 2024-05-01T12:00:00.123Z
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
        "activeDownloads": download_gate.active,
    }


@router.get("/api/stats", include_in_schema=False)
async def runtime_stats(request: Request):
    """Runtime counters for monitoring.

    Recent errors are only included when the request carries the upload secret.
    """
    result = stats.snapshot(include_errors=has_valid_secret(request))
    result["limits"] = {
        "max_downloads": download_gate.limit,
        "max_upload_size_bytes": config.MAX_UPLOAD_SIZE_BYTES,
        "max_public_upload_files": config.MAX_PUBLIC_UPLOAD_FILES,
        "max_admin_upload_files": config.MAX_ADMIN_UPLOAD_FILES,
    }
    return result
