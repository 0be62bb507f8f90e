"""
Shared-secret authentication for the upload endpoints.
"""

import hmac
import logging
import os

from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)

# Set UPLOAD_SECRET in env to require `Authorization: Bearer <secret>` on every
# upload endpoint. If unset, uploads are open.
_upload_secret: str | None = os.getenv("UPLOAD_SECRET") or None
if not _upload_secret:
    logger.warning("UPLOAD_SECRET is not set; upload endpoints are open")


def has_valid_secret(request: Request) -> bool:
    """True if the request carries the configured bearer secret."""
    if not _upload_secret:
        return False
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return False
    return hmac.compare_digest(token.strip().encode(), _upload_secret.encode())


def require_upload_secret(request: Request) -> None:
    """Raise 401 if UPLOAD_SECRET is configured and the request doesn't carry it."""
    if not _upload_secret:
        return  # not configured → endpoint is open
    if not has_valid_secret(request):
        raise HTTPException(status_code=401, detail="Unauthorized")
