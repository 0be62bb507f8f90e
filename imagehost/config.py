"""
Constants and configuration shared across the application.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

PORT = int(os.getenv("PORT", "5000"))
HOST = os.getenv("HOST", "0.0.0.0")

# Prefix for URLs emitted by the listing endpoint; empty means host-relative
BASE_URL = os.getenv("BASE_URL", "").rstrip("/")

IMGS_DIR = Path(os.getenv("IMGS_DIR") or BASE_DIR / "imgs")
PREVIEW_DIR = Path(os.getenv("PREVIEW_DIR") or BASE_DIR / "preview")

MAX_DOWNLOADS = 200
MAX_UPLOAD_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB per file
MAX_PUBLIC_UPLOAD_FILES = 5
MAX_ADMIN_UPLOAD_FILES = 10

PREVIEW_WIDTH = 1000
PREVIEW_QUALITY = 30

# When true, a failed preview marks the file's upload outcome as an error
PREVIEW_FAILURE_IS_ERROR = os.getenv("PREVIEW_FAILURE_IS_ERROR", "").lower() in {
    "1", "true", "yes", "on",
}

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}

STATIC_CACHE_CONTROL = "public, max-age=31536000"

# ── CORS ──────────────────────────────────────────────────────────────────
CORS_ORIGIN = "http://localhost:3000"

# Origins accepted by the origin guard. Empty disables the guard.
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOW_ON", "").split(",") if o.strip()]

STATIC_DIR = Path(__file__).resolve().parent / "static"
