"""
imagehost

A FastAPI service that accepts image uploads, generates compressed WebP
previews, and serves originals and previews with pagination and download
throttling.

Endpoints:
    POST /api/upload            - Upload up to 5 images
    POST /api/admin/upload      - Upload up to 10 images (admin panel)
    GET  /api/imgs              - Paginated listing, newest first
    GET  /api/download/{file}   - Download an original (throttled)
    GET  /preview/{file}        - Preview rendition
    GET  /imgs/{file}           - Original, served directly
    GET  /admin                 - Upload page
    GET  /health                - Health check
"""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import sentry_sdk
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Load .env before any app modules that read os.getenv() at import time (e.g. auth.py)
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from imagehost import config  # noqa: E402
from imagehost.state import get_store  # noqa: E402
from imagehost.routes import files, images, monitoring, ui, upload  # noqa: E402

# Sentry error tracking, only active when DSN is configured
if os.getenv("SENTRY_DSN"):
    sentry_sdk.init(
        dsn=os.getenv("SENTRY_DSN"),
        traces_sample_rate=0.2,
        environment=os.getenv("SENTRY_ENV", "production"),
    )

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None]:
    store = get_store()
    logger.info("Images folder: %s", store.originals_dir)
    logger.info("Preview folder: %s", store.previews_dir)
    yield


app = FastAPI(
    title="imagehost",
    description=(
        "Image upload service that stores originals, renders low-quality WebP "
        "previews and serves both with pagination and download throttling."
    ),
    version="1.0.0",
    lifespan=_lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.CORS_ORIGIN],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_credentials=True,
)


# ── Origin guard ─────────────────────────────────────────────────────────
# Active only when ALLOW_ON is set. Requests from a listed Origin get CORS
# headers; previews and health checks are open; everything else is refused.
_GUARD_OPEN_PREFIXES = ("/preview", "/health")


class _OriginGuardMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        allowed = config.ALLOWED_ORIGINS
        if not allowed:
            return await call_next(request)

        origin = request.headers.get("origin")
        if origin and origin in allowed:
            cors_headers = {
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE",
                "Access-Control-Allow-Headers": "Content-Type, Authorization",
                "Vary": "Origin",
            }
            if request.method == "OPTIONS" and "access-control-request-method" in request.headers:
                return Response(status_code=204, headers=cors_headers)
            response = await call_next(request)
            response.headers.update(cors_headers)
            return response

        if request.url.path.startswith(_GUARD_OPEN_PREFIXES):
            return await call_next(request)

        logger.warning("Blocked request from origin %r to %s", origin, request.url.path)
        return JSONResponse(status_code=403, content={"error": "Forbidden"})


app.add_middleware(_OriginGuardMiddleware)


# ── Security headers ─────────────────────────────────────────────────────
class _SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

app.add_middleware(_SecurityHeadersMiddleware)

# ── Include routers ──────────────────────────────────────────────────────
app.include_router(upload.router)
app.include_router(images.router)
app.include_router(files.router)
app.include_router(monitoring.router)
app.include_router(ui.router)
