"""
Direct file serving for previews and originals.

GET /preview/{file}
GET /imgs/{file}
"""

from pathlib import Path

from fastapi import APIRouter
from fastapi.exceptions import HTTPException
from fastapi.responses import FileResponse

from imagehost.config import STATIC_CACHE_CONTROL
from imagehost.state import get_store
from imagehost.storage import InvalidFilename

router = APIRouter()

_STATIC_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Cache-Control": STATIC_CACHE_CONTROL,
}


def _file_response(path: Path, media_type: str | None = None) -> FileResponse:
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path, media_type=media_type, headers=_STATIC_HEADERS)


@router.get("/preview/{file}")
async def serve_preview(file: str):
    """Serve a preview. Previews are WebP whatever their extension says."""
    try:
        path = get_store().preview_path(file)
    except InvalidFilename:
        raise HTTPException(status_code=404, detail="File not found")
    return _file_response(path, media_type="image/webp")


@router.get("/imgs/{file}")
async def serve_original(file: str):
    """Serve an original directly, without download throttling."""
    try:
        path = get_store().original_path(file)
    except InvalidFilename:
        raise HTTPException(status_code=404, detail="File not found")
    return _file_response(path)
