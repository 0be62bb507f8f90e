"""
Admin upload page.

GET /admin
"""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from imagehost.config import STATIC_DIR

router = APIRouter()

_ADMIN_HTML: str = (STATIC_DIR / "admin.html").read_text(encoding="utf-8")


@router.get("/admin", response_class=HTMLResponse)
async def admin_panel():
    """Drag-and-drop upload page, served from static/admin.html."""
    return HTMLResponse(_ADMIN_HTML)
