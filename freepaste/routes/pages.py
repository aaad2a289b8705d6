"""
FreePaste — Browser Page Routes
=================================

What:  Serves the two HTML pages of the browser client.

    GET /            create page (index.html)
    GET /{paste_id}  view page (view.html) for well-formed ids; the page
                     fetches the paste itself through /api/get/{id}

Scripts and styles live under /static, mounted in main.py. This router is
registered last so `/{paste_id}` never shadows /health, /docs or /api routes.
"""

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

from freepaste.exceptions import ValidationError
from freepaste.services.id_generator import is_valid_id

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

router = APIRouter(tags=["Pages"])


@router.get("/", include_in_schema=False)
async def index_page() -> FileResponse:
    return FileResponse(STATIC_DIR / "index.html", media_type="text/html")


@router.get("/{paste_id}", include_in_schema=False)
async def view_page(paste_id: str) -> FileResponse:
    if not is_valid_id(paste_id):
        raise ValidationError(message="Invalid ID", field="id", context={"value": paste_id[:32]})
    return FileResponse(STATIC_DIR / "view.html", media_type="text/html")
