"""
FreePaste — Raw View Route
============================

What:  GET /raw/{paste_id} returns the paste content as plain UTF-8 text with
       no surrounding page, for curl, wget and "view source" links.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from freepaste.routes.dependencies import get_paste_service
from freepaste.schemas.paste import ErrorResponse
from freepaste.services.paste_service import PasteService

router = APIRouter(tags=["Raw"])


@router.get(
    "/raw/{paste_id}",
    response_class=PlainTextResponse,
    responses={
        200: {"content": {"text/plain": {}}, "description": "Paste content"},
        404: {"description": "Paste not found", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Get paste content as plain text",
)
async def raw_paste(
    paste_id: str,
    service: PasteService = Depends(get_paste_service),
) -> PlainTextResponse:
    content = await service.get_raw_content(paste_id)
    # Starlette appends "; charset=utf-8" to text/* media types
    return PlainTextResponse(content, media_type="text/plain")
