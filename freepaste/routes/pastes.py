"""
FreePaste — Paste API Route Handlers
======================================

What:  JSON endpoints for creating, reading, editing and listing pastes.
How:   Parse the request, resolve the owner token, delegate to PasteService,
       shape the response. Errors propagate to the global handlers in main.py.

Route Inventory:
    POST /api/new               create, sets owner_token cookie
    GET  /api/get/{paste_id}    paste as JSON
    POST /api/is_owner/{id}     ownership probe, never fails
    POST /api/edit/{id}         owner edit of title/content
    POST /api/profile           pastes owned by the token, newest first
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Cookie, Depends, Header, Request, Response

from freepaste.config import settings
from freepaste.exceptions import TokenRequiredError, ValidationError
from freepaste.routes.dependencies import (
    OWNER_COOKIE,
    get_paste_service,
    public_base_url,
    read_body_token,
    resolve_owner_token,
)
from freepaste.schemas.paste import (
    EditResponse,
    ErrorResponse,
    OwnerResponse,
    PasteCreateRequest,
    PasteCreatedResponse,
    PasteEditRequest,
    PasteResponse,
    ProfileResponse,
    TokenRequest,
)
from freepaste.services.paste_service import PasteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Pastes"])


@router.post(
    "/new",
    response_model=PasteCreatedResponse,
    responses={
        400: {"description": "Empty or oversized content", "model": ErrorResponse},
        500: {"description": "Storage failure or id exhaustion", "model": ErrorResponse},
    },
    summary="Create a paste",
)
async def create_paste(
    request: Request,
    response: Response,
    payload: Optional[PasteCreateRequest] = Body(default=None),
    service: PasteService = Depends(get_paste_service),
) -> PasteCreatedResponse:
    """
    Store a new paste and hand the owner token back in both the body and a cookie.

    Cookie attributes: path=/, SameSite=Lax, max-age 10 years, readable by
    page scripts (httponly off), Secure only in production.
    """
    payload = payload or PasteCreateRequest()
    created = await service.create_paste(title=payload.title, content=payload.content)

    response.set_cookie(
        key=OWNER_COOKIE,
        value=created.token,
        max_age=settings.cookie_max_age,
        path="/",
        samesite="lax",
        secure=settings.is_production,
        httponly=False,
    )

    base_url = public_base_url(request)
    return PasteCreatedResponse(
        id=created.id,
        url=f"{base_url}/{created.id}",
        raw=f"{base_url}/raw/{created.id}",
        token=created.token,
    )


@router.get(
    "/get/{paste_id}",
    response_model=PasteResponse,
    responses={
        404: {"description": "Paste not found", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Get a paste as JSON",
)
async def get_paste(
    paste_id: str,
    service: PasteService = Depends(get_paste_service),
) -> PasteResponse:
    record = await service.get_paste(paste_id)
    return PasteResponse(
        id=record.id,
        title=record.title,
        content=record.content,
        created_at=record.created_at,
    )


@router.post(
    "/is_owner/{paste_id}",
    response_model=OwnerResponse,
    summary="Check whether a token owns a paste",
)
async def is_owner(
    paste_id: str,
    request: Request,
    owner_token: Optional[str] = Cookie(default=None),
    x_owner_token: Optional[str] = Header(default=None),
    service: PasteService = Depends(get_paste_service),
) -> OwnerResponse:
    """
    Answers {"owner": false} for every failure: missing token, unknown paste,
    malformed body or storage errors.
    """
    body_token = await read_body_token(request)
    token = resolve_owner_token(body_token, owner_token, x_owner_token)
    return OwnerResponse(owner=await service.is_owner(paste_id, token))


@router.post(
    "/edit/{paste_id}",
    response_model=EditResponse,
    responses={
        400: {"description": "Empty or oversized content", "model": ErrorResponse},
        403: {"description": "Missing or wrong owner token", "model": ErrorResponse},
        404: {"description": "Paste not found", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Edit a paste you own",
)
async def edit_paste(
    paste_id: str,
    payload: Optional[PasteEditRequest] = Body(default=None),
    owner_token: Optional[str] = Cookie(default=None),
    service: PasteService = Depends(get_paste_service),
) -> EditResponse:
    payload = payload or PasteEditRequest()
    token = resolve_owner_token(payload.token, owner_token)
    await service.edit_paste(
        paste_id=paste_id,
        title=payload.title,
        content=payload.content,
        token=token,
    )
    return EditResponse(ok=True)


@router.post(
    "/profile",
    response_model=ProfileResponse,
    responses={
        400: {"description": "Missing owner token", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="List pastes owned by a token",
)
async def profile(
    payload: Optional[TokenRequest] = Body(default=None),
    owner_token: Optional[str] = Cookie(default=None),
    service: PasteService = Depends(get_paste_service),
) -> ProfileResponse:
    payload = payload or TokenRequest()
    token = resolve_owner_token(payload.token, owner_token)
    try:
        results = await service.list_by_owner(token)
    except TokenRequiredError as exc:
        # Listing reports a missing token as a bad request, not 403
        raise ValidationError(message=exc.message, field="token") from exc
    return ProfileResponse(results=results)
