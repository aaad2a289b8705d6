"""
FreePaste — Shared Route Dependencies
=======================================

What:  FastAPI dependencies and helpers shared by the route modules:
       service lookup, owner-token resolution, and public link building.
"""

import json
import logging
from typing import Optional

from fastapi import Request

from freepaste.config import settings
from freepaste.services.paste_service import PasteService

logger = logging.getLogger(__name__)

OWNER_COOKIE = "owner_token"
OWNER_HEADER = "x-owner-token"


def get_paste_service(request: Request) -> PasteService:
    """
    Return the PasteService built by the application lifespan.

    Usage in a route:
        service: PasteService = Depends(get_paste_service)
    """
    return request.app.state.paste_service


def resolve_owner_token(
    body_token: Optional[str],
    cookie_token: Optional[str],
    header_token: Optional[str] = None,
) -> Optional[str]:
    """
    Pick the owner token from the first non-empty source.

    Precedence: request body > owner_token cookie > x-owner-token header.
    Only /api/is_owner passes a header value.
    """
    for candidate in (body_token, cookie_token, header_token):
        if candidate:
            return candidate
    return None


async def read_body_token(request: Request) -> Optional[str]:
    """
    Best-effort read of `{"token": ...}` from a JSON body.

    Used by /api/is_owner, which must answer even for empty or malformed
    bodies; any parse problem yields None.
    """
    raw = await request.body()
    if not raw:
        return None
    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError):
        logger.debug("Ignoring non-JSON body on %s", request.url.path)
        return None
    if isinstance(payload, dict) and isinstance(payload.get("token"), str):
        return payload["token"]
    return None


def public_base_url(request: Request) -> str:
    """PUBLIC_BASE_URL when configured, otherwise the URL the client used to reach us."""
    if settings.public_base_url:
        return settings.public_base_url
    return str(request.base_url).rstrip("/")
