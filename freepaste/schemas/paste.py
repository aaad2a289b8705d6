"""
FreePaste — Pydantic Request/Response Schemas
================================================

What:  Pydantic models defining the API contract and the records passed between
       repositories and the service layer.
How:   FastAPI uses the request models to parse JSON bodies and the response
       models to serialize results and generate the OpenAPI document.

Design Decision:
    Request fields are optional even where the API requires them (content).
    A missing content must produce the same 400 "empty content" error as a
    blank one, so presence is checked by PasteService, not by Pydantic's 422.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Domain Records — what repositories return
# ══════════════════════════════════════════════════════════════════════════


class PasteRecord(BaseModel):
    """A stored paste, identical for every storage backend."""
    id: str
    title: str
    content: str
    owner_token: str
    created_at: datetime

    model_config = {"from_attributes": True}


class PasteSummary(BaseModel):
    """
    What:  Compact paste representation for the owner's profile listing.
    Why:   Listing must never carry content or the token back to the client.
    """
    id: str = Field(description="Paste identifier")
    title: str = Field(description="Paste title")
    created_at: datetime = Field(description="Creation timestamp (UTC ISO 8601)")

    model_config = {"from_attributes": True}


class CreatedPaste(BaseModel):
    """Result of PasteService.create_paste: the new id and the minted token."""
    id: str
    token: str


# ══════════════════════════════════════════════════════════════════════════
# Request Models — what clients send
# ══════════════════════════════════════════════════════════════════════════


class PasteCreateRequest(BaseModel):
    title: Optional[str] = Field(default=None, description="Optional title, defaults to 'Untitled'")
    content: Optional[str] = Field(default=None, description="Paste body (required, max 5MB)")


class PasteEditRequest(BaseModel):
    title: Optional[str] = Field(default=None, description="New title, defaults to 'Untitled'")
    content: Optional[str] = Field(default=None, description="New paste body (required, max 5MB)")
    token: Optional[str] = Field(
        default=None,
        description="Owner token; falls back to the owner_token cookie",
    )


class TokenRequest(BaseModel):
    token: Optional[str] = Field(
        default=None,
        description="Owner token; falls back to the owner_token cookie",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models — what the API returns
# ══════════════════════════════════════════════════════════════════════════


class PasteCreatedResponse(BaseModel):
    """
    Returned by POST /api/new.

    The token is also set as the owner_token cookie; returning it in the body
    lets clients that do not keep cookies store it themselves.
    """
    id: str = Field(description="New paste identifier")
    url: str = Field(description="Absolute URL of the paste view page")
    raw: str = Field(description="Absolute URL of the raw text view")
    token: str = Field(description="Owner token for later edits and listing")


class PasteResponse(BaseModel):
    """Returned by GET /api/get/{id}. The owner token is never included."""
    id: str
    title: str
    content: str
    created_at: datetime = Field(description="Creation timestamp (UTC ISO 8601)")


class OwnerResponse(BaseModel):
    owner: bool


class EditResponse(BaseModel):
    ok: bool = True


class ProfileResponse(BaseModel):
    results: List[PasteSummary] = Field(description="Pastes owned by the token, newest first")


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models — Consistent error format across all endpoints
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "paste with ID 'abcdefghij' was not found",
            "request_id": "550e8400"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    storage_backend: str = Field(description="Configured backend: sql or mongo")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
