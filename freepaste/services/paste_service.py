"""
FreePaste — Paste Service (Business Logic)
============================================

What:  Creation, retrieval, ownership checks, owner edits and owner listings.
How:   Written once against the PasteRepository interface; the concrete
       adapter is injected by the application lifespan.
Who:   Called by route handlers through the get_paste_service dependency.

Creation Flow (POST /api/new):
    ┌──────────┐    ┌─────────────┐    ┌─────────────┐    ┌──────────────┐
    │ Validate │───▶│ Mint token  │───▶│ Fresh id +  │───▶│  Return      │
    │ content  │    │ (once)      │    │ insert      │    │  id + token  │
    └──────────┘    └─────────────┘    └──────┬──────┘    └──────────────┘
                                              │ DuplicatePasteIdError
                                              └── retry, up to 5 attempts total
                                                  → IdExhaustedError

    The retry loop only reacts to collisions the storage constraint reports
    at insert time. Concurrent creators racing on one id are separated by the
    constraint: exactly one insert wins, the other retries with a new id.

Edit Flow (POST /api/edit/{id}):
    content checks → token present → paste exists → token matches → update
"""

import logging
import secrets
from datetime import datetime, timezone
from typing import List, Optional

from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from freepaste.config import Settings, settings as default_settings
from freepaste.exceptions import (
    ContentTooLargeError,
    DuplicatePasteIdError,
    EmptyContentError,
    ForbiddenError,
    IdExhaustedError,
    NotFoundError,
    TokenRequiredError,
)
from freepaste.repositories.base import PasteRepository
from freepaste.schemas.paste import CreatedPaste, PasteRecord, PasteSummary
from freepaste.services.id_generator import generate_id, generate_token

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled"


def normalize_title(title: Optional[str]) -> str:
    """Absent or empty titles become 'Untitled'; anything else is kept verbatim."""
    return title if title else DEFAULT_TITLE


def tokens_match(stored: str, provided: str) -> bool:
    # Constant-time; compared as bytes so non-ASCII input cannot raise TypeError
    return secrets.compare_digest(stored.encode("utf-8"), provided.encode("utf-8"))


class PasteService:
    """
    Business logic layer for paste operations.

    Responsibilities:
        - create_paste(): validation, token minting, id allocation with retry
        - get_paste() / get_raw_content(): lookups with not-found handling
        - is_owner(): safe, never-raising ownership probe
        - edit_paste(): authorized title/content overwrite
        - list_by_owner(): owner's pastes, newest first

    Error Handling Strategy:
        Repositories already translate driver errors into StorageError and
        NotFoundError; this layer adds the validation and authorization errors
        and lets everything else propagate to the global handlers.
    """

    def __init__(self, repository: PasteRepository, config: Optional[Settings] = None):
        self.repository = repository
        self.config = config or default_settings

    # ── Validation ────────────────────────────────────────────────────────
    def validate_content(self, content: Optional[str]) -> int:
        """
        Check content presence and size.

        Returns:
            UTF-8 byte length of the content (used for logging).

        Raises:
            EmptyContentError: content is None, empty, or whitespace only
            ContentTooLargeError: UTF-8 size exceeds MAX_CONTENT_BYTES
        """
        if content is None or not content.strip():
            raise EmptyContentError()

        size = len(content.encode("utf-8"))
        if size > self.config.max_content_bytes:
            raise ContentTooLargeError(size=size, limit=self.config.max_content_bytes)
        return size

    # ── Create ────────────────────────────────────────────────────────────
    async def create_paste(self, title: Optional[str], content: Optional[str]) -> CreatedPaste:
        """
        Validate and store a new paste under a freshly generated id.

        Args:
            title: Optional title ('Untitled' when absent or empty)
            content: Paste body

        Returns:
            CreatedPaste with the new id and the owner token. This is the only
            place a token is minted.

        Raises:
            EmptyContentError / ContentTooLargeError: invalid content (→ 400)
            IdExhaustedError: every attempt collided (→ 500)
            StorageError: any other storage failure, not retried (→ 500)
        """
        size = self.validate_content(content)
        title = normalize_title(title)
        token = generate_token()
        created_at = datetime.now(timezone.utc)

        record: Optional[PasteRecord] = None
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(DuplicatePasteIdError),
                stop=stop_after_attempt(self.config.id_max_attempts),
                before_sleep=before_sleep_log(logger, logging.WARNING),
            ):
                with attempt:
                    record = PasteRecord(
                        id=generate_id(),
                        title=title,
                        content=content,
                        owner_token=token,
                        created_at=created_at,
                    )
                    await self.repository.insert(record)
        except RetryError:
            logger.error(
                "Gave up allocating a paste id after %d collisions",
                self.config.id_max_attempts,
            )
            raise IdExhaustedError(attempts=self.config.id_max_attempts)

        logger.info(
            "Saved paste id=%s title=%r size=%d owner_token=%s...",
            record.id,
            title,
            size,
            token[:8],
        )
        return CreatedPaste(id=record.id, token=token)

    # ── Read ──────────────────────────────────────────────────────────────
    async def get_paste(self, paste_id: str) -> PasteRecord:
        record = await self.repository.find_by_id(paste_id)
        if record is None:
            raise NotFoundError(resource="paste", resource_id=paste_id)
        return record

    async def get_raw_content(self, paste_id: str) -> str:
        record = await self.get_paste(paste_id)
        return record.content

    async def is_owner(self, paste_id: str, token: Optional[str]) -> bool:
        """
        Whether `token` is the owner token of `paste_id`.

        Never raises: a missing token, a missing paste, or a storage failure
        all answer False. A negative answer only hides edit controls.
        """
        if not token:
            return False
        try:
            record = await self.repository.find_by_id(paste_id)
        except Exception as e:
            logger.warning("Ownership check for %s failed: %s", paste_id, str(e))
            return False
        if record is None:
            return False
        return tokens_match(record.owner_token, token)

    # ── Edit ──────────────────────────────────────────────────────────────
    async def edit_paste(
        self,
        paste_id: str,
        title: Optional[str],
        content: Optional[str],
        token: Optional[str],
    ) -> None:
        """
        Overwrite title and content of a paste owned by `token`.

        Raises (in check order):
            EmptyContentError / ContentTooLargeError (→ 400)
            TokenRequiredError: no token supplied (→ 403)
            NotFoundError: paste does not exist (→ 404)
            ForbiddenError: token does not match (→ 403)
            StorageError: update failed (→ 500)
        """
        self.validate_content(content)
        if not token:
            raise TokenRequiredError(context={"paste_id": paste_id})

        record = await self.get_paste(paste_id)
        if not tokens_match(record.owner_token, token):
            logger.warning("Rejected edit of paste %s: token mismatch", paste_id)
            raise ForbiddenError(paste_id=paste_id)

        await self.repository.update_content(paste_id, normalize_title(title), content)
        logger.info("Paste %s updated by owner", paste_id)

    # ── List ──────────────────────────────────────────────────────────────
    async def list_by_owner(self, token: Optional[str]) -> List[PasteSummary]:
        if not token:
            raise TokenRequiredError()
        return await self.repository.list_by_owner_token(token)
