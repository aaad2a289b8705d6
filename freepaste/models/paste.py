"""
FreePaste — Paste SQLAlchemy Model
=====================================

What:  ORM model representing the `pastes` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by SqlPasteRepository for CRUD operations and by Alembic.

Table Design Rationale:
    - id: 10-char public identifier, primary key. The PK constraint is the only
      uniqueness guarantee for ids; it is named explicitly (`pastes_pkey`) so a
      collision can be told apart from other integrity failures on every dialect.
    - owner_token: 64-char hex bearer credential, indexed for profile listings.
    - created_at: UTC timestamp, set in Python so every backend stores the same
      microsecond-precision value.

    Generic SQLAlchemy types are used (not dialect types) so the same model
    runs on SQLite and PostgreSQL.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, PrimaryKeyConstraint, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from freepaste.database import Base


class Paste(Base):
    """
    Represents a stored paste.

    Lifecycle:
        1. Inserted by PasteService.create_paste with a fresh id and token
        2. title/content overwritten by an authorized edit
        3. Never deleted; id, owner_token and created_at never change

    Query Patterns:
        - Get single paste: WHERE id = :id            → primary key
        - Profile listing:  WHERE owner_token = :tok
                            ORDER BY created_at DESC  → idx_pastes_owner_token
    """

    __tablename__ = "pastes"

    id: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        comment="Public short identifier, [a-zA-Z0-9]{10}",
    )

    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="Untitled",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Paste body, at most 5 MiB of UTF-8",
    )

    owner_token: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Hex bearer token granting edit and listing rights",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When this paste was created (UTC)",
    )

    __table_args__ = (
        PrimaryKeyConstraint("id", name="pastes_pkey"),
        Index("idx_pastes_created_at", "created_at"),
        Index("idx_pastes_owner_token", "owner_token"),
    )

    def __repr__(self) -> str:
        return f"<Paste(id={self.id}, title='{self.title}', created_at='{self.created_at}')>"
