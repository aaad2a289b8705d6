"""Create pastes table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `pastes` table with its named primary key and the two
       listing indexes. Column docs live in freepaste/models/paste.py.

Rollback: downgrade() drops the table (destructive — all pastes lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "pastes",
        sa.Column(
            "id",
            sa.String(10),
            nullable=False,
            comment="Public short identifier, [a-zA-Z0-9]{10}",
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            comment="Paste body, at most 5 MiB of UTF-8",
        ),
        sa.Column(
            "owner_token",
            sa.String(64),
            nullable=False,
            comment="Hex bearer token granting edit and listing rights",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="When this paste was created (UTC)",
        ),
        # Named so id collisions are recognizable on every dialect
        sa.PrimaryKeyConstraint("id", name="pastes_pkey"),
    )

    op.create_index("idx_pastes_created_at", "pastes", ["created_at"])
    op.create_index("idx_pastes_owner_token", "pastes", ["owner_token"])


def downgrade() -> None:
    op.drop_index("idx_pastes_owner_token", table_name="pastes")
    op.drop_index("idx_pastes_created_at", table_name="pastes")
    op.drop_table("pastes")
