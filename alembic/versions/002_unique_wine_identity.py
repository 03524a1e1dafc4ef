"""Unique wine identity - one catalog row per name, producer and vintage.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

Concurrent scans of the same label can both miss in resolution and both
insert; the index makes the second insert fail so the caller links instead.
Comparison is case-insensitive and a missing vintage counts as its own value.
"""
from typing import Sequence, Union

from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE UNIQUE INDEX IF NOT EXISTS idx_wines_identity
        ON wines(LOWER(name), LOWER(producer_name), IFNULL(vintage, 0))
    """)


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS idx_wines_identity")
