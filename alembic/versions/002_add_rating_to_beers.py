"""Add user star rating column to beers table.

Revision ID: 002
Revises: 001
Create Date: 2026-10-03

The rating is user state: feed upserts never write it.
"""
from typing import Sequence, Union

from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    conn = op.get_bind()
    raw_conn = conn.connection.dbapi_connection

    # Check if column already exists (idempotent)
    cursor = raw_conn.execute("PRAGMA table_info(beers)")
    existing_columns = {row[1] for row in cursor.fetchall()}

    if "rating" not in existing_columns:
        raw_conn.execute("ALTER TABLE beers ADD COLUMN rating INTEGER NOT NULL DEFAULT 0")
    raw_conn.execute("CREATE INDEX IF NOT EXISTS idx_beers_rating ON beers(rating)")


def downgrade() -> None:
    # SQLite doesn't support DROP COLUMN on older versions; column remains but is harmless if unused.
    pass
