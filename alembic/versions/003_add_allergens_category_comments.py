"""Add allergens, category and user comments to beers table.

Revision ID: 003
Revises: 002
Create Date: 2026-10-19

allergens and category come from the feed. user_comments is user state
and, like rating, is never written by a feed upsert.
"""
from typing import Sequence, Union

from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

NEW_COLUMNS = {
    "allergens": "TEXT NOT NULL DEFAULT ''",
    "category": "TEXT NOT NULL DEFAULT 'beer'",
    "user_comments": "TEXT NOT NULL DEFAULT ''",
}


def upgrade() -> None:
    conn = op.get_bind()
    raw_conn = conn.connection.dbapi_connection

    cursor = raw_conn.execute("PRAGMA table_info(beers)")
    existing_columns = {row[1] for row in cursor.fetchall()}

    for column, definition in NEW_COLUMNS.items():
        if column not in existing_columns:
            raw_conn.execute(f"ALTER TABLE beers ADD COLUMN {column} {definition}")
    raw_conn.execute("CREATE INDEX IF NOT EXISTS idx_beers_category ON beers(category)")


def downgrade() -> None:
    pass
