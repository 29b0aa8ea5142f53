"""004: create contestants table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE contestants (
            id              VARCHAR(32)     PRIMARY KEY,
            contest_id      VARCHAR(32)     NOT NULL REFERENCES contests (id) ON DELETE CASCADE,
            name            VARCHAR(200)    NOT NULL,
            contest_number  VARCHAR(32)     NOT NULL,
            status          VARCHAR(20)     NOT NULL DEFAULT 'ACTIVE',
            bio             TEXT,
            image_url       TEXT,
            instagram_url   TEXT,
            twitter_url     TEXT,
            facebook_url    TEXT,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_contestants_contest_number UNIQUE (contest_id, contest_number),
            CONSTRAINT ck_contestants_status CHECK (
                status IN ('ACTIVE', 'DISQUALIFIED', 'WITHDRAWN')
            )
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS contestants CASCADE;")
