"""005: create vote_packages table

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE vote_packages (
            id              VARCHAR(32)     PRIMARY KEY,
            contest_id      VARCHAR(32)     NOT NULL REFERENCES contests (id) ON DELETE CASCADE,
            name            VARCHAR(100)    NOT NULL,
            description     TEXT,
            vote_count      INT             NOT NULL,
            price_cents     BIGINT          NOT NULL,
            sort_order      INT             NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_vote_packages_vote_count  CHECK (vote_count > 0),
            CONSTRAINT ck_vote_packages_price       CHECK (price_cents >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_vote_packages_contest ON vote_packages (contest_id, sort_order);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS vote_packages CASCADE;")
