"""003: create contests table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE contests (
            id                          VARCHAR(32)     PRIMARY KEY,
            owner_id                    VARCHAR(64)     NOT NULL,
            title                       TEXT            NOT NULL,
            voting_type                 VARCHAR(10)     NOT NULL,
            voting_start_date           TIMESTAMPTZ,
            voting_end_date             TIMESTAMPTZ,
            allow_guest_voting          BOOLEAN         NOT NULL DEFAULT FALSE,
            allow_multiple_votes        BOOLEAN         NOT NULL DEFAULT TRUE,
            max_votes_per_user          INT,
            vote_packages_enabled       BOOLEAN         NOT NULL DEFAULT FALSE,
            default_vote_price_cents    BIGINT,
            show_live_results           BOOLEAN         NOT NULL DEFAULT TRUE,
            show_voter_names            BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_contests_voting_type  CHECK (voting_type IN ('FREE', 'PAID')),
            CONSTRAINT ck_contests_max_votes    CHECK (max_votes_per_user IS NULL OR max_votes_per_user >= 1),
            CONSTRAINT ck_contests_window       CHECK (
                voting_start_date IS NULL OR voting_end_date IS NULL
                OR voting_start_date <= voting_end_date
            ),
            CONSTRAINT ck_contests_paid_price   CHECK (
                voting_type <> 'PAID' OR vote_packages_enabled
                OR (default_vote_price_cents IS NOT NULL AND default_vote_price_cents > 0)
            )
        );
    """)
    op.execute("CREATE INDEX idx_contests_owner ON contests (owner_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_contests_updated_at
            BEFORE UPDATE ON contests
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS contests CASCADE;")
