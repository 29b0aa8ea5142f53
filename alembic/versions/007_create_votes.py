"""007: create votes table

Revision ID: 007
Revises: 006
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE votes (
            id                  VARCHAR(32)     PRIMARY KEY,
            contest_id          VARCHAR(32)     NOT NULL REFERENCES contests (id),
            contestant_id       VARCHAR(32)     NOT NULL REFERENCES contestants (id),
            user_id             VARCHAR(64),
            vote_order_id       VARCHAR(32)     REFERENCES vote_orders (id),
            vote_type           VARCHAR(10)     NOT NULL,
            ip_address          VARCHAR(64)     NOT NULL,
            user_agent          TEXT            NOT NULL,
            exclusive_voter_id  VARCHAR(64),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_votes_vote_type   CHECK (vote_type IN ('FREE', 'PAID')),
            CONSTRAINT ck_votes_paid_order  CHECK (
                (vote_type = 'PAID' AND vote_order_id IS NOT NULL AND user_id IS NOT NULL)
                OR (vote_type = 'FREE' AND vote_order_id IS NULL)
            ),
            CONSTRAINT ck_votes_exclusive   CHECK (
                exclusive_voter_id IS NULL OR exclusive_voter_id = user_id
            )
        );
    """)
    # Member: one FREE vote per contestant (PAID votes may repeat).
    op.execute("""
        CREATE UNIQUE INDEX uq_votes_member_free_contestant
        ON votes (user_id, contestant_id)
        WHERE vote_type = 'FREE' AND user_id IS NOT NULL;
    """)
    # Guest: one vote per IP per contest.
    op.execute("""
        CREATE UNIQUE INDEX uq_votes_guest_ip
        ON votes (contest_id, ip_address)
        WHERE user_id IS NULL;
    """)
    # Single-contestant contests: exclusive_voter_id is set, NULLs never collide.
    op.execute("""
        CREATE UNIQUE INDEX uq_votes_exclusive_voter
        ON votes (contest_id, exclusive_voter_id);
    """)
    op.execute("CREATE INDEX idx_votes_contest_user ON votes (contest_id, user_id);")
    op.execute("CREATE INDEX idx_votes_contestant ON votes (contestant_id);")
    # Append-only: votes are never updated.
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_votes_immutable()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION 'votes are append-only';
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER trg_votes_immutable
            BEFORE UPDATE ON votes
            FOR EACH ROW EXECUTE FUNCTION fn_votes_immutable();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS votes CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_votes_immutable();")
