"""006: create vote_orders table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # vote_package_id is a plain column: replacing packages must not touch orders.
    op.execute("""
        CREATE TABLE vote_orders (
            id                  VARCHAR(32)     PRIMARY KEY,
            user_id             VARCHAR(64)     NOT NULL,
            contest_id          VARCHAR(32)     NOT NULL REFERENCES contests (id),
            vote_package_id     VARCHAR(32),
            payment_reference   VARCHAR(64)     NOT NULL,
            total_amount_cents  BIGINT          NOT NULL,
            platform_fee_cents  BIGINT          NOT NULL DEFAULT 0,
            currency            VARCHAR(3)      NOT NULL DEFAULT 'NGN',
            vote_count          INT             NOT NULL,
            votes_used          INT             NOT NULL DEFAULT 0,
            votes_remaining     INT             NOT NULL,
            payment_status      VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            payment_method      VARCHAR(30),
            expires_at          TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_vote_orders_payment_reference UNIQUE (payment_reference),
            CONSTRAINT ck_vote_orders_vote_count    CHECK (vote_count > 0),
            CONSTRAINT ck_vote_orders_used          CHECK (votes_used >= 0),
            CONSTRAINT ck_vote_orders_remaining     CHECK (votes_remaining >= 0),
            CONSTRAINT ck_vote_orders_balance       CHECK (votes_used + votes_remaining = vote_count),
            CONSTRAINT ck_vote_orders_amount        CHECK (total_amount_cents >= 0),
            CONSTRAINT ck_vote_orders_fee           CHECK (
                platform_fee_cents >= 0 AND platform_fee_cents <= total_amount_cents
            ),
            CONSTRAINT ck_vote_orders_status        CHECK (
                payment_status IN ('PENDING', 'COMPLETED', 'FAILED')
            )
        );
    """)
    op.execute("""
        CREATE INDEX idx_vote_orders_user_contest
        ON vote_orders (user_id, contest_id, created_at DESC);
    """)
    op.execute("""
        CREATE INDEX idx_vote_orders_contest_completed
        ON vote_orders (contest_id)
        WHERE payment_status = 'COMPLETED';
    """)
    op.execute("""
        CREATE TRIGGER trg_vote_orders_updated_at
            BEFORE UPDATE ON vote_orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS vote_orders CASCADE;")
