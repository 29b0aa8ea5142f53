"""VoteOrderRepository and PlatformFeeProvider — raw SQL persistence.

Payment transitions are conditional updates on payment_status = 'PENDING'
so a replayed or concurrent callback cannot move an order twice.
"""

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cv_order.domain.models import VoteOrder

logger = logging.getLogger(__name__)

PLATFORM_FEE_SETTING_KEY = "financial.defaultPlatformFeePercentage"

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_ORDER_COLUMNS = """
    id, user_id, contest_id, vote_package_id, payment_reference,
    total_amount_cents, platform_fee_cents, currency,
    vote_count, votes_used, votes_remaining,
    payment_status, payment_method, expires_at, created_at, updated_at
"""

_INSERT_ORDER_SQL = text(f"""
    INSERT INTO vote_orders (id, user_id, contest_id, vote_package_id, payment_reference,
        total_amount_cents, platform_fee_cents, currency,
        vote_count, votes_used, votes_remaining, payment_status, expires_at)
    VALUES (:id, :user_id, :contest_id, CAST(:vote_package_id AS VARCHAR), :payment_reference,
        :total_amount_cents, :platform_fee_cents, :currency,
        :vote_count, 0, :vote_count, 'PENDING', CAST(:expires_at AS TIMESTAMPTZ))
    RETURNING {_ORDER_COLUMNS}
""")

_GET_ORDER_SQL = text(f"SELECT {_ORDER_COLUMNS} FROM vote_orders WHERE id = :id")

_MARK_PAYMENT_SQL = text(f"""
    UPDATE vote_orders
    SET payment_status = :status,
        payment_method = CAST(:payment_method AS VARCHAR),
        updated_at = NOW()
    WHERE id = :id AND payment_status = 'PENDING'
    RETURNING {_ORDER_COLUMNS}
""")

_LIST_COMPLETED_SQL = text(f"""
    SELECT {_ORDER_COLUMNS}
    FROM vote_orders
    WHERE user_id = :user_id
      AND contest_id = :contest_id
      AND payment_status = 'COMPLETED'
    ORDER BY created_at DESC, id DESC
""")

_GET_SETTING_SQL = text("SELECT value FROM platform_settings WHERE key = :key")


def _row_to_order(row: Any) -> VoteOrder:
    return VoteOrder(
        id=row.id,
        user_id=row.user_id,
        contest_id=row.contest_id,
        vote_package_id=row.vote_package_id,
        payment_reference=row.payment_reference,
        total_amount_cents=row.total_amount_cents,
        platform_fee_cents=row.platform_fee_cents,
        currency=row.currency,
        vote_count=row.vote_count,
        votes_used=row.votes_used,
        votes_remaining=row.votes_remaining,
        payment_status=row.payment_status,
        payment_method=row.payment_method,
        expires_at=row.expires_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class VoteOrderRepository:
    """Concrete implementation of VoteOrderRepositoryProtocol using raw SQL."""

    async def insert_order(self, db: AsyncSession, order: VoteOrder) -> VoteOrder:
        row = (
            await db.execute(
                _INSERT_ORDER_SQL,
                {
                    "id": order.id,
                    "user_id": order.user_id,
                    "contest_id": order.contest_id,
                    "vote_package_id": order.vote_package_id,
                    "payment_reference": order.payment_reference,
                    "total_amount_cents": order.total_amount_cents,
                    "platform_fee_cents": order.platform_fee_cents,
                    "currency": order.currency,
                    "vote_count": order.vote_count,
                    "expires_at": order.expires_at,
                },
            )
        ).fetchone()
        return _row_to_order(row)

    async def get_order(self, db: AsyncSession, order_id: str) -> VoteOrder | None:
        row = (await db.execute(_GET_ORDER_SQL, {"id": order_id})).fetchone()
        return _row_to_order(row) if row else None

    async def mark_payment(
        self,
        db: AsyncSession,
        order_id: str,
        status: str,
        payment_method: str | None,
    ) -> VoteOrder | None:
        row = (
            await db.execute(
                _MARK_PAYMENT_SQL,
                {"id": order_id, "status": status, "payment_method": payment_method},
            )
        ).fetchone()
        return _row_to_order(row) if row else None

    async def list_completed_orders(
        self, db: AsyncSession, user_id: str, contest_id: str
    ) -> list[VoteOrder]:
        result = await db.execute(
            _LIST_COMPLETED_SQL, {"user_id": user_id, "contest_id": contest_id}
        )
        return [_row_to_order(row) for row in result.fetchall()]


class PlatformFeeProvider:
    """Platform fee percentage from platform_settings, else the configured default."""

    async def fee_percentage(self, db: AsyncSession) -> float:
        value = (await db.execute(_GET_SETTING_SQL, {"key": PLATFORM_FEE_SETTING_KEY})).scalar()
        if value is None:
            return settings.DEFAULT_PLATFORM_FEE_PERCENTAGE
        try:
            pct = float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed %s=%r", PLATFORM_FEE_SETTING_KEY, value)
            return settings.DEFAULT_PLATFORM_FEE_PERCENTAGE
        if not 0 <= pct <= 100:
            logger.warning("Ignoring out-of-range %s=%r", PLATFORM_FEE_SETTING_KEY, value)
            return settings.DEFAULT_PLATFORM_FEE_PERCENTAGE
        return pct
