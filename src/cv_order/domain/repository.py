"""VoteOrderRepository Protocol — the service depends on this, tests inject mocks."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_order.domain.models import VoteOrder


class VoteOrderRepositoryProtocol(Protocol):
    async def insert_order(self, db: AsyncSession, order: VoteOrder) -> VoteOrder: ...

    async def get_order(self, db: AsyncSession, order_id: str) -> VoteOrder | None: ...

    async def mark_payment(
        self,
        db: AsyncSession,
        order_id: str,
        status: str,
        payment_method: str | None,
    ) -> VoteOrder | None:
        """PENDING -> status; None when the order is no longer PENDING."""
        ...

    async def list_completed_orders(
        self, db: AsyncSession, user_id: str, contest_id: str
    ) -> list[VoteOrder]: ...


class PlatformFeeProviderProtocol(Protocol):
    async def fee_percentage(self, db: AsyncSession) -> float: ...
