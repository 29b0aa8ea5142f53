"""VoteOrderApplicationService — vote purchases and payment confirmation.

Lifecycle: purchase creates a PENDING order; the payment provider callback
moves it to COMPLETED or FAILED exactly once. Only COMPLETED orders can be
drawn on by paid votes.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cv_common.datetime_utils import days_from, utc_now
from src.cv_common.enums import NotificationType, PaymentStatus, RejectReason
from src.cv_common.errors import (
    ContestNotFoundError,
    ForbiddenError,
    InvalidPurchaseError,
    PaymentAlreadyFailedError,
    PaymentReferenceMismatchError,
    VoteOrderNotFoundError,
    VotePackageNotFoundError,
    VoteRejectedError,
)
from src.cv_common.id_generator import generate_id
from src.cv_common.money import percentage_of
from src.cv_contest.domain.models import Contest
from src.cv_contest.domain.repository import ContestRepositoryProtocol
from src.cv_contest.infrastructure.persistence import ContestRepository
from src.cv_gateway.user.db_models import UserModel
from src.cv_notification.application.dispatcher import NotificationDispatcher, get_dispatcher
from src.cv_notification.domain.models import NotificationMessage
from src.cv_order.application.schemas import (
    MyVoteOrdersResponse,
    PaymentCallbackResponse,
    PurchaseVotesRequest,
    VoteOrderResponse,
)
from src.cv_order.domain.models import VoteOrder
from src.cv_order.domain.repository import (
    PlatformFeeProviderProtocol,
    VoteOrderRepositoryProtocol,
)
from src.cv_order.infrastructure.persistence import PlatformFeeProvider, VoteOrderRepository
from src.cv_voting.domain.eligibility import check_voting_window

logger = logging.getLogger(__name__)


class VoteOrderApplicationService:
    def __init__(
        self,
        repo: VoteOrderRepositoryProtocol | None = None,
        contest_repo: ContestRepositoryProtocol | None = None,
        fee_provider: PlatformFeeProviderProtocol | None = None,
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        self._repo: VoteOrderRepositoryProtocol = repo or VoteOrderRepository()
        self._contests: ContestRepositoryProtocol = contest_repo or ContestRepository()
        self._fees: PlatformFeeProviderProtocol = fee_provider or PlatformFeeProvider()
        self._dispatcher = dispatcher

    async def _load_contest(self, db: AsyncSession, contest_id: str) -> Contest:
        contest = await self._contests.get_contest(db, contest_id)
        if contest is None:
            raise ContestNotFoundError(contest_id)
        return contest

    async def _price(
        self, db: AsyncSession, contest: Contest, req: PurchaseVotesRequest
    ) -> tuple[int, int, str | None]:
        """(vote_count, total_amount_cents, vote_package_id) for the request."""
        if contest.vote_packages_enabled:
            if req.vote_package_id is None:
                raise InvalidPurchaseError("This contest sells votes in packages only")
            package = await self._contests.get_vote_package(db, req.vote_package_id)
            if package is None or package.contest_id != contest.id:
                raise VotePackageNotFoundError(req.vote_package_id)
            return package.vote_count, package.price_cents, package.id

        if req.vote_count is None:
            raise InvalidPurchaseError("This contest has no vote packages; send vote_count")
        if not contest.default_vote_price_cents:
            raise InvalidPurchaseError("This contest has no vote price configured")
        return req.vote_count, req.vote_count * contest.default_vote_price_cents, None

    async def purchase(
        self, db: AsyncSession, user: UserModel, req: PurchaseVotesRequest
    ) -> VoteOrderResponse:
        try:
            contest = await self._load_contest(db, req.contest_id)
            if not contest.is_paid:
                raise VoteRejectedError(RejectReason.WRONG_VOTING_TYPE)
            now = utc_now()
            window = check_voting_window(contest, now)
            if window is not None:
                raise VoteRejectedError(window)

            vote_count, amount, package_id = await self._price(db, contest, req)
            fee_pct = await self._fees.fee_percentage(db)
            order_id = generate_id()
            order = await self._repo.insert_order(
                db,
                VoteOrder(
                    id=order_id,
                    user_id=str(user.id),
                    contest_id=contest.id,
                    vote_package_id=package_id,
                    payment_reference=f"vote_{order_id}",
                    total_amount_cents=amount,
                    platform_fee_cents=percentage_of(amount, fee_pct),
                    currency=settings.CURRENCY,
                    vote_count=vote_count,
                    votes_remaining=vote_count,
                    expires_at=days_from(now, settings.VOTE_ORDER_TTL_DAYS),
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Vote order %s created: %d votes, %d cents (fee %d)",
            order.id,
            order.vote_count,
            order.total_amount_cents,
            order.platform_fee_cents,
        )
        return VoteOrderResponse.from_domain(order)

    async def handle_payment_callback(
        self,
        db: AsyncSession,
        order_id: str,
        payment_reference: str,
        status: str,
        channel: str | None,
    ) -> PaymentCallbackResponse:
        updated: VoteOrder | None = None
        contest: Contest | None = None
        try:
            order = await self._repo.get_order(db, order_id)
            if order is None:
                raise VoteOrderNotFoundError(order_id)
            if order.payment_reference != payment_reference:
                raise PaymentReferenceMismatchError()

            if order.payment_status == PaymentStatus.PENDING.value:
                method = channel or ("card" if status == PaymentStatus.COMPLETED.value else None)
                updated = await self._repo.mark_payment(db, order.id, status, method)
                if updated is None:
                    # Another callback won the race; report what it wrote.
                    order = await self._repo.get_order(db, order_id) or order
                else:
                    contest = await self._contests.get_contest(db, updated.contest_id)

            if updated is not None:
                await db.commit()
            else:
                await db.rollback()
        except Exception:
            await db.rollback()
            raise

        if updated is not None:
            logger.info("Vote order %s payment %s", updated.id, updated.payment_status)
            if updated.is_completed:
                self._notify_completed(updated, contest)
            return PaymentCallbackResponse(
                order=VoteOrderResponse.from_domain(updated), already_processed=False
            )

        if (
            order.payment_status == PaymentStatus.FAILED.value
            and status == PaymentStatus.COMPLETED.value
        ):
            raise PaymentAlreadyFailedError(order.id)
        logger.info(
            "Payment callback for order %s ignored, already %s", order.id, order.payment_status
        )
        return PaymentCallbackResponse(
            order=VoteOrderResponse.from_domain(order), already_processed=True
        )

    def _notify_completed(self, order: VoteOrder, contest: Contest | None) -> None:
        dispatcher = self._dispatcher or get_dispatcher()
        title = contest.title if contest is not None else "the contest"
        metadata = {
            "contest_id": order.contest_id,
            "vote_order_id": order.id,
            "vote_count": order.vote_count,
            "amount_cents": order.total_amount_cents,
        }
        messages = [
            NotificationMessage(
                type=NotificationType.VOTE_PURCHASED.value,
                title="Vote Package Purchase Confirmed",
                message=(
                    f"Your purchase of {order.vote_count} votes for {title} has been confirmed"
                ),
                user_id=order.user_id,
                metadata=metadata,
            ),
            NotificationMessage(
                type=NotificationType.VOTE_PURCHASED.value,
                title="New Vote Package Purchased",
                message=f"{order.vote_count} votes were purchased for {title}",
                user_id=contest.owner_id if contest is not None else None,
                metadata={**metadata, "platform_fee_cents": order.platform_fee_cents},
            ),
        ]
        for message in messages:
            try:
                dispatcher.dispatch(message)
            except Exception:
                logger.warning(
                    "Could not schedule notification %s", message.title, exc_info=True
                )

    async def get_order(
        self, db: AsyncSession, order_id: str, user: UserModel
    ) -> VoteOrderResponse:
        order = await self._repo.get_order(db, order_id)
        if order is None:
            raise VoteOrderNotFoundError(order_id)
        if order.user_id != str(user.id):
            raise ForbiddenError("Not authorized to view this vote order")
        return VoteOrderResponse.from_domain(order)

    async def list_my_orders(
        self, db: AsyncSession, user: UserModel, contest_id: str
    ) -> MyVoteOrdersResponse:
        await self._load_contest(db, contest_id)
        orders = await self._repo.list_completed_orders(db, str(user.id), contest_id)
        return MyVoteOrdersResponse.from_orders(orders, settings.CURRENCY)
