"""VoteCastOrchestrator — the transactional write behind an Allowed decision.

Both cast operations run inside the transaction the caller opened (the one
holding the voter lock) and finish it: commit on success, rollback otherwise.

    cast_free:  INSERT vote                                  -> commit -> notify
    cast_paid:  UPDATE vote_orders ... WHERE remaining > 0   \
                INSERT vote                                  -> commit -> notify

A uniqueness violation on INSERT is the authoritative rejection; an empty
conditional UPDATE is NO_VOTES_REMAINING. Any other database fault becomes
SystemFailure and is never reported as a rejection.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_common.enums import NotificationType, RejectReason, VotingType
from src.cv_common.id_generator import generate_id
from src.cv_contest.domain.models import Contest, Contestant
from src.cv_gateway.network import NetworkContext
from src.cv_notification.application.dispatcher import NotificationDispatcher, get_dispatcher
from src.cv_notification.domain.models import NotificationMessage
from src.cv_order.domain.models import VoteOrder
from src.cv_voting.domain.models import (
    CastOutcome,
    Guest,
    Member,
    Ok,
    Rejected,
    SystemFailure,
    Vote,
    VoteConflictError,
    Voter,
)
from src.cv_voting.domain.repository import VoteRepositoryProtocol
from src.cv_voting.infrastructure.persistence import VoteRepository

logger = logging.getLogger(__name__)


def build_vote(
    contest: Contest,
    contestant: Contestant,
    voter: Voter,
    vote_type: str,
    network: NetworkContext,
    order: VoteOrder | None = None,
) -> Vote:
    user_id = voter.user_id if isinstance(voter, Member) else None
    return Vote(
        id=generate_id(),
        contest_id=contest.id,
        contestant_id=contestant.id,
        vote_type=vote_type,
        ip_address=voter.ip_address if isinstance(voter, Guest) else network.ip_address,
        user_agent=network.user_agent,
        user_id=user_id,
        vote_order_id=order.id if order is not None else None,
        exclusive_voter_id=user_id if not contest.allow_multiple_votes else None,
    )


def _voter_label(voter: Voter) -> str:
    if isinstance(voter, Member):
        return voter.display_name or "A member"
    return "A guest"


class VoteCastOrchestrator:
    def __init__(
        self,
        repo: VoteRepositoryProtocol | None = None,
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        self._repo: VoteRepositoryProtocol = repo or VoteRepository()
        self._dispatcher = dispatcher

    async def cast_free(
        self,
        db: AsyncSession,
        contest: Contest,
        contestant: Contestant,
        voter: Voter,
        network: NetworkContext,
    ) -> CastOutcome:
        vote = build_vote(contest, contestant, voter, VotingType.FREE.value, network)
        try:
            saved = await self._repo.insert_vote(db, vote)
            await db.commit()
        except VoteConflictError as exc:
            await db.rollback()
            return self._rejected(contest, voter, exc.reason)
        except SQLAlchemyError as exc:
            await db.rollback()
            return self._failed(contest, voter, exc)

        logger.info("FREE vote %s cast for contestant %s", saved.id, contestant.id)
        self._notify(
            NotificationMessage(
                type=NotificationType.VOTE_CAST.value,
                title="New Vote Cast",
                message=f"{_voter_label(voter)} voted for {contestant.name} in {contest.title}",
                user_id=contest.owner_id,
                metadata={
                    "contest_id": contest.id,
                    "contestant_id": contestant.id,
                    "vote_id": saved.id,
                    "vote_type": saved.vote_type,
                },
            )
        )
        return Ok(saved)

    async def cast_paid(
        self,
        db: AsyncSession,
        contest: Contest,
        contestant: Contestant,
        voter: Member,
        order: VoteOrder,
        network: NetworkContext,
    ) -> CastOutcome:
        vote = build_vote(contest, contestant, voter, VotingType.PAID.value, network, order)
        try:
            remaining = await self._repo.consume_order_vote(db, order.id)
            if remaining is None:
                await db.rollback()
                return self._rejected(contest, voter, RejectReason.NO_VOTES_REMAINING)
            saved = await self._repo.insert_vote(db, vote)
            await db.commit()
        except VoteConflictError as exc:
            await db.rollback()
            return self._rejected(contest, voter, exc.reason)
        except SQLAlchemyError as exc:
            await db.rollback()
            return self._failed(contest, voter, exc)

        logger.info(
            "PAID vote %s cast from order %s (%d remaining)", saved.id, order.id, remaining
        )
        self._notify(
            NotificationMessage(
                type=NotificationType.VOTE_CAST.value,
                title="New Paid Vote Cast",
                message=(
                    f"{_voter_label(voter)} used a paid vote for {contestant.name} "
                    f"in {contest.title}"
                ),
                user_id=contest.owner_id,
                metadata={
                    "contest_id": contest.id,
                    "contestant_id": contestant.id,
                    "vote_id": saved.id,
                    "vote_order_id": order.id,
                    "votes_remaining": remaining,
                },
            )
        )
        return Ok(saved)

    @staticmethod
    def _rejected(contest: Contest, voter: Voter, reason: RejectReason) -> Rejected:
        logger.info(
            "Vote in contest %s by %s rejected at commit: %s", contest.id, voter, reason.value
        )
        return Rejected(reason)

    @staticmethod
    def _failed(contest: Contest, voter: Voter, exc: SQLAlchemyError) -> SystemFailure:
        logger.error("Vote in contest %s by %s failed", contest.id, voter, exc_info=exc)
        return SystemFailure(f"{type(exc).__name__}: vote could not be recorded")

    def _notify(self, message: NotificationMessage) -> None:
        dispatcher = self._dispatcher or get_dispatcher()
        try:
            dispatcher.dispatch(message)
        except Exception:
            logger.warning("Could not schedule notification %s", message.title, exc_info=True)
