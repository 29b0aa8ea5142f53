"""VotingApplicationService — snapshot loading, eligibility, cast, results.

A cast runs as one transaction:

    load contest / contestant (/ order)   -> NotFound errors raise
    advisory lock on (contest, voter)     -> concurrent casts queue here
    read VoterHistory, evaluate()         -> Rejected: rollback, return
    orchestrator.cast_*                   -> commits or rolls back

Cast methods return a CastOutcome; the router decides how to render it.
"""

import logging
from dataclasses import replace

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_common.datetime_utils import utc_now
from src.cv_common.enums import VotingType
from src.cv_common.errors import (
    AppError,
    ContestantNotFoundError,
    ContestNotFoundError,
    VoteOrderNotFoundError,
)
from src.cv_contest.application.service import ensure_can_manage
from src.cv_contest.domain.models import Contest, Contestant
from src.cv_contest.domain.repository import ContestRepositoryProtocol
from src.cv_contest.infrastructure.persistence import ContestRepository
from src.cv_gateway.network import NetworkContext
from src.cv_gateway.user.db_models import UserModel
from src.cv_order.domain.models import VoteOrder
from src.cv_order.domain.repository import VoteOrderRepositoryProtocol
from src.cv_order.infrastructure.persistence import VoteOrderRepository
from src.cv_voting.application.orchestrator import VoteCastOrchestrator
from src.cv_voting.application.schemas import (
    ContestantResultItem,
    ContestResultsResponse,
    PublicContestantItem,
    PublicResultsResponse,
)
from src.cv_voting.domain.eligibility import evaluate
from src.cv_voting.domain.models import (
    CastOutcome,
    ContestResults,
    Member,
    Rejected,
    SystemFailure,
    Voter,
)
from src.cv_voting.domain.repository import VoteRepositoryProtocol
from src.cv_voting.domain.results import rank_contestants, summarize_revenue
from src.cv_voting.infrastructure.persistence import VoteRepository

logger = logging.getLogger(__name__)

RECENT_VOTES_LIMIT = 50


class VotingApplicationService:
    def __init__(
        self,
        vote_repo: VoteRepositoryProtocol | None = None,
        contest_repo: ContestRepositoryProtocol | None = None,
        order_repo: VoteOrderRepositoryProtocol | None = None,
        orchestrator: VoteCastOrchestrator | None = None,
    ) -> None:
        self._votes: VoteRepositoryProtocol = vote_repo or VoteRepository()
        self._contests: ContestRepositoryProtocol = contest_repo or ContestRepository()
        self._orders: VoteOrderRepositoryProtocol = order_repo or VoteOrderRepository()
        self._orchestrator = orchestrator or VoteCastOrchestrator(self._votes)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    async def _load_contest(self, db: AsyncSession, contest_id: str) -> Contest:
        contest = await self._contests.get_contest(db, contest_id)
        if contest is None:
            raise ContestNotFoundError(contest_id)
        return contest

    async def _load_targets(
        self, db: AsyncSession, contest_id: str, contestant_id: str
    ) -> tuple[Contest, Contestant]:
        contest = await self._load_contest(db, contest_id)
        contestant = await self._contests.get_contestant(db, contestant_id)
        if contestant is None or contestant.contest_id != contest.id:
            raise ContestantNotFoundError(contestant_id)
        return contest, contestant

    async def _load_order(self, db: AsyncSession, contest_id: str, order_id: str) -> VoteOrder:
        order = await self._orders.get_order(db, order_id)
        if order is None or order.contest_id != contest_id:
            raise VoteOrderNotFoundError(order_id)
        return order

    # ------------------------------------------------------------------
    # Casting
    # ------------------------------------------------------------------

    async def cast_free_vote(
        self,
        db: AsyncSession,
        contest_id: str,
        contestant_id: str,
        voter: Voter,
        network: NetworkContext,
    ) -> CastOutcome:
        try:
            contest, contestant = await self._load_targets(db, contest_id, contestant_id)
            await self._votes.acquire_voter_lock(db, contest.id, voter)
            history = await self._votes.get_voter_history(db, contest.id, contestant.id, voter)
        except AppError:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            return await self._read_failed(db, contest_id, exc)

        decision = evaluate(contest, contestant, voter, VotingType.FREE.value, history)
        if isinstance(decision, Rejected):
            await db.rollback()
            logger.info(
                "FREE vote in contest %s by %s rejected: %s",
                contest_id,
                voter,
                decision.reason.value,
            )
            return decision
        return await self._orchestrator.cast_free(db, contest, contestant, voter, network)

    async def cast_paid_vote(
        self,
        db: AsyncSession,
        contest_id: str,
        contestant_id: str,
        vote_order_id: str,
        member: Member,
        network: NetworkContext,
    ) -> CastOutcome:
        try:
            contest, contestant = await self._load_targets(db, contest_id, contestant_id)
            await self._votes.acquire_voter_lock(db, contest.id, member)
            # Read the order after taking the lock so its counters are current.
            order = await self._load_order(db, contest.id, vote_order_id)
            history = await self._votes.get_voter_history(db, contest.id, contestant.id, member)
        except AppError:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            return await self._read_failed(db, contest_id, exc)

        decision = evaluate(
            contest, contestant, member, VotingType.PAID.value, history, order=order
        )
        if isinstance(decision, Rejected):
            await db.rollback()
            logger.info(
                "PAID vote in contest %s by %s (order %s) rejected: %s",
                contest_id,
                member,
                vote_order_id,
                decision.reason.value,
            )
            return decision
        return await self._orchestrator.cast_paid(
            db, contest, contestant, member, order, network
        )

    @staticmethod
    async def _read_failed(
        db: AsyncSession, contest_id: str, exc: SQLAlchemyError
    ) -> SystemFailure:
        await db.rollback()
        logger.error("Vote snapshot read failed for contest %s", contest_id, exc_info=exc)
        return SystemFailure(f"{type(exc).__name__}: vote state could not be read")

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    async def get_results(
        self, db: AsyncSession, contest_id: str, user: UserModel
    ) -> ContestResultsResponse:
        """Organizer view: every contestant, disqualified ones included, plus revenue.

        The recent-votes listing names members only when the contest sets
        show_voter_names.
        """
        contest = await self._load_contest(db, contest_id)
        ensure_can_manage(contest, user)

        total = await self._votes.count_votes(db, contest.id)
        tallies = await self._votes.tally_votes(db, contest.id)
        revenue = None
        if contest.is_paid:
            total_amount, platform_fee = await self._votes.sum_completed_revenue(db, contest.id)
            revenue = summarize_revenue(total_amount, platform_fee)
        recent = await self._votes.list_recent_votes(db, contest.id, RECENT_VOTES_LIMIT)
        if not contest.show_voter_names:
            recent = [replace(v, voter_name=None) for v in recent]

        return ContestResultsResponse.from_domain(
            ContestResults(
                contest_id=contest.id,
                total_votes=total,
                contestants=rank_contestants(tallies, total),
                revenue=revenue,
                recent_votes=recent,
            )
        )

    async def get_public_results(
        self, db: AsyncSession, contest_id: str
    ) -> PublicResultsResponse:
        """Active roster only; counts hidden unless the contest shows live results."""
        contest = await self._load_contest(db, contest_id)
        tallies = await self._votes.tally_votes(db, contest.id, active_only=True)

        if not contest.show_live_results:
            return PublicResultsResponse(
                contest_id=contest.id,
                show_live_results=False,
                show_voter_names=contest.show_voter_names,
                total_contestants=len(tallies),
                contestants=[
                    PublicContestantItem(
                        contestant_id=t.contestant_id,
                        name=t.name,
                        contest_number=t.contest_number,
                        image_url=t.image_url,
                    )
                    for t in tallies
                ],
            )

        total = await self._votes.count_votes(db, contest.id)
        return PublicResultsResponse(
            contest_id=contest.id,
            show_live_results=True,
            show_voter_names=contest.show_voter_names,
            total_votes=total,
            total_contestants=len(tallies),
            results=[
                ContestantResultItem.from_domain(r) for r in rank_contestants(tallies, total)
            ],
        )
