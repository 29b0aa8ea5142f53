"""Unit tests for VoteCastOrchestrator (in-memory repository, mocked session)."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.cv_common.enums import NotificationType, PaymentStatus, RejectReason
from src.cv_contest.domain.models import Contest, Contestant
from src.cv_gateway.network import NetworkContext
from src.cv_order.domain.models import VoteOrder
from src.cv_voting.application.orchestrator import VoteCastOrchestrator, build_vote
from src.cv_voting.domain.models import (
    Guest,
    Member,
    Ok,
    Rejected,
    SystemFailure,
    Vote,
    VoteConflictError,
)

NETWORK = NetworkContext(ip_address="203.0.113.9", user_agent="pytest")
MEMBER = Member(user_id="user-1", display_name="ada")


def _make_contest(**kwargs) -> Contest:
    defaults = {
        "id": "contest-1",
        "owner_id": "owner-1",
        "title": "Best Voice",
        "voting_type": "FREE",
    }
    defaults.update(kwargs)
    return Contest(**defaults)


def _make_contestant() -> Contestant:
    return Contestant(id="ct-1", contest_id="contest-1", name="Tobi", contest_number="007")


def _make_order(remaining: int = 5, count: int = 5) -> VoteOrder:
    return VoteOrder(
        id="order-1",
        user_id="user-1",
        contest_id="contest-1",
        payment_reference="vote_order-1",
        total_amount_cents=count * 10_000,
        platform_fee_cents=count * 500,
        vote_count=count,
        votes_used=count - remaining,
        votes_remaining=remaining,
        payment_status=PaymentStatus.COMPLETED.value,
    )


class _InMemoryVoteRepo:
    """Stores votes in a list and draws on one order like the conditional UPDATE does."""

    def __init__(self, order: VoteOrder | None = None) -> None:
        self.order = order
        self.votes: list[Vote] = []

    async def consume_order_vote(self, db, order_id: str) -> int | None:
        await asyncio.sleep(0)
        # Check and decrement happen without a suspension point, like one UPDATE row.
        if self.order is None or self.order.votes_remaining <= 0:
            return None
        self.order.votes_remaining -= 1
        self.order.votes_used += 1
        return self.order.votes_remaining

    async def insert_vote(self, db, vote: Vote) -> Vote:
        await asyncio.sleep(0)
        self.votes.append(vote)
        return vote


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def dispatcher() -> MagicMock:
    return MagicMock()


class TestBuildVote:
    def test_member_vote_uses_request_ip(self) -> None:
        vote = build_vote(_make_contest(), _make_contestant(), MEMBER, "FREE", NETWORK)
        assert vote.user_id == "user-1"
        assert vote.ip_address == "203.0.113.9"
        assert vote.user_agent == "pytest"
        assert vote.vote_order_id is None

    def test_guest_vote_uses_guest_ip(self) -> None:
        vote = build_vote(
            _make_contest(), _make_contestant(), Guest("1.2.3.4"), "FREE", NETWORK
        )
        assert vote.is_guest
        assert vote.ip_address == "1.2.3.4"
        assert vote.exclusive_voter_id is None

    def test_exclusive_voter_only_for_single_contestant_contests(self) -> None:
        single = build_vote(
            _make_contest(allow_multiple_votes=False), _make_contestant(), MEMBER, "FREE", NETWORK
        )
        multiple = build_vote(_make_contest(), _make_contestant(), MEMBER, "FREE", NETWORK)
        assert single.exclusive_voter_id == "user-1"
        assert multiple.exclusive_voter_id is None

    def test_paid_vote_links_order(self) -> None:
        vote = build_vote(
            _make_contest(voting_type="PAID"),
            _make_contestant(),
            MEMBER,
            "PAID",
            NETWORK,
            _make_order(),
        )
        assert vote.vote_order_id == "order-1"
        assert vote.vote_type == "PAID"


class TestCastFree:
    @pytest.mark.asyncio
    async def test_success_commits_and_notifies_owner(self, db, dispatcher) -> None:
        repo = _InMemoryVoteRepo()
        orchestrator = VoteCastOrchestrator(repo, dispatcher)

        outcome = await orchestrator.cast_free(
            db, _make_contest(), _make_contestant(), MEMBER, NETWORK
        )

        assert isinstance(outcome, Ok)
        assert outcome.value.vote_type == "FREE"
        assert repo.votes == [outcome.value]
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()
        message = dispatcher.dispatch.call_args.args[0]
        assert message.user_id == "owner-1"
        assert message.type == NotificationType.VOTE_CAST.value
        assert message.title == "New Vote Cast"
        assert "ada voted for Tobi" in message.message

    @pytest.mark.asyncio
    async def test_unique_violation_is_rejection(self, db, dispatcher) -> None:
        repo = MagicMock()
        repo.insert_vote = AsyncMock(
            side_effect=VoteConflictError(RejectReason.ALREADY_VOTED_CONTESTANT)
        )
        orchestrator = VoteCastOrchestrator(repo, dispatcher)

        outcome = await orchestrator.cast_free(
            db, _make_contest(), _make_contestant(), MEMBER, NETWORK
        )

        assert outcome == Rejected(RejectReason.ALREADY_VOTED_CONTESTANT)
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()
        dispatcher.dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_database_fault_is_system_failure(self, db, dispatcher) -> None:
        repo = MagicMock()
        repo.insert_vote = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("connection reset"))
        )
        orchestrator = VoteCastOrchestrator(repo, dispatcher)

        outcome = await orchestrator.cast_free(
            db, _make_contest(), _make_contestant(), Guest("1.2.3.4"), NETWORK
        )

        assert isinstance(outcome, SystemFailure)
        assert outcome.detail.startswith("OperationalError")
        db.rollback.assert_awaited_once()
        dispatcher.dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_commit_failure_is_system_failure(self, db, dispatcher) -> None:
        db.commit = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("gone")))
        orchestrator = VoteCastOrchestrator(_InMemoryVoteRepo(), dispatcher)

        outcome = await orchestrator.cast_free(
            db, _make_contest(), _make_contestant(), MEMBER, NETWORK
        )

        assert isinstance(outcome, SystemFailure)
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_affect_vote(self, db, dispatcher) -> None:
        dispatcher.dispatch.side_effect = RuntimeError("no running loop")
        orchestrator = VoteCastOrchestrator(_InMemoryVoteRepo(), dispatcher)

        outcome = await orchestrator.cast_free(
            db, _make_contest(), _make_contestant(), MEMBER, NETWORK
        )

        assert isinstance(outcome, Ok)
        db.commit.assert_awaited_once()


class TestCastPaid:
    @pytest.mark.asyncio
    async def test_five_votes_then_exhausted(self, db, dispatcher) -> None:
        order = _make_order(remaining=5)
        repo = _InMemoryVoteRepo(order)
        orchestrator = VoteCastOrchestrator(repo, dispatcher)
        contest = _make_contest(voting_type="PAID", default_vote_price_cents=10_000)

        for _ in range(5):
            outcome = await orchestrator.cast_paid(
                db, contest, _make_contestant(), MEMBER, order, NETWORK
            )
            assert isinstance(outcome, Ok)
            assert order.balance_holds

        assert order.votes_remaining == 0
        assert order.votes_used == 5

        sixth = await orchestrator.cast_paid(
            db, contest, _make_contestant(), MEMBER, order, NETWORK
        )
        assert sixth == Rejected(RejectReason.NO_VOTES_REMAINING)
        assert len(repo.votes) == 5
        assert order.balance_holds

    @pytest.mark.asyncio
    async def test_concurrent_casts_on_last_vote(self, dispatcher) -> None:
        order = _make_order(remaining=1)
        repo = _InMemoryVoteRepo(order)
        orchestrator = VoteCastOrchestrator(repo, dispatcher)
        contest = _make_contest(voting_type="PAID", default_vote_price_cents=10_000)

        outcomes = await asyncio.gather(
            orchestrator.cast_paid(
                AsyncMock(), contest, _make_contestant(), MEMBER, order, NETWORK
            ),
            orchestrator.cast_paid(
                AsyncMock(), contest, _make_contestant(), MEMBER, order, NETWORK
            ),
        )

        assert sum(isinstance(o, Ok) for o in outcomes) == 1
        assert Rejected(RejectReason.NO_VOTES_REMAINING) in outcomes
        assert order.votes_remaining == 0
        assert order.balance_holds
        assert len(repo.votes) == 1

    @pytest.mark.asyncio
    async def test_empty_decrement_skips_insert(self, db, dispatcher) -> None:
        repo = MagicMock()
        repo.consume_order_vote = AsyncMock(return_value=None)
        repo.insert_vote = AsyncMock()
        orchestrator = VoteCastOrchestrator(repo, dispatcher)

        outcome = await orchestrator.cast_paid(
            db, _make_contest(voting_type="PAID"), _make_contestant(), MEMBER,
            _make_order(), NETWORK,
        )

        assert outcome == Rejected(RejectReason.NO_VOTES_REMAINING)
        repo.insert_vote.assert_not_awaited()
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_insert_conflict_rolls_back_decrement(self, db, dispatcher) -> None:
        repo = MagicMock()
        repo.consume_order_vote = AsyncMock(return_value=4)
        repo.insert_vote = AsyncMock(
            side_effect=VoteConflictError(RejectReason.ONE_CONTESTANT_ONLY)
        )
        orchestrator = VoteCastOrchestrator(repo, dispatcher)

        outcome = await orchestrator.cast_paid(
            db, _make_contest(voting_type="PAID", allow_multiple_votes=False),
            _make_contestant(), MEMBER, _make_order(), NETWORK,
        )

        assert outcome == Rejected(RejectReason.ONE_CONTESTANT_ONLY)
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success_notifies_with_remaining_count(self, db, dispatcher) -> None:
        order = _make_order(remaining=3)
        orchestrator = VoteCastOrchestrator(_InMemoryVoteRepo(order), dispatcher)

        await orchestrator.cast_paid(
            db, _make_contest(voting_type="PAID"), _make_contestant(), MEMBER, order, NETWORK
        )

        message = dispatcher.dispatch.call_args.args[0]
        assert message.title == "New Paid Vote Cast"
        assert message.metadata["votes_remaining"] == 2
        assert message.metadata["vote_order_id"] == "order-1"
