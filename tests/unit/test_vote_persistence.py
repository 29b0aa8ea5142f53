"""Unit tests for VoteRepository using MagicMock AsyncSession."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.cv_common.enums import RejectReason
from src.cv_voting.domain.models import Guest, Member, Vote, VoteConflictError
from src.cv_voting.infrastructure.persistence import (
    VoteRepository,
    conflict_reason,
    voter_lock_key,
)


def _make_vote(**kwargs) -> Vote:
    defaults = {
        "id": "v-1",
        "contest_id": "contest-1",
        "contestant_id": "ct-1",
        "vote_type": "FREE",
        "ip_address": "1.2.3.4",
        "user_agent": "pytest",
        "user_id": "user-1",
    }
    defaults.update(kwargs)
    return Vote(**defaults)


def _make_vote_row(vote: Vote):
    row = MagicMock()
    for name in (
        "id", "contest_id", "contestant_id", "user_id", "vote_order_id", "vote_type",
        "ip_address", "user_agent", "exclusive_voter_id",
    ):
        setattr(row, name, getattr(vote, name))
    row.created_at = datetime.now(UTC)
    return row


def _integrity_error(detail: str) -> IntegrityError:
    return IntegrityError("INSERT INTO votes ...", {}, Exception(detail))


def _result(**kwargs) -> MagicMock:
    result = MagicMock()
    for name, value in kwargs.items():
        getattr(result, name).return_value = value
    return result


@pytest.fixture
def db():
    return MagicMock()


class TestVoterLockKey:
    def test_member_key(self) -> None:
        assert voter_lock_key("c-1", Member("u-1")) == "vote:c-1:user:u-1"

    def test_guest_key(self) -> None:
        assert voter_lock_key("c-1", Guest("1.2.3.4")) == "vote:c-1:ip:1.2.3.4"

    @pytest.mark.asyncio
    async def test_lock_statement_binds_key(self, db) -> None:
        db.execute = AsyncMock()
        await VoteRepository().acquire_voter_lock(db, "c-1", Member("u-1"))

        stmt, params = db.execute.call_args.args
        assert "pg_advisory_xact_lock" in str(stmt)
        assert params == {"lock_key": "vote:c-1:user:u-1"}


class TestConflictReason:
    @pytest.mark.parametrize(
        ("constraint", "reason"),
        [
            ("uq_votes_member_free_contestant", RejectReason.ALREADY_VOTED_CONTESTANT),
            ("uq_votes_guest_ip", RejectReason.ALREADY_VOTED),
            ("uq_votes_exclusive_voter", RejectReason.ONE_CONTESTANT_ONLY),
        ],
    )
    def test_known_constraints(self, constraint: str, reason: RejectReason) -> None:
        exc = _integrity_error(f'duplicate key value violates unique constraint "{constraint}"')
        assert conflict_reason(exc) is reason

    def test_unrelated_violation(self) -> None:
        exc = _integrity_error('violates check constraint "ck_votes_paid_order"')
        assert conflict_reason(exc) is None


class TestVoterHistory:
    @pytest.mark.asyncio
    async def test_guest_history(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(scalar_one=1))

        history = await VoteRepository().get_voter_history(db, "c-1", "ct-1", Guest("1.2.3.4"))

        assert history.guest_votes_in_contest == 1
        assert history.member_votes_in_contest == 0
        assert db.execute.call_args.args[1] == {"contest_id": "c-1", "ip_address": "1.2.3.4"}

    @pytest.mark.asyncio
    async def test_member_history(self, db) -> None:
        row = MagicMock()
        row.votes_in_contest = 4
        row.free_votes_in_contest = 3
        row.free_votes_for_contestant = 1
        db.execute = AsyncMock(return_value=_result(fetchone=row))

        history = await VoteRepository().get_voter_history(db, "c-1", "ct-1", Member("u-1"))

        assert history.member_votes_in_contest == 4
        assert history.member_free_votes_in_contest == 3
        assert history.member_free_votes_for_contestant == 1
        assert history.guest_votes_in_contest == 0


class TestInsertVote:
    @pytest.mark.asyncio
    async def test_returns_saved_vote(self, db) -> None:
        vote = _make_vote(exclusive_voter_id="user-1")
        db.execute = AsyncMock(return_value=_result(fetchone=_make_vote_row(vote)))

        saved = await VoteRepository().insert_vote(db, vote)

        assert saved.id == "v-1"
        assert saved.exclusive_voter_id == "user-1"
        assert saved.created_at is not None

    @pytest.mark.asyncio
    async def test_unique_violation_becomes_conflict(self, db) -> None:
        db.execute = AsyncMock(
            side_effect=_integrity_error('unique constraint "uq_votes_guest_ip"')
        )

        with pytest.raises(VoteConflictError) as exc_info:
            await VoteRepository().insert_vote(db, _make_vote(user_id=None))
        assert exc_info.value.reason is RejectReason.ALREADY_VOTED

    @pytest.mark.asyncio
    async def test_other_integrity_error_propagates(self, db) -> None:
        db.execute = AsyncMock(side_effect=_integrity_error('foreign key "fk_votes_contest"'))

        with pytest.raises(IntegrityError):
            await VoteRepository().insert_vote(db, _make_vote())


class TestConsumeOrderVote:
    @pytest.mark.asyncio
    async def test_returns_remaining(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(scalar=4))
        assert await VoteRepository().consume_order_vote(db, "o-1") == 4

    @pytest.mark.asyncio
    async def test_exhausted_returns_none(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(scalar=None))
        assert await VoteRepository().consume_order_vote(db, "o-1") is None

    @pytest.mark.asyncio
    async def test_update_is_conditional(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(scalar=0))
        await VoteRepository().consume_order_vote(db, "o-1")
        assert "votes_remaining > 0" in str(db.execute.call_args.args[0])


class TestAggregates:
    @pytest.mark.asyncio
    async def test_count_votes(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(scalar_one=60))
        assert await VoteRepository().count_votes(db, "c-1") == 60

    @pytest.mark.asyncio
    async def test_tally_maps_rows(self, db) -> None:
        row = MagicMock()
        row.id = "ct-1"
        row.name = "Tobi"
        row.contest_number = "007"
        row.status = "ACTIVE"
        row.image_url = None
        row.vote_count = 12
        db.execute = AsyncMock(return_value=_result(fetchall=[row]))

        tallies = await VoteRepository().tally_votes(db, "c-1", active_only=True)

        assert tallies[0].contestant_id == "ct-1"
        assert tallies[0].vote_count == 12
        assert db.execute.call_args.args[1] == {"contest_id": "c-1", "active_only": True}

    @pytest.mark.asyncio
    async def test_revenue_sums(self, db) -> None:
        row = MagicMock()
        row.total_amount_cents = 200_000
        row.platform_fee_cents = 10_000
        db.execute = AsyncMock(return_value=_result(fetchone=row))

        assert await VoteRepository().sum_completed_revenue(db, "c-1") == (200_000, 10_000)

    @pytest.mark.asyncio
    async def test_recent_votes_mark_guests(self, db) -> None:
        member, guest = MagicMock(), MagicMock()
        for row, vote_id, user_id, username in (
            (member, "v-2", "user-1", "ada"),
            (guest, "v-1", None, None),
        ):
            row.id = vote_id
            row.contestant_id = "ct-1"
            row.contest_number = "001"
            row.vote_type = "FREE"
            row.user_id = user_id
            row.username = username
            row.created_at = datetime.now(UTC)
        db.execute = AsyncMock(return_value=_result(fetchall=[member, guest]))

        recent = await VoteRepository().list_recent_votes(db, "c-1", 50)

        assert [(v.vote_id, v.guest, v.voter_name) for v in recent] == [
            ("v-2", False, "ada"),
            ("v-1", True, None),
        ]
        assert db.execute.call_args.args[1] == {"contest_id": "c-1", "limit": 50}
