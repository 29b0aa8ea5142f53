"""VoteRepository — raw SQL persistence for votes and vote-order consumption.

Concurrency guards (all inside the caller's transaction):
  - pg_advisory_xact_lock on (contest, voter) serialises history read + insert
  - partial unique indexes on votes are the final word on duplicates
  - consume_order_vote is a conditional UPDATE ... WHERE votes_remaining > 0
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_common.enums import RejectReason
from src.cv_voting.domain.models import (
    ContestantTally,
    Guest,
    RecentVote,
    Vote,
    VoteConflictError,
    Voter,
    VoterHistory,
)

# Unique index name -> rejection it stands for.
CONSTRAINT_REASONS: dict[str, RejectReason] = {
    "uq_votes_member_free_contestant": RejectReason.ALREADY_VOTED_CONTESTANT,
    "uq_votes_guest_ip": RejectReason.ALREADY_VOTED,
    "uq_votes_exclusive_voter": RejectReason.ONE_CONTESTANT_ONLY,
}

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_VOTER_LOCK_SQL = text("SELECT pg_advisory_xact_lock(hashtextextended(:lock_key, 0))")

_MEMBER_HISTORY_SQL = text("""
    SELECT
        COUNT(*) AS votes_in_contest,
        COUNT(*) FILTER (WHERE vote_type = 'FREE') AS free_votes_in_contest,
        COUNT(*) FILTER (
            WHERE vote_type = 'FREE' AND contestant_id = :contestant_id
        ) AS free_votes_for_contestant
    FROM votes
    WHERE contest_id = :contest_id AND user_id = :user_id
""")

_GUEST_HISTORY_SQL = text("""
    SELECT COUNT(*)
    FROM votes
    WHERE contest_id = :contest_id AND ip_address = :ip_address AND user_id IS NULL
""")

_VOTE_COLUMNS = """
    id, contest_id, contestant_id, user_id, vote_order_id, vote_type,
    ip_address, user_agent, exclusive_voter_id, created_at
"""

_INSERT_VOTE_SQL = text(f"""
    INSERT INTO votes (id, contest_id, contestant_id, user_id, vote_order_id, vote_type,
        ip_address, user_agent, exclusive_voter_id)
    VALUES (:id, :contest_id, :contestant_id, CAST(:user_id AS VARCHAR),
        CAST(:vote_order_id AS VARCHAR), :vote_type, :ip_address, :user_agent,
        CAST(:exclusive_voter_id AS VARCHAR))
    RETURNING {_VOTE_COLUMNS}
""")

_CONSUME_ORDER_VOTE_SQL = text("""
    UPDATE vote_orders
    SET votes_used = votes_used + 1,
        votes_remaining = votes_remaining - 1,
        updated_at = NOW()
    WHERE id = :id AND votes_remaining > 0
    RETURNING votes_remaining
""")

_COUNT_VOTES_SQL = text("SELECT COUNT(*) FROM votes WHERE contest_id = :contest_id")

_TALLY_SQL = text("""
    SELECT c.id, c.name, c.contest_number, c.status, c.image_url,
           COUNT(v.id) AS vote_count
    FROM contestants c
    LEFT JOIN votes v ON v.contestant_id = c.id
    WHERE c.contest_id = :contest_id
      AND (NOT :active_only OR c.status = 'ACTIVE')
    GROUP BY c.id, c.name, c.contest_number, c.status, c.image_url
    ORDER BY c.contest_number ASC, c.id ASC
""")

_RECENT_VOTES_SQL = text("""
    SELECT v.id, v.contestant_id, c.contest_number, v.vote_type, v.user_id,
           u.username, v.created_at
    FROM votes v
    JOIN contestants c ON c.id = v.contestant_id
    LEFT JOIN users u ON u.id::text = v.user_id
    WHERE v.contest_id = :contest_id
    ORDER BY v.created_at DESC, v.id DESC
    LIMIT :limit
""")

_SUM_REVENUE_SQL = text("""
    SELECT COALESCE(SUM(total_amount_cents), 0) AS total_amount_cents,
           COALESCE(SUM(platform_fee_cents), 0) AS platform_fee_cents
    FROM vote_orders
    WHERE contest_id = :contest_id AND payment_status = 'COMPLETED'
""")


def voter_lock_key(contest_id: str, voter: Voter) -> str:
    if isinstance(voter, Guest):
        return f"vote:{contest_id}:ip:{voter.ip_address}"
    return f"vote:{contest_id}:user:{voter.user_id}"


def conflict_reason(exc: IntegrityError) -> RejectReason | None:
    """Rejection for a violated vote uniqueness index, None for anything else."""
    detail = str(exc.orig)
    for constraint, reason in CONSTRAINT_REASONS.items():
        if constraint in detail:
            return reason
    return None


def _row_to_vote(row: Any) -> Vote:
    return Vote(
        id=row.id,
        contest_id=row.contest_id,
        contestant_id=row.contestant_id,
        user_id=row.user_id,
        vote_order_id=row.vote_order_id,
        vote_type=row.vote_type,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        exclusive_voter_id=row.exclusive_voter_id,
        created_at=row.created_at,
    )


class VoteRepository:
    """Concrete implementation of VoteRepositoryProtocol using raw SQL."""

    async def acquire_voter_lock(self, db: AsyncSession, contest_id: str, voter: Voter) -> None:
        await db.execute(_VOTER_LOCK_SQL, {"lock_key": voter_lock_key(contest_id, voter)})

    async def get_voter_history(
        self, db: AsyncSession, contest_id: str, contestant_id: str, voter: Voter
    ) -> VoterHistory:
        if isinstance(voter, Guest):
            count = (
                await db.execute(
                    _GUEST_HISTORY_SQL,
                    {"contest_id": contest_id, "ip_address": voter.ip_address},
                )
            ).scalar_one()
            return VoterHistory(guest_votes_in_contest=int(count))

        row = (
            await db.execute(
                _MEMBER_HISTORY_SQL,
                {
                    "contest_id": contest_id,
                    "contestant_id": contestant_id,
                    "user_id": voter.user_id,
                },
            )
        ).fetchone()
        return VoterHistory(
            member_votes_in_contest=int(row.votes_in_contest),
            member_free_votes_in_contest=int(row.free_votes_in_contest),
            member_free_votes_for_contestant=int(row.free_votes_for_contestant),
        )

    async def insert_vote(self, db: AsyncSession, vote: Vote) -> Vote:
        try:
            row = (
                await db.execute(
                    _INSERT_VOTE_SQL,
                    {
                        "id": vote.id,
                        "contest_id": vote.contest_id,
                        "contestant_id": vote.contestant_id,
                        "user_id": vote.user_id,
                        "vote_order_id": vote.vote_order_id,
                        "vote_type": vote.vote_type,
                        "ip_address": vote.ip_address,
                        "user_agent": vote.user_agent,
                        "exclusive_voter_id": vote.exclusive_voter_id,
                    },
                )
            ).fetchone()
        except IntegrityError as exc:
            reason = conflict_reason(exc)
            if reason is None:
                raise
            raise VoteConflictError(reason) from exc
        return _row_to_vote(row)

    async def consume_order_vote(self, db: AsyncSession, order_id: str) -> int | None:
        remaining = (await db.execute(_CONSUME_ORDER_VOTE_SQL, {"id": order_id})).scalar()
        return None if remaining is None else int(remaining)

    async def count_votes(self, db: AsyncSession, contest_id: str) -> int:
        return int(
            (await db.execute(_COUNT_VOTES_SQL, {"contest_id": contest_id})).scalar_one()
        )

    async def tally_votes(
        self, db: AsyncSession, contest_id: str, active_only: bool = False
    ) -> list[ContestantTally]:
        result = await db.execute(
            _TALLY_SQL, {"contest_id": contest_id, "active_only": active_only}
        )
        return [
            ContestantTally(
                contestant_id=row.id,
                name=row.name,
                contest_number=row.contest_number,
                status=row.status,
                vote_count=int(row.vote_count),
                image_url=row.image_url,
            )
            for row in result.fetchall()
        ]

    async def sum_completed_revenue(
        self, db: AsyncSession, contest_id: str
    ) -> tuple[int, int]:
        row = (await db.execute(_SUM_REVENUE_SQL, {"contest_id": contest_id})).fetchone()
        return int(row.total_amount_cents), int(row.platform_fee_cents)

    async def list_recent_votes(
        self, db: AsyncSession, contest_id: str, limit: int
    ) -> list[RecentVote]:
        result = await db.execute(_RECENT_VOTES_SQL, {"contest_id": contest_id, "limit": limit})
        return [
            RecentVote(
                vote_id=row.id,
                contestant_id=row.contestant_id,
                contest_number=row.contest_number,
                vote_type=row.vote_type,
                guest=row.user_id is None,
                voter_name=row.username,
                created_at=row.created_at,
            )
            for row in result.fetchall()
        ]
