"""VoteRepository Protocol — the orchestrator and service depend on this."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_voting.domain.models import ContestantTally, RecentVote, Vote, Voter, VoterHistory


class VoteRepositoryProtocol(Protocol):
    async def acquire_voter_lock(self, db: AsyncSession, contest_id: str, voter: Voter) -> None:
        """Serialise casts of one voter in one contest until the transaction ends."""
        ...

    async def get_voter_history(
        self, db: AsyncSession, contest_id: str, contestant_id: str, voter: Voter
    ) -> VoterHistory: ...

    async def insert_vote(self, db: AsyncSession, vote: Vote) -> Vote:
        """Raises VoteConflictError when a vote uniqueness constraint fires."""
        ...

    async def consume_order_vote(self, db: AsyncSession, order_id: str) -> int | None:
        """votes_used += 1, votes_remaining -= 1 only while votes_remaining > 0.

        Returns the new votes_remaining, or None when nothing was left.
        """
        ...

    async def count_votes(self, db: AsyncSession, contest_id: str) -> int: ...

    async def tally_votes(
        self, db: AsyncSession, contest_id: str, active_only: bool = False
    ) -> list[ContestantTally]: ...

    async def sum_completed_revenue(
        self, db: AsyncSession, contest_id: str
    ) -> tuple[int, int]:
        """(total_amount_cents, platform_fee_cents) over COMPLETED orders."""
        ...

    async def list_recent_votes(
        self, db: AsyncSession, contest_id: str, limit: int
    ) -> list[RecentVote]:
        """Newest first, with the member's username (None for guests)."""
        ...
