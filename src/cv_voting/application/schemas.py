"""Pydantic schemas for cv_voting API."""

from datetime import datetime

from pydantic import BaseModel, Field

from config.settings import settings
from src.cv_common.money import cents_to_display
from src.cv_voting.domain.models import (
    ContestResults,
    RankedContestant,
    RecentVote,
    RevenueSummary,
    Vote,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CastFreeVoteRequest(BaseModel):
    contestant_id: str = Field(..., min_length=1)


class CastPaidVoteRequest(BaseModel):
    contestant_id: str = Field(..., min_length=1)
    vote_order_id: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class VoteResponse(BaseModel):
    vote_id: str
    contest_id: str
    contestant_id: str
    vote_type: str
    vote_order_id: str | None
    guest: bool

    @classmethod
    def from_domain(cls, vote: Vote) -> "VoteResponse":
        return cls(
            vote_id=vote.id,
            contest_id=vote.contest_id,
            contestant_id=vote.contestant_id,
            vote_type=vote.vote_type,
            vote_order_id=vote.vote_order_id,
            guest=vote.is_guest,
        )


class ContestantResultItem(BaseModel):
    contestant_id: str
    name: str
    contest_number: str
    status: str
    image_url: str | None
    vote_count: int
    percentage: float
    rank: int

    @classmethod
    def from_domain(cls, ranked: RankedContestant) -> "ContestantResultItem":
        return cls(
            contestant_id=ranked.contestant_id,
            name=ranked.name,
            contest_number=ranked.contest_number,
            status=ranked.status,
            image_url=ranked.image_url,
            vote_count=ranked.vote_count,
            percentage=ranked.percentage,
            rank=ranked.rank,
        )


class RevenueItem(BaseModel):
    total_revenue_cents: int
    total_revenue_display: str
    platform_fee_cents: int
    platform_fee_display: str
    net_revenue_cents: int
    net_revenue_display: str

    @classmethod
    def from_domain(cls, revenue: RevenueSummary) -> "RevenueItem":
        return cls(
            total_revenue_cents=revenue.total_revenue_cents,
            total_revenue_display=cents_to_display(
                revenue.total_revenue_cents, settings.CURRENCY
            ),
            platform_fee_cents=revenue.platform_fee_cents,
            platform_fee_display=cents_to_display(revenue.platform_fee_cents, settings.CURRENCY),
            net_revenue_cents=revenue.net_revenue_cents,
            net_revenue_display=cents_to_display(revenue.net_revenue_cents, settings.CURRENCY),
        )


class RecentVoteItem(BaseModel):
    vote_id: str
    contestant_id: str
    contest_number: str
    vote_type: str
    guest: bool
    voter_name: str | None
    created_at: datetime | None

    @classmethod
    def from_domain(cls, vote: RecentVote) -> "RecentVoteItem":
        return cls(
            vote_id=vote.vote_id,
            contestant_id=vote.contestant_id,
            contest_number=vote.contest_number,
            vote_type=vote.vote_type,
            guest=vote.guest,
            voter_name=vote.voter_name,
            created_at=vote.created_at,
        )


class ContestResultsResponse(BaseModel):
    contest_id: str
    total_votes: int
    total_contestants: int
    results: list[ContestantResultItem]
    revenue: RevenueItem | None
    recent_votes: list[RecentVoteItem] = []

    @classmethod
    def from_domain(cls, results: ContestResults) -> "ContestResultsResponse":
        return cls(
            contest_id=results.contest_id,
            total_votes=results.total_votes,
            total_contestants=len(results.contestants),
            results=[ContestantResultItem.from_domain(c) for c in results.contestants],
            revenue=RevenueItem.from_domain(results.revenue) if results.revenue else None,
            recent_votes=[RecentVoteItem.from_domain(v) for v in results.recent_votes],
        )


class PublicContestantItem(BaseModel):
    contestant_id: str
    name: str
    contest_number: str
    image_url: str | None


class PublicResultsResponse(BaseModel):
    """Counts are present only while the contest shows live results."""

    contest_id: str
    show_live_results: bool
    show_voter_names: bool
    total_votes: int | None = None
    total_contestants: int
    results: list[ContestantResultItem] | None = None
    contestants: list[PublicContestantItem] | None = None
