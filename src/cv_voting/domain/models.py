"""Voting domain types — voters, vote rows and tagged outcomes.

Business-rule outcomes are values, not exceptions:

    Decision    = Allowed | Rejected
    CastOutcome = Ok | Rejected | SystemFailure

Callers branch on the type (``isinstance`` or ``match``); only the HTTP edge
turns a Rejected into an error response.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

from src.cv_common.enums import RejectReason

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Voters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Member:
    user_id: str
    display_name: str = ""


@dataclass(frozen=True)
class Guest:
    ip_address: str


Voter = Member | Guest

# ---------------------------------------------------------------------------
# History snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VoterHistory:
    """Prior votes of one voter in one contest, read under the voter lock.

    guest_votes_in_contest applies to Guest voters (same IP, no user id);
    the member_* counters apply to Member voters.
    """

    guest_votes_in_contest: int = 0
    member_votes_in_contest: int = 0
    member_free_votes_in_contest: int = 0
    member_free_votes_for_contestant: int = 0


# ---------------------------------------------------------------------------
# Vote row
# ---------------------------------------------------------------------------


@dataclass
class Vote:
    id: str
    contest_id: str
    contestant_id: str
    vote_type: str  # FREE / PAID
    ip_address: str
    user_agent: str
    user_id: str | None = None  # None => guest
    vote_order_id: str | None = None  # PAID votes only
    exclusive_voter_id: str | None = None  # set when the contest allows one contestant
    created_at: datetime | None = None

    @property
    def is_guest(self) -> bool:
        return self.user_id is None


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Allowed:
    pass


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class SystemFailure:
    """Infrastructure fault; never to be reported as a rejection."""

    detail: str


Decision = Allowed | Rejected
CastOutcome = Ok[Vote] | Rejected | SystemFailure


class VoteConflictError(Exception):
    """A vote uniqueness constraint fired; carries the matching rejection."""

    def __init__(self, reason: RejectReason) -> None:
        self.reason = reason
        super().__init__(reason.value)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContestantTally:
    contestant_id: str
    name: str
    contest_number: str
    status: str
    vote_count: int
    image_url: str | None = None


@dataclass(frozen=True)
class RankedContestant:
    contestant_id: str
    name: str
    contest_number: str
    status: str
    vote_count: int
    percentage: float
    rank: int
    image_url: str | None = None


@dataclass(frozen=True)
class RevenueSummary:
    total_revenue_cents: int
    platform_fee_cents: int
    net_revenue_cents: int


@dataclass(frozen=True)
class RecentVote:
    """One row of the organizer's recent-votes listing.

    voter_name is None for guests and when the contest hides voter names.
    """

    vote_id: str
    contestant_id: str
    contest_number: str
    vote_type: str
    guest: bool
    voter_name: str | None = None
    created_at: datetime | None = None


@dataclass
class ContestResults:
    contest_id: str
    total_votes: int
    contestants: list[RankedContestant] = field(default_factory=list)
    revenue: RevenueSummary | None = None
    recent_votes: list[RecentVote] = field(default_factory=list)
