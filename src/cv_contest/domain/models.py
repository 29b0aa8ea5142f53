"""Domain models for cv_contest — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.cv_common.enums import ContestantStatus, VotingType


@dataclass
class Contest:
    id: str
    owner_id: str
    title: str
    voting_type: str  # FREE / PAID
    voting_start_date: datetime | None = None
    voting_end_date: datetime | None = None
    allow_guest_voting: bool = False
    allow_multiple_votes: bool = True
    max_votes_per_user: int | None = None
    vote_packages_enabled: bool = False
    default_vote_price_cents: int | None = None  # per vote, when packages are disabled
    show_live_results: bool = True
    show_voter_names: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_paid(self) -> bool:
        return self.voting_type == VotingType.PAID.value

    def config_errors(self) -> list[str]:
        """Violations of the contest configuration invariants (empty when valid)."""
        errors: list[str] = []
        if self.voting_type not in (VotingType.FREE.value, VotingType.PAID.value):
            errors.append(f"unknown voting type {self.voting_type}")
        if self.is_paid and not self.vote_packages_enabled:
            if self.default_vote_price_cents is None or self.default_vote_price_cents <= 0:
                errors.append(
                    "paid contests without vote packages need a default vote price > 0"
                )
        if self.max_votes_per_user is not None and self.max_votes_per_user < 1:
            errors.append("max votes per user must be at least 1")
        if (
            self.voting_start_date is not None
            and self.voting_end_date is not None
            and self.voting_start_date > self.voting_end_date
        ):
            errors.append("voting start date is after the end date")
        return errors


@dataclass
class Contestant:
    id: str
    contest_id: str
    name: str
    contest_number: str  # unique within the contest
    status: str = ContestantStatus.ACTIVE.value
    bio: str | None = None
    image_url: str | None = None
    instagram_url: str | None = None
    twitter_url: str | None = None
    facebook_url: str | None = None
    created_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == ContestantStatus.ACTIVE.value


@dataclass
class VotePackage:
    id: str
    contest_id: str
    name: str
    vote_count: int
    price_cents: int
    sort_order: int = 0
    description: str | None = None
    created_at: datetime | None = None
