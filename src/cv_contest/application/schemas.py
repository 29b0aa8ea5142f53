"""Pydantic schemas for cv_contest API."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from config.settings import settings
from src.cv_common.datetime_utils import ensure_aware
from src.cv_common.enums import ContestantStatus, VotingType
from src.cv_common.money import cents_to_display
from src.cv_contest.domain.models import Contest, Contestant, VotePackage

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ContestSettingsRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    voting_type: VotingType
    voting_start_date: datetime | None = None
    voting_end_date: datetime | None = None
    allow_guest_voting: bool = False
    allow_multiple_votes: bool = True
    max_votes_per_user: int | None = Field(None, ge=1)
    vote_packages_enabled: bool = False
    default_vote_price_cents: int | None = Field(None, gt=0)
    show_live_results: bool = True
    show_voter_names: bool = False

    @field_validator("voting_start_date", "voting_end_date")
    @classmethod
    def _naive_dates_are_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_aware(value)

    @model_validator(mode="after")
    def _check_pricing_and_window(self) -> "ContestSettingsRequest":
        if (
            self.voting_type == VotingType.PAID
            and not self.vote_packages_enabled
            and self.default_vote_price_cents is None
        ):
            raise ValueError(
                "default_vote_price_cents is required for PAID contests without vote packages"
            )
        if (
            self.voting_start_date is not None
            and self.voting_end_date is not None
            and self.voting_start_date > self.voting_end_date
        ):
            raise ValueError("voting_start_date must not be after voting_end_date")
        return self


class CreateContestRequest(ContestSettingsRequest):
    pass


class UpdateContestRequest(ContestSettingsRequest):
    """Full replacement of the contest settings (PUT semantics)."""


class CreateContestantRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    contest_number: str = Field(..., min_length=1, max_length=32)
    bio: str | None = None
    image_url: str | None = None
    instagram_url: str | None = None
    twitter_url: str | None = None
    facebook_url: str | None = None


class ContestantStatusRequest(BaseModel):
    status: ContestantStatus


class VotePackageRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    vote_count: int = Field(..., gt=0)
    price_cents: int = Field(..., ge=0)
    description: str | None = None
    sort_order: int = 0


class ReplacePackagesRequest(BaseModel):
    packages: list[VotePackageRequest] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ContestResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    voting_type: str
    voting_start_date: str | None
    voting_end_date: str | None
    allow_guest_voting: bool
    allow_multiple_votes: bool
    max_votes_per_user: int | None
    vote_packages_enabled: bool
    default_vote_price_cents: int | None
    default_vote_price_display: str | None
    show_live_results: bool
    show_voter_names: bool

    @classmethod
    def from_domain(cls, contest: Contest) -> "ContestResponse":
        price = contest.default_vote_price_cents
        return cls(
            id=contest.id,
            owner_id=contest.owner_id,
            title=contest.title,
            voting_type=contest.voting_type,
            voting_start_date=(
                contest.voting_start_date.isoformat() if contest.voting_start_date else None
            ),
            voting_end_date=(
                contest.voting_end_date.isoformat() if contest.voting_end_date else None
            ),
            allow_guest_voting=contest.allow_guest_voting,
            allow_multiple_votes=contest.allow_multiple_votes,
            max_votes_per_user=contest.max_votes_per_user,
            vote_packages_enabled=contest.vote_packages_enabled,
            default_vote_price_cents=price,
            default_vote_price_display=(
                cents_to_display(price, settings.CURRENCY) if price is not None else None
            ),
            show_live_results=contest.show_live_results,
            show_voter_names=contest.show_voter_names,
        )


class ContestantResponse(BaseModel):
    id: str
    contest_id: str
    name: str
    contest_number: str
    status: str
    bio: str | None
    image_url: str | None
    instagram_url: str | None
    twitter_url: str | None
    facebook_url: str | None

    @classmethod
    def from_domain(cls, contestant: Contestant) -> "ContestantResponse":
        return cls(
            id=contestant.id,
            contest_id=contestant.contest_id,
            name=contestant.name,
            contest_number=contestant.contest_number,
            status=contestant.status,
            bio=contestant.bio,
            image_url=contestant.image_url,
            instagram_url=contestant.instagram_url,
            twitter_url=contestant.twitter_url,
            facebook_url=contestant.facebook_url,
        )


class VotePackageResponse(BaseModel):
    id: str
    contest_id: str
    name: str
    description: str | None
    vote_count: int
    price_cents: int
    price_display: str
    sort_order: int

    @classmethod
    def from_domain(cls, package: VotePackage) -> "VotePackageResponse":
        return cls(
            id=package.id,
            contest_id=package.contest_id,
            name=package.name,
            description=package.description,
            vote_count=package.vote_count,
            price_cents=package.price_cents,
            price_display=cents_to_display(package.price_cents, settings.CURRENCY),
            sort_order=package.sort_order,
        )


class ContestantListResponse(BaseModel):
    items: list[ContestantResponse]


class VotePackageListResponse(BaseModel):
    items: list[VotePackageResponse]
