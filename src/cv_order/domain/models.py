"""VoteOrder domain model — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.cv_common.datetime_utils import ensure_aware
from src.cv_common.enums import PaymentStatus


@dataclass
class VoteOrder:
    id: str
    user_id: str
    contest_id: str
    payment_reference: str  # "vote_<id>", echoed back by the payment callback
    total_amount_cents: int
    platform_fee_cents: int
    vote_count: int
    votes_used: int = 0
    votes_remaining: int = 0
    vote_package_id: str | None = None
    currency: str = "NGN"
    payment_status: str = PaymentStatus.PENDING.value
    payment_method: str | None = None
    expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.payment_status == PaymentStatus.COMPLETED.value

    def is_expired(self, now: datetime) -> bool:
        expires_at = ensure_aware(self.expires_at)
        return expires_at is not None and expires_at < now

    @property
    def balance_holds(self) -> bool:
        return (
            self.votes_remaining >= 0
            and self.votes_used + self.votes_remaining == self.vote_count
        )
