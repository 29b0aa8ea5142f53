"""Pydantic schemas for cv_order API."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from src.cv_common.money import cents_to_display
from src.cv_order.domain.models import VoteOrder

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PurchaseVotesRequest(BaseModel):
    """Buy a package, or a plain vote count when the contest has no packages."""

    contest_id: str = Field(..., min_length=1)
    vote_package_id: str | None = None
    vote_count: int | None = Field(None, gt=0, le=100_000)

    @model_validator(mode="after")
    def _package_xor_count(self) -> "PurchaseVotesRequest":
        if (self.vote_package_id is None) == (self.vote_count is None):
            raise ValueError("Provide exactly one of vote_package_id or vote_count")
        return self


class PaymentCallbackRequest(BaseModel):
    payment_reference: str = Field(..., min_length=1)
    status: Literal["COMPLETED", "FAILED"]
    channel: str | None = Field(None, max_length=30)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class VoteOrderResponse(BaseModel):
    id: str
    contest_id: str
    vote_package_id: str | None
    payment_reference: str
    total_amount_cents: int
    total_amount_display: str
    platform_fee_cents: int
    currency: str
    vote_count: int
    votes_used: int
    votes_remaining: int
    payment_status: str
    payment_method: str | None
    expires_at: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, order: VoteOrder) -> "VoteOrderResponse":
        return cls(
            id=order.id,
            contest_id=order.contest_id,
            vote_package_id=order.vote_package_id,
            payment_reference=order.payment_reference,
            total_amount_cents=order.total_amount_cents,
            total_amount_display=cents_to_display(order.total_amount_cents, order.currency),
            platform_fee_cents=order.platform_fee_cents,
            currency=order.currency,
            vote_count=order.vote_count,
            votes_used=order.votes_used,
            votes_remaining=order.votes_remaining,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            expires_at=order.expires_at.isoformat() if order.expires_at else None,
            created_at=order.created_at.isoformat() if order.created_at else None,
        )


class PaymentCallbackResponse(BaseModel):
    order: VoteOrderResponse
    already_processed: bool


class MyVoteOrdersResponse(BaseModel):
    orders: list[VoteOrderResponse]
    total_votes_remaining: int
    total_votes_purchased: int
    total_amount_spent_cents: int
    total_amount_spent_display: str

    @classmethod
    def from_orders(cls, orders: list[VoteOrder], currency: str) -> "MyVoteOrdersResponse":
        spent = sum(o.total_amount_cents for o in orders)
        return cls(
            orders=[VoteOrderResponse.from_domain(o) for o in orders],
            total_votes_remaining=sum(o.votes_remaining for o in orders),
            total_votes_purchased=sum(o.vote_count for o in orders),
            total_amount_spent_cents=spent,
            total_amount_spent_display=cents_to_display(spent, currency),
        )
