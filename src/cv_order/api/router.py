"""cv_order REST endpoints.

POST /vote-orders                                 — start a vote purchase (PENDING)
POST /vote-orders/{order_id}/payment-callback     — payment provider webhook
GET  /vote-orders/{order_id}                      — one order (buyer only)
GET  /contests/{contest_id}/vote-orders/mine      — my COMPLETED orders with totals
"""

import hmac
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cv_common.database import get_db_session
from src.cv_common.errors import ForbiddenError
from src.cv_common.response import ApiResponse, respond
from src.cv_gateway.auth.dependencies import get_current_user
from src.cv_gateway.user.db_models import UserModel
from src.cv_order.application.schemas import PaymentCallbackRequest, PurchaseVotesRequest
from src.cv_order.application.service import VoteOrderApplicationService

router = APIRouter(tags=["vote-orders"])

_service = VoteOrderApplicationService()


async def verify_webhook_secret(
    x_webhook_secret: Annotated[str | None, Header()] = None,
) -> None:
    expected = settings.PAYMENT_WEBHOOK_SECRET
    if not expected or x_webhook_secret is None:
        raise ForbiddenError("Invalid payment webhook signature")
    if not hmac.compare_digest(x_webhook_secret.encode(), expected.encode()):
        raise ForbiddenError("Invalid payment webhook signature")


@router.post("/vote-orders", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def purchase_votes(
    request: Request,
    body: PurchaseVotesRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.purchase(db, current_user, body)
    return respond(request, result.model_dump(), "Vote order created successfully")


@router.post(
    "/vote-orders/{order_id}/payment-callback",
    response_model=ApiResponse,
    dependencies=[Depends(verify_webhook_secret)],
)
async def payment_callback(
    order_id: str,
    request: Request,
    body: PaymentCallbackRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.handle_payment_callback(
        db, order_id, body.payment_reference, body.status, body.channel
    )
    message = "Payment already processed" if result.already_processed else "Payment recorded"
    return respond(request, result.model_dump(), message)


@router.get("/vote-orders/{order_id}", response_model=ApiResponse)
async def get_vote_order(
    order_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_order(db, order_id, current_user)
    return respond(request, result.model_dump())


@router.get("/contests/{contest_id}/vote-orders/mine", response_model=ApiResponse)
async def list_my_vote_orders(
    contest_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_my_orders(db, current_user, contest_id)
    return respond(request, result.model_dump())
