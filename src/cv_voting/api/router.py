"""cv_voting REST endpoints.

POST /contests/{contest_id}/votes/free      — member or guest (no token) FREE vote
POST /contests/{contest_id}/votes/paid      — member PAID vote drawn from a vote order
GET  /contests/{contest_id}/results         — organizer/admin results with revenue
GET  /contests/{contest_id}/results/public  — public results of the active roster
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_common.database import get_db_session
from src.cv_common.errors import InternalError, VoteRejectedError
from src.cv_common.response import ApiResponse, respond
from src.cv_gateway.auth.dependencies import get_current_user, get_optional_user
from src.cv_gateway.network import NetworkContext, extract_network_context
from src.cv_gateway.user.db_models import UserModel
from src.cv_voting.application.schemas import (
    CastFreeVoteRequest,
    CastPaidVoteRequest,
    VoteResponse,
)
from src.cv_voting.application.service import VotingApplicationService
from src.cv_voting.domain.models import CastOutcome, Guest, Member, Ok, Rejected, Voter

router = APIRouter(prefix="/contests", tags=["voting"])

_service = VotingApplicationService()


def member_from_user(user: UserModel) -> Member:
    return Member(user_id=str(user.id), display_name=user.username)


def _voter(user: UserModel | None, network: NetworkContext) -> Voter:
    if user is None:
        return Guest(ip_address=network.ip_address)
    return member_from_user(user)


def _render(request: Request, outcome: CastOutcome, message: str) -> ApiResponse:
    if isinstance(outcome, Ok):
        return respond(
            request,
            VoteResponse.from_domain(outcome.value).model_dump(),
            message,
        )
    if isinstance(outcome, Rejected):
        raise VoteRejectedError(outcome.reason)
    raise InternalError(outcome.detail)


@router.post(
    "/{contest_id}/votes/free",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
)
async def cast_free_vote(
    contest_id: str,
    request: Request,
    body: CastFreeVoteRequest,
    current_user: Annotated[UserModel | None, Depends(get_optional_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    network = extract_network_context(request)
    outcome = await _service.cast_free_vote(
        db, contest_id, body.contestant_id, _voter(current_user, network), network
    )
    return _render(request, outcome, "Vote cast successfully")


@router.post(
    "/{contest_id}/votes/paid",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
)
async def cast_paid_vote(
    contest_id: str,
    request: Request,
    body: CastPaidVoteRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    network = extract_network_context(request)
    outcome = await _service.cast_paid_vote(
        db,
        contest_id,
        body.contestant_id,
        body.vote_order_id,
        member_from_user(current_user),
        network,
    )
    return _render(request, outcome, "Paid vote cast successfully")


@router.get("/{contest_id}/results", response_model=ApiResponse)
async def get_results(
    contest_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_results(db, contest_id, current_user)
    return respond(request, result.model_dump())


@router.get("/{contest_id}/results/public", response_model=ApiResponse)
async def get_public_results(
    contest_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_public_results(db, contest_id)
    return respond(request, result.model_dump())
