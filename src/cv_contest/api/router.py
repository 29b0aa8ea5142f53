"""cv_contest REST endpoints.

POST /contests                                            — create contest
GET  /contests/{contest_id}                               — contest detail
PUT  /contests/{contest_id}                               — update settings (owner/admin)
POST /contests/{contest_id}/contestants                   — add contestant (owner/admin)
GET  /contests/{contest_id}/contestants                   — list contestants
PATCH /contests/{contest_id}/contestants/{contestant_id}  — change status (owner/admin)
POST /contests/{contest_id}/vote-packages                 — add one package (owner/admin)
PUT  /contests/{contest_id}/vote-packages                 — replace all packages (owner/admin)
GET  /contests/{contest_id}/vote-packages                 — list packages
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_common.database import get_db_session
from src.cv_common.response import ApiResponse, respond
from src.cv_contest.application.schemas import (
    ContestantStatusRequest,
    CreateContestantRequest,
    CreateContestRequest,
    ReplacePackagesRequest,
    UpdateContestRequest,
    VotePackageRequest,
)
from src.cv_contest.application.service import ContestApplicationService
from src.cv_gateway.auth.dependencies import get_current_user
from src.cv_gateway.user.db_models import UserModel

router = APIRouter(prefix="/contests", tags=["contests"])

_service = ContestApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def create_contest(
    request: Request,
    body: CreateContestRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_contest(db, current_user, body)
    return respond(request, result.model_dump(), "Contest created")


@router.get("/{contest_id}", response_model=ApiResponse)
async def get_contest(
    contest_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_contest(db, contest_id)
    return respond(request, result.model_dump())


@router.put("/{contest_id}", response_model=ApiResponse)
async def update_contest(
    contest_id: str,
    request: Request,
    body: UpdateContestRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.update_contest(db, current_user, contest_id, body)
    return respond(request, result.model_dump(), "Contest updated")


@router.post(
    "/{contest_id}/contestants",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
)
async def create_contestant(
    contest_id: str,
    request: Request,
    body: CreateContestantRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_contestant(db, current_user, contest_id, body)
    return respond(request, result.model_dump(), "Contestant created")


@router.get("/{contest_id}/contestants", response_model=ApiResponse)
async def list_contestants(
    contest_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    active_only: bool = Query(False, description="Only ACTIVE contestants"),
) -> ApiResponse:
    result = await _service.list_contestants(db, contest_id, active_only)
    return respond(request, result.model_dump())


@router.patch("/{contest_id}/contestants/{contestant_id}", response_model=ApiResponse)
async def set_contestant_status(
    contest_id: str,
    contestant_id: str,
    request: Request,
    body: ContestantStatusRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.set_contestant_status(
        db, current_user, contest_id, contestant_id, body.status.value
    )
    return respond(request, result.model_dump(), "Contestant status updated")


@router.post(
    "/{contest_id}/vote-packages",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
)
async def create_vote_package(
    contest_id: str,
    request: Request,
    body: VotePackageRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_vote_package(db, current_user, contest_id, body)
    return respond(request, result.model_dump(), "Vote package created")


@router.put("/{contest_id}/vote-packages", response_model=ApiResponse)
async def replace_vote_packages(
    contest_id: str,
    request: Request,
    body: ReplacePackagesRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.replace_vote_packages(db, current_user, contest_id, body.packages)
    return respond(request, result.model_dump(), "Vote packages replaced")


@router.get("/{contest_id}/vote-packages", response_model=ApiResponse)
async def list_vote_packages(
    contest_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_vote_packages(db, contest_id)
    return respond(request, result.model_dump())
