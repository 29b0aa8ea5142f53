"""ContestApplicationService — contest, contestant and vote-package management.

Mutations commit or roll back here; reads run without an explicit transaction.
Only the contest owner or an ADMIN may change a contest.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_common.errors import (
    ContestantNotFoundError,
    ContestNotFoundError,
    ForbiddenError,
    InvalidContestConfigError,
    VotePackagesLockedError,
)
from src.cv_common.id_generator import generate_id
from src.cv_contest.application.schemas import (
    ContestantListResponse,
    ContestantResponse,
    ContestResponse,
    ContestSettingsRequest,
    CreateContestantRequest,
    VotePackageListResponse,
    VotePackageRequest,
    VotePackageResponse,
)
from src.cv_contest.domain.models import Contest, Contestant, VotePackage
from src.cv_contest.domain.repository import ContestRepositoryProtocol
from src.cv_contest.infrastructure.persistence import ContestRepository
from src.cv_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)


def ensure_can_manage(contest: Contest, user: UserModel) -> None:
    if contest.owner_id != str(user.id) and not user.is_admin:
        raise ForbiddenError("Only the contest owner or an admin can do this")


def _apply_settings(contest: Contest, req: ContestSettingsRequest) -> Contest:
    contest.title = req.title
    contest.voting_type = req.voting_type.value
    contest.voting_start_date = req.voting_start_date
    contest.voting_end_date = req.voting_end_date
    contest.allow_guest_voting = req.allow_guest_voting
    contest.allow_multiple_votes = req.allow_multiple_votes
    contest.max_votes_per_user = req.max_votes_per_user
    contest.vote_packages_enabled = req.vote_packages_enabled
    contest.default_vote_price_cents = req.default_vote_price_cents
    contest.show_live_results = req.show_live_results
    contest.show_voter_names = req.show_voter_names
    errors = contest.config_errors()
    if errors:
        raise InvalidContestConfigError("; ".join(errors))
    return contest


def _new_package(contest_id: str, req: VotePackageRequest) -> VotePackage:
    return VotePackage(
        id=generate_id(),
        contest_id=contest_id,
        name=req.name,
        vote_count=req.vote_count,
        price_cents=req.price_cents,
        sort_order=req.sort_order,
        description=req.description,
    )


class ContestApplicationService:
    def __init__(self, repo: ContestRepositoryProtocol | None = None) -> None:
        self._repo: ContestRepositoryProtocol = repo or ContestRepository()

    async def _load_contest(self, db: AsyncSession, contest_id: str) -> Contest:
        contest = await self._repo.get_contest(db, contest_id)
        if contest is None:
            raise ContestNotFoundError(contest_id)
        return contest

    async def _load_managed_contest(
        self, db: AsyncSession, contest_id: str, user: UserModel
    ) -> Contest:
        contest = await self._load_contest(db, contest_id)
        ensure_can_manage(contest, user)
        return contest

    # ------------------------------------------------------------------
    # Contests
    # ------------------------------------------------------------------

    async def create_contest(
        self, db: AsyncSession, user: UserModel, req: ContestSettingsRequest
    ) -> ContestResponse:
        contest = _apply_settings(
            Contest(id=generate_id(), owner_id=str(user.id), title="", voting_type=""), req
        )
        try:
            created = await self._repo.insert_contest(db, contest)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Contest %s created by %s (%s)", created.id, user.id, created.voting_type)
        return ContestResponse.from_domain(created)

    async def update_contest(
        self, db: AsyncSession, user: UserModel, contest_id: str, req: ContestSettingsRequest
    ) -> ContestResponse:
        try:
            contest = await self._load_managed_contest(db, contest_id, user)
            updated = await self._repo.update_contest(db, _apply_settings(contest, req))
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ContestResponse.from_domain(updated)

    async def get_contest(self, db: AsyncSession, contest_id: str) -> ContestResponse:
        return ContestResponse.from_domain(await self._load_contest(db, contest_id))

    # ------------------------------------------------------------------
    # Contestants
    # ------------------------------------------------------------------

    async def create_contestant(
        self,
        db: AsyncSession,
        user: UserModel,
        contest_id: str,
        req: CreateContestantRequest,
    ) -> ContestantResponse:
        try:
            await self._load_managed_contest(db, contest_id, user)
            contestant = await self._repo.insert_contestant(
                db,
                Contestant(
                    id=generate_id(),
                    contest_id=contest_id,
                    name=req.name,
                    contest_number=req.contest_number,
                    bio=req.bio,
                    image_url=req.image_url,
                    instagram_url=req.instagram_url,
                    twitter_url=req.twitter_url,
                    facebook_url=req.facebook_url,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ContestantResponse.from_domain(contestant)

    async def list_contestants(
        self, db: AsyncSession, contest_id: str, active_only: bool = False
    ) -> ContestantListResponse:
        await self._load_contest(db, contest_id)
        contestants = await self._repo.list_contestants(db, contest_id, active_only)
        return ContestantListResponse(
            items=[ContestantResponse.from_domain(c) for c in contestants]
        )

    async def set_contestant_status(
        self,
        db: AsyncSession,
        user: UserModel,
        contest_id: str,
        contestant_id: str,
        status: str,
    ) -> ContestantResponse:
        try:
            await self._load_managed_contest(db, contest_id, user)
            contestant = await self._repo.get_contestant(db, contestant_id)
            if contestant is None or contestant.contest_id != contest_id:
                raise ContestantNotFoundError(contestant_id)
            updated = await self._repo.update_contestant_status(db, contestant_id, status)
            if updated is None:
                raise ContestantNotFoundError(contestant_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Contestant %s status %s -> %s", contestant_id, contestant.status, updated.status
        )
        return ContestantResponse.from_domain(updated)

    # ------------------------------------------------------------------
    # Vote packages
    # ------------------------------------------------------------------

    async def _ensure_packages_unlocked(self, db: AsyncSession, contest_id: str) -> None:
        if await self._repo.has_completed_orders(db, contest_id):
            raise VotePackagesLockedError()

    async def create_vote_package(
        self,
        db: AsyncSession,
        user: UserModel,
        contest_id: str,
        req: VotePackageRequest,
    ) -> VotePackageResponse:
        try:
            await self._load_managed_contest(db, contest_id, user)
            await self._ensure_packages_unlocked(db, contest_id)
            package = await self._repo.insert_vote_package(db, _new_package(contest_id, req))
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return VotePackageResponse.from_domain(package)

    async def replace_vote_packages(
        self,
        db: AsyncSession,
        user: UserModel,
        contest_id: str,
        reqs: list[VotePackageRequest],
    ) -> VotePackageListResponse:
        """Delete every package of the contest and insert the new set atomically."""
        try:
            await self._load_managed_contest(db, contest_id, user)
            await self._ensure_packages_unlocked(db, contest_id)
            removed = await self._repo.delete_vote_packages(db, contest_id)
            packages = [
                await self._repo.insert_vote_package(db, _new_package(contest_id, req))
                for req in reqs
            ]
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Contest %s vote packages replaced (%d removed, %d added)",
            contest_id,
            removed,
            len(packages),
        )
        return VotePackageListResponse(
            items=[VotePackageResponse.from_domain(p) for p in packages]
        )

    async def list_vote_packages(
        self, db: AsyncSession, contest_id: str
    ) -> VotePackageListResponse:
        await self._load_contest(db, contest_id)
        packages = await self._repo.list_vote_packages(db, contest_id)
        return VotePackageListResponse(
            items=[VotePackageResponse.from_domain(p) for p in packages]
        )
