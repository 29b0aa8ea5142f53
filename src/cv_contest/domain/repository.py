"""ContestRepository Protocol — the service depends on this, tests inject mocks."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_contest.domain.models import Contest, Contestant, VotePackage


class ContestRepositoryProtocol(Protocol):
    async def get_contest(self, db: AsyncSession, contest_id: str) -> Contest | None: ...

    async def insert_contest(self, db: AsyncSession, contest: Contest) -> Contest: ...

    async def update_contest(self, db: AsyncSession, contest: Contest) -> Contest: ...

    async def get_contestant(
        self, db: AsyncSession, contestant_id: str
    ) -> Contestant | None: ...

    async def list_contestants(
        self, db: AsyncSession, contest_id: str, active_only: bool = False
    ) -> list[Contestant]: ...

    async def insert_contestant(self, db: AsyncSession, contestant: Contestant) -> Contestant: ...

    async def update_contestant_status(
        self, db: AsyncSession, contestant_id: str, status: str
    ) -> Contestant | None: ...

    async def get_vote_package(
        self, db: AsyncSession, package_id: str
    ) -> VotePackage | None: ...

    async def list_vote_packages(
        self, db: AsyncSession, contest_id: str
    ) -> list[VotePackage]: ...

    async def insert_vote_package(
        self, db: AsyncSession, package: VotePackage
    ) -> VotePackage: ...

    async def delete_vote_packages(self, db: AsyncSession, contest_id: str) -> int: ...

    async def has_completed_orders(self, db: AsyncSession, contest_id: str) -> bool: ...
