"""ContestRepository — raw SQL persistence for contests, contestants, packages.

asyncpg NULL parameter pattern: CAST(:param AS TYPE) where a bind may be None.
Transaction ownership stays with the caller (application service).
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_common.errors import ContestNumberExistsError
from src.cv_contest.domain.models import Contest, Contestant, VotePackage

# ---------------------------------------------------------------------------
# SQL: contests
# ---------------------------------------------------------------------------

_CONTEST_COLUMNS = """
    id, owner_id, title, voting_type, voting_start_date, voting_end_date,
    allow_guest_voting, allow_multiple_votes, max_votes_per_user,
    vote_packages_enabled, default_vote_price_cents,
    show_live_results, show_voter_names, created_at, updated_at
"""

_GET_CONTEST_SQL = text(f"SELECT {_CONTEST_COLUMNS} FROM contests WHERE id = :id")

_INSERT_CONTEST_SQL = text(f"""
    INSERT INTO contests (id, owner_id, title, voting_type,
        voting_start_date, voting_end_date,
        allow_guest_voting, allow_multiple_votes, max_votes_per_user,
        vote_packages_enabled, default_vote_price_cents,
        show_live_results, show_voter_names)
    VALUES (:id, :owner_id, :title, :voting_type,
        CAST(:voting_start_date AS TIMESTAMPTZ), CAST(:voting_end_date AS TIMESTAMPTZ),
        :allow_guest_voting, :allow_multiple_votes, CAST(:max_votes_per_user AS INT),
        :vote_packages_enabled, CAST(:default_vote_price_cents AS BIGINT),
        :show_live_results, :show_voter_names)
    RETURNING {_CONTEST_COLUMNS}
""")

_UPDATE_CONTEST_SQL = text(f"""
    UPDATE contests
    SET title = :title,
        voting_type = :voting_type,
        voting_start_date = CAST(:voting_start_date AS TIMESTAMPTZ),
        voting_end_date = CAST(:voting_end_date AS TIMESTAMPTZ),
        allow_guest_voting = :allow_guest_voting,
        allow_multiple_votes = :allow_multiple_votes,
        max_votes_per_user = CAST(:max_votes_per_user AS INT),
        vote_packages_enabled = :vote_packages_enabled,
        default_vote_price_cents = CAST(:default_vote_price_cents AS BIGINT),
        show_live_results = :show_live_results,
        show_voter_names = :show_voter_names,
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_CONTEST_COLUMNS}
""")

# ---------------------------------------------------------------------------
# SQL: contestants
# ---------------------------------------------------------------------------

_CONTESTANT_COLUMNS = """
    id, contest_id, name, contest_number, status, bio, image_url,
    instagram_url, twitter_url, facebook_url, created_at
"""

_GET_CONTESTANT_SQL = text(f"SELECT {_CONTESTANT_COLUMNS} FROM contestants WHERE id = :id")

_LIST_CONTESTANTS_SQL = text(f"""
    SELECT {_CONTESTANT_COLUMNS}
    FROM contestants
    WHERE contest_id = :contest_id
      AND (NOT :active_only OR status = 'ACTIVE')
    ORDER BY contest_number ASC, id ASC
""")

_INSERT_CONTESTANT_SQL = text(f"""
    INSERT INTO contestants (id, contest_id, name, contest_number, status, bio,
        image_url, instagram_url, twitter_url, facebook_url)
    VALUES (:id, :contest_id, :name, :contest_number, :status, :bio,
        :image_url, :instagram_url, :twitter_url, :facebook_url)
    RETURNING {_CONTESTANT_COLUMNS}
""")

_UPDATE_CONTESTANT_STATUS_SQL = text(f"""
    UPDATE contestants SET status = :status
    WHERE id = :id
    RETURNING {_CONTESTANT_COLUMNS}
""")

# ---------------------------------------------------------------------------
# SQL: vote packages
# ---------------------------------------------------------------------------

_PACKAGE_COLUMNS = """
    id, contest_id, name, description, vote_count, price_cents, sort_order, created_at
"""

_GET_PACKAGE_SQL = text(f"SELECT {_PACKAGE_COLUMNS} FROM vote_packages WHERE id = :id")

_LIST_PACKAGES_SQL = text(f"""
    SELECT {_PACKAGE_COLUMNS}
    FROM vote_packages
    WHERE contest_id = :contest_id
    ORDER BY sort_order ASC, id ASC
""")

_INSERT_PACKAGE_SQL = text(f"""
    INSERT INTO vote_packages (id, contest_id, name, description,
        vote_count, price_cents, sort_order)
    VALUES (:id, :contest_id, :name, :description, :vote_count, :price_cents, :sort_order)
    RETURNING {_PACKAGE_COLUMNS}
""")

_DELETE_PACKAGES_SQL = text("DELETE FROM vote_packages WHERE contest_id = :contest_id")

_HAS_COMPLETED_ORDERS_SQL = text("""
    SELECT EXISTS (
        SELECT 1 FROM vote_orders
        WHERE contest_id = :contest_id AND payment_status = 'COMPLETED'
    )
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_contest(row: Any) -> Contest:
    return Contest(
        id=row.id,
        owner_id=row.owner_id,
        title=row.title,
        voting_type=row.voting_type,
        voting_start_date=row.voting_start_date,
        voting_end_date=row.voting_end_date,
        allow_guest_voting=row.allow_guest_voting,
        allow_multiple_votes=row.allow_multiple_votes,
        max_votes_per_user=row.max_votes_per_user,
        vote_packages_enabled=row.vote_packages_enabled,
        default_vote_price_cents=row.default_vote_price_cents,
        show_live_results=row.show_live_results,
        show_voter_names=row.show_voter_names,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_contestant(row: Any) -> Contestant:
    return Contestant(
        id=row.id,
        contest_id=row.contest_id,
        name=row.name,
        contest_number=row.contest_number,
        status=row.status,
        bio=row.bio,
        image_url=row.image_url,
        instagram_url=row.instagram_url,
        twitter_url=row.twitter_url,
        facebook_url=row.facebook_url,
        created_at=row.created_at,
    )


def _row_to_package(row: Any) -> VotePackage:
    return VotePackage(
        id=row.id,
        contest_id=row.contest_id,
        name=row.name,
        description=row.description,
        vote_count=row.vote_count,
        price_cents=row.price_cents,
        sort_order=row.sort_order,
        created_at=row.created_at,
    )


def _contest_params(contest: Contest) -> dict[str, Any]:
    return {
        "id": contest.id,
        "owner_id": contest.owner_id,
        "title": contest.title,
        "voting_type": contest.voting_type,
        "voting_start_date": contest.voting_start_date,
        "voting_end_date": contest.voting_end_date,
        "allow_guest_voting": contest.allow_guest_voting,
        "allow_multiple_votes": contest.allow_multiple_votes,
        "max_votes_per_user": contest.max_votes_per_user,
        "vote_packages_enabled": contest.vote_packages_enabled,
        "default_vote_price_cents": contest.default_vote_price_cents,
        "show_live_results": contest.show_live_results,
        "show_voter_names": contest.show_voter_names,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ContestRepository:
    """Concrete implementation of ContestRepositoryProtocol using raw SQL."""

    async def get_contest(self, db: AsyncSession, contest_id: str) -> Contest | None:
        row = (await db.execute(_GET_CONTEST_SQL, {"id": contest_id})).fetchone()
        return _row_to_contest(row) if row else None

    async def insert_contest(self, db: AsyncSession, contest: Contest) -> Contest:
        row = (await db.execute(_INSERT_CONTEST_SQL, _contest_params(contest))).fetchone()
        return _row_to_contest(row)

    async def update_contest(self, db: AsyncSession, contest: Contest) -> Contest:
        row = (await db.execute(_UPDATE_CONTEST_SQL, _contest_params(contest))).fetchone()
        return _row_to_contest(row)

    async def get_contestant(self, db: AsyncSession, contestant_id: str) -> Contestant | None:
        row = (await db.execute(_GET_CONTESTANT_SQL, {"id": contestant_id})).fetchone()
        return _row_to_contestant(row) if row else None

    async def list_contestants(
        self, db: AsyncSession, contest_id: str, active_only: bool = False
    ) -> list[Contestant]:
        result = await db.execute(
            _LIST_CONTESTANTS_SQL, {"contest_id": contest_id, "active_only": active_only}
        )
        return [_row_to_contestant(row) for row in result.fetchall()]

    async def insert_contestant(self, db: AsyncSession, contestant: Contestant) -> Contestant:
        try:
            row = (
                await db.execute(
                    _INSERT_CONTESTANT_SQL,
                    {
                        "id": contestant.id,
                        "contest_id": contestant.contest_id,
                        "name": contestant.name,
                        "contest_number": contestant.contest_number,
                        "status": contestant.status,
                        "bio": contestant.bio,
                        "image_url": contestant.image_url,
                        "instagram_url": contestant.instagram_url,
                        "twitter_url": contestant.twitter_url,
                        "facebook_url": contestant.facebook_url,
                    },
                )
            ).fetchone()
        except IntegrityError as exc:
            if "uq_contestants_contest_number" in str(exc.orig):
                raise ContestNumberExistsError(contestant.contest_number) from exc
            raise
        return _row_to_contestant(row)

    async def update_contestant_status(
        self, db: AsyncSession, contestant_id: str, status: str
    ) -> Contestant | None:
        row = (
            await db.execute(
                _UPDATE_CONTESTANT_STATUS_SQL, {"id": contestant_id, "status": status}
            )
        ).fetchone()
        return _row_to_contestant(row) if row else None

    async def get_vote_package(self, db: AsyncSession, package_id: str) -> VotePackage | None:
        row = (await db.execute(_GET_PACKAGE_SQL, {"id": package_id})).fetchone()
        return _row_to_package(row) if row else None

    async def list_vote_packages(self, db: AsyncSession, contest_id: str) -> list[VotePackage]:
        result = await db.execute(_LIST_PACKAGES_SQL, {"contest_id": contest_id})
        return [_row_to_package(row) for row in result.fetchall()]

    async def insert_vote_package(self, db: AsyncSession, package: VotePackage) -> VotePackage:
        row = (
            await db.execute(
                _INSERT_PACKAGE_SQL,
                {
                    "id": package.id,
                    "contest_id": package.contest_id,
                    "name": package.name,
                    "description": package.description,
                    "vote_count": package.vote_count,
                    "price_cents": package.price_cents,
                    "sort_order": package.sort_order,
                },
            )
        ).fetchone()
        return _row_to_package(row)

    async def delete_vote_packages(self, db: AsyncSession, contest_id: str) -> int:
        result = await db.execute(_DELETE_PACKAGES_SQL, {"contest_id": contest_id})
        return int(result.rowcount or 0)

    async def has_completed_orders(self, db: AsyncSession, contest_id: str) -> bool:
        result = await db.execute(_HAS_COMPLETED_ORDERS_SQL, {"contest_id": contest_id})
        return bool(result.scalar_one())
