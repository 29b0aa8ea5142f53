"""ORM models must agree with the Alembic migrations and the names the
repositories match IntegrityErrors against."""

from pathlib import Path

from sqlalchemy import CheckConstraint, UniqueConstraint

from src.cv_common.database import Base
from src.cv_contest.infrastructure.db_models import ContestantORM, ContestORM, VotePackageORM
from src.cv_gateway.user.db_models import UserModel
from src.cv_notification.infrastructure.db_models import NotificationORM
from src.cv_order.infrastructure.db_models import PlatformSettingORM, VoteOrderORM
from src.cv_voting.infrastructure.db_models import VoteORM
from src.cv_voting.infrastructure.persistence import CONSTRAINT_REASONS

MIGRATIONS = Path(__file__).resolve().parents[2] / "alembic" / "versions"


def _migration_sql() -> str:
    return "\n".join(p.read_text() for p in sorted(MIGRATIONS.glob("*.py")))


class TestTables:
    def test_every_model_has_a_migration(self) -> None:
        sql = _migration_sql()
        for table in Base.metadata.tables:
            assert f"CREATE TABLE {table} (" in sql, table

    def test_table_names(self) -> None:
        assert [
            m.__tablename__
            for m in (
                UserModel,
                ContestORM,
                ContestantORM,
                VotePackageORM,
                VoteOrderORM,
                PlatformSettingORM,
                VoteORM,
                NotificationORM,
            )
        ] == [
            "users",
            "contests",
            "contestants",
            "vote_packages",
            "vote_orders",
            "platform_settings",
            "votes",
            "notifications",
        ]


class TestVoteIndexes:
    def test_conflict_map_names_unique_indexes(self) -> None:
        unique = {ix.name for ix in VoteORM.__table__.indexes if ix.unique}
        assert set(CONSTRAINT_REASONS) == unique

    def test_unique_indexes_exist_in_migration(self) -> None:
        sql = _migration_sql()
        for name in CONSTRAINT_REASONS:
            assert f"CREATE UNIQUE INDEX {name}" in sql

    def test_partial_predicates(self) -> None:
        indexes = {ix.name: ix for ix in VoteORM.__table__.indexes}
        member = indexes["uq_votes_member_free_contestant"]
        guest = indexes["uq_votes_guest_ip"]
        exclusive = indexes["uq_votes_exclusive_voter"]

        assert [c.name for c in member.columns] == ["user_id", "contestant_id"]
        assert "vote_type = 'FREE'" in str(member.dialect_options["postgresql"]["where"])
        assert [c.name for c in guest.columns] == ["contest_id", "ip_address"]
        assert "user_id IS NULL" in str(guest.dialect_options["postgresql"]["where"])
        assert exclusive.dialect_options["postgresql"]["where"] is None


class TestConstraints:
    def test_contest_number_unique_per_contest(self) -> None:
        names = {
            c.name for c in ContestantORM.__table__.constraints if isinstance(c, UniqueConstraint)
        }
        assert "uq_contestants_contest_number" in names

    def test_vote_order_balance_checks(self) -> None:
        checks = {
            c.name: str(c.sqltext)
            for c in VoteOrderORM.__table__.constraints
            if isinstance(c, CheckConstraint)
        }
        assert checks["ck_vote_orders_balance"] == "votes_used + votes_remaining = vote_count"
        assert checks["ck_vote_orders_remaining"] == "votes_remaining >= 0"
        assert VoteOrderORM.__table__.c.payment_reference.unique

    def test_notification_metadata_column(self) -> None:
        # Attribute is metadata_ because DeclarativeBase reserves "metadata".
        assert "metadata" in NotificationORM.__table__.c
        assert NotificationORM.__table__.c["metadata"].nullable is False
