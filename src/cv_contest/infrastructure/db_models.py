"""SQLAlchemy ORM models for cv_contest.

DDL reference only. persistence.py uses raw text() SQL and the Alembic
migrations (003-005) are the authoritative schema.
"""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from src.cv_common.database import Base


class ContestORM(Base):
    __tablename__ = "contests"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    voting_type: Mapped[str] = mapped_column(String(10), nullable=False)
    voting_start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    voting_end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    allow_guest_voting: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    allow_multiple_votes: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    max_votes_per_user: Mapped[int | None] = mapped_column(Integer)
    vote_packages_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    default_vote_price_cents: Mapped[int | None] = mapped_column(BigInteger)
    show_live_results: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_voter_names: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class ContestantORM(Base):
    __tablename__ = "contestants"
    __table_args__ = (
        UniqueConstraint("contest_id", "contest_number", name="uq_contestants_contest_number"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    contest_id: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    contest_number: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")
    bio: Mapped[str | None] = mapped_column(Text)
    image_url: Mapped[str | None] = mapped_column(Text)
    instagram_url: Mapped[str | None] = mapped_column(Text)
    twitter_url: Mapped[str | None] = mapped_column(Text)
    facebook_url: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class VotePackageORM(Base):
    __tablename__ = "vote_packages"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    contest_id: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False)
    price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
