"""SQLAlchemy ORM model for votes. DDL reference only (see migration 007).

The partial unique indexes are declared here so CONSTRAINT_REASONS in
persistence.py can be checked against them.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from src.cv_common.database import Base


class VoteORM(Base):
    __tablename__ = "votes"
    __table_args__ = (
        Index(
            "uq_votes_member_free_contestant",
            "user_id",
            "contestant_id",
            unique=True,
            postgresql_where=text("vote_type = 'FREE' AND user_id IS NOT NULL"),
        ),
        Index(
            "uq_votes_guest_ip",
            "contest_id",
            "ip_address",
            unique=True,
            postgresql_where=text("user_id IS NULL"),
        ),
        Index("uq_votes_exclusive_voter", "contest_id", "exclusive_voter_id", unique=True),
        Index("idx_votes_contest_user", "contest_id", "user_id"),
        Index("idx_votes_contestant", "contestant_id"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    contest_id: Mapped[str] = mapped_column(String(32), nullable=False)
    contestant_id: Mapped[str] = mapped_column(String(32), nullable=False)
    user_id: Mapped[str | None] = mapped_column(String(64))
    vote_order_id: Mapped[str | None] = mapped_column(String(32))
    vote_type: Mapped[str] = mapped_column(String(10), nullable=False)
    ip_address: Mapped[str] = mapped_column(String(64), nullable=False)
    user_agent: Mapped[str] = mapped_column(Text, nullable=False)
    exclusive_voter_id: Mapped[str | None] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
