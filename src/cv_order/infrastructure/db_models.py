"""SQLAlchemy ORM models for vote_orders and platform_settings.

DDL reference only; the Alembic migrations are the authoritative schema.
"""

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.cv_common.database import Base


class VoteOrderORM(Base):
    __tablename__ = "vote_orders"
    __table_args__ = (
        CheckConstraint(
            "votes_used + votes_remaining = vote_count", name="ck_vote_orders_balance"
        ),
        CheckConstraint("votes_remaining >= 0", name="ck_vote_orders_remaining"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    contest_id: Mapped[str] = mapped_column(String(32), nullable=False)
    vote_package_id: Mapped[str | None] = mapped_column(String(32))
    payment_reference: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    total_amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    platform_fee_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False)
    votes_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    votes_remaining: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(30))
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class PlatformSettingORM(Base):
    __tablename__ = "platform_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
