"""NotificationRepository Protocol."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_notification.domain.models import Notification


class NotificationRepositoryProtocol(Protocol):
    async def insert_notification(self, db: AsyncSession, notification: Notification) -> None: ...
