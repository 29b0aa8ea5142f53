"""NotificationRepository — raw SQL insert into notifications."""

import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_notification.domain.models import Notification

_INSERT_NOTIFICATION_SQL = text("""
    INSERT INTO notifications (id, user_id, type, title, message, metadata, is_read)
    VALUES (:id, :user_id, :type, :title, :message, CAST(:metadata AS JSONB), false)
""")


class NotificationRepository:
    async def insert_notification(self, db: AsyncSession, notification: Notification) -> None:
        await db.execute(
            _INSERT_NOTIFICATION_SQL,
            {
                "id": notification.id,
                "user_id": notification.user_id,
                "type": notification.type,
                "title": notification.title,
                "message": notification.message,
                "metadata": json.dumps(notification.metadata, default=str),
            },
        )
