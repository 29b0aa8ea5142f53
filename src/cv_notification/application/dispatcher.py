"""NotificationDispatcher — fire-and-forget delivery of in-app notifications.

dispatch() never raises and never blocks the caller: each message is written
by a background asyncio task in its own session, after the caller's
transaction has committed. Delivery failures are logged and dropped.
"""

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.cv_common.database import async_session_factory
from src.cv_common.id_generator import generate_id
from src.cv_notification.domain.models import Notification, NotificationMessage
from src.cv_notification.domain.repository import NotificationRepositoryProtocol
from src.cv_notification.infrastructure.persistence import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = async_session_factory,
        repo: NotificationRepositoryProtocol | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._repo: NotificationRepositoryProtocol = repo or NotificationRepository()
        # Strong references keep pending tasks from being garbage collected.
        self._pending: set[asyncio.Task[None]] = set()

    def dispatch(self, message: NotificationMessage) -> asyncio.Task[None] | None:
        if message.user_id is None:
            logger.debug("Dropping notification without recipient: %s", message.title)
            return None
        task = asyncio.create_task(self._deliver(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _deliver(self, message: NotificationMessage) -> None:
        notification = Notification(
            id=generate_id(),
            user_id=str(message.user_id),
            type=message.type,
            title=message.title,
            message=message.message,
            metadata=dict(message.metadata),
        )
        try:
            async with self._session_factory() as db:
                await self._repo.insert_notification(db, notification)
                await db.commit()
        except Exception:
            logger.warning(
                "Notification delivery failed (user=%s type=%s)",
                notification.user_id,
                notification.type,
                exc_info=True,
            )

    async def drain(self) -> None:
        """Wait for in-flight deliveries; used on shutdown."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)


_dispatcher: NotificationDispatcher | None = None


def get_dispatcher() -> NotificationDispatcher:
    global _dispatcher  # noqa: PLW0603
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher
