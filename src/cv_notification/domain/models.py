"""Notification domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class NotificationMessage:
    type: str  # NotificationType value
    title: str
    message: str
    user_id: str | None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Notification:
    id: str
    user_id: str
    type: str
    title: str
    message: str
    metadata: dict[str, Any] = field(default_factory=dict)
    is_read: bool = False
    created_at: datetime | None = None
