from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field

from ..logging import get_logger


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """User-visible outcome of an action."""
    level: NotificationLevel
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier(Protocol):
    """Sink for user-visible notifications."""

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        ...


class NotificationCenter(Notifier):
    """Collects notifications until the presentation layer drains them."""

    def __init__(self) -> None:
        self._pending: list[Notification] = []
        self.logger = get_logger(__name__)

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self._pending.append(notification)
        if level == NotificationLevel.ERROR:
            self.logger.error(f"Notify user: {message}")
        elif level == NotificationLevel.WARNING:
            self.logger.warning(f"Notify user: {message}")
        else:
            self.logger.info(f"Notify user: {message}")
        return notification

    def drain(self) -> list[Notification]:
        """Return and forget every pending notification."""
        drained, self._pending = self._pending, []
        return drained
