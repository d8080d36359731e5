"""
Notification Store

Toast-style notifications raised by output nodes and other kernel parts.
"""

import asyncio
from typing import Any, Dict, List, Optional, Protocol, TYPE_CHECKING
from uuid import uuid4

import structlog

from ...Node.Core.Data import now_ms

if TYPE_CHECKING:
    from ..events import EventBus

logger = structlog.get_logger(__name__)

DEFAULT_DURATION_MS = 4000


class NotificationStore(Protocol):
    def add_notification(self, message: str, type: str = "info", duration: int = DEFAULT_DURATION_MS) -> str: ...


class InMemoryNotificationStore:
    """
    Keeps notifications in a list and emits notification:created.

    A positive duration schedules automatic dismissal on the running loop;
    without a running loop the notification stays until dismissed.
    """

    def __init__(self, events: Optional["EventBus"] = None):
        self.notifications: List[Dict[str, Any]] = []
        self.events = events

    def add_notification(self, message: str, type: str = "info", duration: int = DEFAULT_DURATION_MS) -> str:
        notification_id = uuid4().hex[:6]
        notification = {"id": notification_id, "message": message, "type": type, "timestamp": now_ms()}
        self.notifications.append(notification)
        logger.info("Notification added", notification_id=notification_id, type=type)

        if self.events:
            self.events.emit("notification:created", notification)

        if duration and duration > 0:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                loop.call_later(duration / 1000, self.dismiss, notification_id)

        return notification_id

    def dismiss(self, notification_id: str) -> bool:
        before = len(self.notifications)
        self.notifications = [n for n in self.notifications if n["id"] != notification_id]
        return len(self.notifications) != before

    def clear_all(self) -> None:
        self.notifications = []
