"""
User-facing notifications.

Controllers post messages here; the UI shell drains them into toasts.
"""

import uuid
from enum import Enum
from typing import Callable, List, Optional

from auth_template.utils.logger import get_logger

logger = get_logger(__name__)


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Notification:
    def __init__(
        self,
        message: str,
        type: NotificationType = NotificationType.INFO,
        title: Optional[str] = None,
    ):
        self.id = str(uuid.uuid4())
        self.message = message
        self.type = NotificationType(type)
        self.title = title

    def __repr__(self) -> str:
        return f"Notification({self.type.value}: {self.message!r})"


NotificationListener = Callable[[Notification], None]


class NotificationCenter:
    """Ordered list of active notifications."""

    def __init__(self):
        self._notifications: List[Notification] = []
        self._listeners: List[NotificationListener] = []

    @property
    def notifications(self) -> List[Notification]:
        return list(self._notifications)

    def add(
        self,
        message: str,
        type: NotificationType = NotificationType.INFO,
        title: Optional[str] = None,
    ) -> Notification:
        notification = Notification(message, type=type, title=title)
        self._notifications.append(notification)

        logger.debug(
            "Notification added",
            extra={"notification_type": notification.type.value},
        )

        for listener in list(self._listeners):
            listener(notification)

        return notification

    def remove(self, notification_id: str) -> None:
        self._notifications = [
            n for n in self._notifications if n.id != notification_id
        ]

    def add_listener(self, listener: NotificationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove
