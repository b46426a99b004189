"""User-facing notifications"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class NotificationType(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Notification:
    message: str
    type: NotificationType = NotificationType.SUCCESS


class Notifier:
    """
    Collects notifications for the front-end to display.

    Notifications go to the optional listener, which the command line
    front-end uses to print them. Without a listener they are logged at
    INFO (success) or WARNING (error); with one they are logged at DEBUG.
    """

    def __init__(self, listener: Optional[Callable[[Notification], None]] = None):
        self.history: List[Notification] = []
        self._listener = listener

    def notify(self, message: str, type: NotificationType = NotificationType.SUCCESS) -> Notification:
        notification = Notification(message=message, type=type)
        self.history.append(notification)

        if self._listener is not None:
            logger.debug("%s: %s", type.value, message)
            self._listener(notification)
        elif type == NotificationType.ERROR:
            logger.warning(message)
        else:
            logger.info(message)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(message, NotificationType.SUCCESS)

    def error(self, message: str) -> Notification:
        return self.notify(message, NotificationType.ERROR)

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None
