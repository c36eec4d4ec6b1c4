from dataclasses import dataclass
from enum import Enum
from typing import List

from book_catalog.tools.logger import setup_logger

logger = setup_logger(__name__)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    message: str


class Notifier:
    """Очередь уведомлений, которые видит пользователь."""

    def __init__(self) -> None:
        self._items: List[Notification] = []

    @property
    def items(self) -> List[Notification]:
        return list(self._items)

    def success(self, title: str, message: str = "") -> Notification:
        return self._push(Notification(NotificationKind.SUCCESS, title, message))

    def error(self, title: str, message: str = "") -> Notification:
        return self._push(Notification(NotificationKind.ERROR, title, message))

    def _push(self, notification: Notification) -> Notification:
        self._items.append(notification)
        log = logger.warning if notification.kind == NotificationKind.ERROR else logger.info
        log(f"Уведомление [{notification.kind.value}] {notification.title}: {notification.message}")
        return notification
