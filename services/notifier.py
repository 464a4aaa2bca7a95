"""
Transient user-visible notifications ("toasts").

Each notification is also written to the log so failures stay diagnosable
after the toast is gone.
"""

import enum
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Deque, List, Optional

logger = logging.getLogger(__name__)


class NotificationLevel(enum.Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class NotificationKind(enum.Enum):
    LOAD_FAILED = "load_failed"
    ADD_FAILED = "add_failed"
    TOGGLE_FAILED = "toggle_failed"
    DELETE_FAILED = "delete_failed"
    SIGN_OUT_FAILED = "sign_out_failed"
    TODO_ADDED = "todo_added"
    TODO_DELETED = "todo_deleted"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    level: NotificationLevel
    message: str
    created_at: datetime = field(default_factory=datetime.utcnow)


_LOG_LEVELS = {
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


class Notifier:
    """
    Keeps the most recent notifications for the presentation layer and
    fans them out to an optional listener.
    """

    def __init__(self, listener: Optional[Callable[[Notification], None]] = None, max_history: int = 50):
        self._listener = listener
        self._history: Deque[Notification] = deque(maxlen=max_history)

    def notify(self, kind: NotificationKind, level: NotificationLevel, message: str,
               detail: Optional[str] = None) -> Notification:
        notification = Notification(kind=kind, level=level, message=message)
        self._history.append(notification)

        log_message = f"[{kind.value}] {message}"
        if detail:
            log_message = f"{log_message}: {detail}"
        logger.log(_LOG_LEVELS[level], log_message)

        if self._listener is not None:
            try:
                self._listener(notification)
            except Exception as e:
                logger.error(f"Notification listener failed: {e}", exc_info=True)
        return notification

    def success(self, kind: NotificationKind, message: str) -> Notification:
        return self.notify(kind, NotificationLevel.SUCCESS, message)

    def warning(self, kind: NotificationKind, message: str, detail: Optional[str] = None) -> Notification:
        return self.notify(kind, NotificationLevel.WARNING, message, detail)

    def error(self, kind: NotificationKind, message: str, detail: Optional[str] = None) -> Notification:
        return self.notify(kind, NotificationLevel.ERROR, message, detail)

    @property
    def history(self) -> List[Notification]:
        return list(self._history)

    def last(self) -> Optional[Notification]:
        return self._history[-1] if self._history else None

    def clear(self) -> None:
        self._history.clear()
