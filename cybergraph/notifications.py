"""Terminal-outcome notifications surfaced to the UI layer."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    message: str
    kind: NotificationKind


NotificationSink = Callable[[Notification], None]


class NotificationEmitter:
    """Keeps the most recent notification and forwards each one to sinks."""

    def __init__(self) -> None:
        self._latest: Optional[Notification] = None
        self._sinks: List[NotificationSink] = []

    @property
    def latest(self) -> Optional[Notification]:
        return self._latest

    def add_sink(self, sink: NotificationSink) -> None:
        self._sinks.append(sink)

    def emit(self, message: str, kind: NotificationKind = NotificationKind.SUCCESS) -> Notification:
        notification = Notification(message=message, kind=NotificationKind(kind))
        self._latest = notification
        logger.debug("notification kind=%s message=%s", notification.kind.value, message)
        for sink in list(self._sinks):
            sink(notification)
        return notification

    def dismiss(self) -> None:
        self._latest = None
