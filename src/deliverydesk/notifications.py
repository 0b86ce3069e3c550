"""Transient user-facing notifications for mutations and lookups."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

logger = logging.getLogger(__name__)

Level = Literal["success", "error", "info"]


@dataclass(slots=True)
class Notification:
    level: Level
    message: str
    created_at: datetime


class NotificationCenter:
    """Bounded, newest-last feed of notifications."""

    def __init__(self, history: int = 50) -> None:
        self._items: deque[Notification] = deque(maxlen=history)

    def post(self, level: Level, message: str) -> Notification:
        notification = Notification(level=level, message=message, created_at=datetime.now(timezone.utc))
        self._items.append(notification)
        if level == "error":
            logger.error(message)
        else:
            logger.info(message)
        return notification

    def success(self, message: str) -> Notification:
        return self.post("success", message)

    def error(self, message: str) -> Notification:
        return self.post("error", message)

    def recent(self, limit: int | None = None) -> list[Notification]:
        items = list(self._items)
        if limit is not None:
            return items[-limit:] if limit > 0 else []
        return items

    def clear(self) -> None:
        self._items.clear()
