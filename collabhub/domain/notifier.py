"""
User-facing notices.

Each signed-in principal gets one Notifier. Stores push short success and
error messages onto it; the client drains them through the session API and
shows them as toasts.
"""

import logging
from collections import deque
from datetime import datetime
from enum import Enum
from typing import Deque, List

from pydantic import BaseModel, Field

from collabhub.infrastructure.db.models.base import utcnow


logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notice(BaseModel):
    level: NoticeLevel
    message: str
    created_at: datetime = Field(default_factory=utcnow)


class Notifier:
    """Bounded queue of notices for one principal."""

    def __init__(self, max_notices: int = 50):
        self._notices: Deque[Notice] = deque(maxlen=max_notices)

    def success(self, message: str) -> Notice:
        logger.info(f"Notice: {message}")
        return self._push(NoticeLevel.SUCCESS, message)

    def error(self, message: str) -> Notice:
        logger.warning(f"Error notice: {message}")
        return self._push(NoticeLevel.ERROR, message)

    def info(self, message: str) -> Notice:
        logger.info(f"Notice: {message}")
        return self._push(NoticeLevel.INFO, message)

    def _push(self, level: NoticeLevel, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        self._notices.append(notice)
        return notice

    def peek(self) -> List[Notice]:
        return list(self._notices)

    def drain(self) -> List[Notice]:
        """Return all pending notices in order and clear the queue."""
        notices = list(self._notices)
        self._notices.clear()
        return notices

    def take(self, notices: List[Notice]) -> List[Notice]:
        """Remove just `notices` from the queue, leaving the rest pending."""
        wanted = {id(n) for n in notices}
        taken = [n for n in self._notices if id(n) in wanted]
        kept = [n for n in self._notices if id(n) not in wanted]
        self._notices.clear()
        self._notices.extend(kept)
        return taken

    def __len__(self) -> int:
        return len(self._notices)
