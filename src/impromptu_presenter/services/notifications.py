"""Transient user notices (toasts)."""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Literal, Protocol

_logger = logging.getLogger(__name__)

NoticeVariant = Literal["default", "destructive"]


@dataclass(frozen=True)
class Notice:
    """Short advisory message shown to the user."""

    title: str
    description: str
    variant: NoticeVariant = "default"


class Notifier(Protocol):
    """Interface for publishing notices."""

    def notify(self, notice: Notice) -> None:
        """Publish a notice."""


@dataclass
class NoticeBoard(Notifier):
    """Keeps the most recent notices until a client drains them."""

    max_notices: int = 20
    _notices: deque[Notice] = field(init=False)

    def __post_init__(self) -> None:
        self._notices = deque(maxlen=self.max_notices)

    def notify(self, notice: Notice) -> None:
        """Queue a notice and log it."""
        level = logging.WARNING if notice.variant == "destructive" else logging.INFO
        _logger.log(level, "Notice: %s: %s", notice.title, notice.description)
        self._notices.append(notice)

    def drain(self) -> list[Notice]:
        """Return and clear pending notices."""
        notices = list(self._notices)
        self._notices.clear()
        return notices
