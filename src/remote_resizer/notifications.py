"""時間経過で消えるスナックバー通知の管理。"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Literal, Optional

from loguru import logger

from .observable import Observable

Severity = Literal["info", "error"]

DEFAULT_DURATION_SECONDS = 3.0


@dataclass(frozen=True)
class Notification:
    message: str
    severity: Severity
    created_at: datetime


class NotificationManager(Observable):
    """表示中の通知は常に0件か1件。新しい通知は古い通知とタイマーを置き換える。"""

    def __init__(
        self,
        *,
        duration: float = DEFAULT_DURATION_SECONDS,
        clock: Callable[[], datetime] = datetime.now,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        super().__init__()
        self.duration = duration
        self._clock = clock
        self._loop = loop
        self._current: Optional[Notification] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def current(self) -> Optional[Notification]:
        return self._current

    def notify(self, message: str, severity: Severity = "error") -> Notification:
        self._cancel_timer()
        notification = Notification(message=message, severity=severity, created_at=self._clock())
        self._set_current(notification)

        loop = self._loop or asyncio.get_running_loop()
        self._timer = loop.call_later(self.duration, self._expire, notification)
        logger.debug(f"Notification ({severity}): {message}")
        return notification

    def dismiss(self) -> None:
        self._cancel_timer()
        self._set_current(None)

    def _expire(self, notification: Notification) -> None:
        # 古いタイマーが新しい通知を消さないようにする
        if self._current is not notification:
            return
        self._timer = None
        self._set_current(None)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _set_current(self, notification: Optional[Notification]) -> None:
        if notification is self._current:
            return
        self._current = notification
        self._notify("notification", notification)
