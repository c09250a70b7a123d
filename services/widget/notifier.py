"""
自动过期的校验提示。

同一时间最多展示一条提示；新提示立即替换旧提示并重置过期时间。
清除定时器默认挂在当前运行的 asyncio 事件循环上（loop.call_later），
没有运行中的事件循环时只依赖读取时的过期判断。

notice_cancel_on_replace=False 时保留旧定时器：旧定时器触发时会把
之后设置的新提示也一并清除（提前清除）。
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, List, Optional

from api.schemas.widget import Notification
from services.config import WidgetEngineConfig, get_widget_engine_config

logger = logging.getLogger(__name__)

# (delay, callback) -> 带 cancel() 的句柄；返回 None 表示未能调度
Scheduler = Callable[[float, Callable[[], None]], Any]


def loop_scheduler(delay: float, callback: Callable[[], None]) -> Optional[asyncio.TimerHandle]:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return None
    return loop.call_later(delay, callback)


class TransientNotifier:
    """持有至多一条校验提示，到期自动清除。"""

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        cancel_on_replace: Optional[bool] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], float] = time.monotonic,
        config: Optional[WidgetEngineConfig] = None,
    ):
        config = config or get_widget_engine_config()
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else config.notice_ttl_seconds
        self.cancel_on_replace = (
            cancel_on_replace if cancel_on_replace is not None else config.notice_cancel_on_replace
        )
        self._scheduler = scheduler or loop_scheduler
        self._clock = clock
        self._message = ""
        self._expires_at: Optional[float] = None
        self._pending: List[Any] = []

    def report(self, message: str) -> None:
        if self.cancel_on_replace:
            self._cancel_pending()
        self._message = message
        self._expires_at = self._clock() + self.ttl_seconds
        handle = self._scheduler(self.ttl_seconds, self._on_timer)
        if handle is not None:
            self._pending.append(handle)
        logger.debug("校验提示: %s", message)

    def _on_timer(self) -> None:
        # 旧定时器未取消时同样会清除当前提示
        if self._pending:
            self._pending.pop(0)
        self.clear()

    def clear(self) -> None:
        self._message = ""
        self._expires_at = None

    def close(self) -> None:
        """取消所有待触发的定时器并清除提示。"""
        self._cancel_pending()
        self.clear()

    def _cancel_pending(self) -> None:
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()

    @property
    def message(self) -> str:
        if self._expires_at is not None and self._clock() >= self._expires_at:
            self.clear()
        return self._message

    @property
    def notification(self) -> Notification:
        message = self.message
        return Notification(message=message, expires_at=self._expires_at if message else None)

    @property
    def pending_timers(self) -> int:
        return len(self._pending)
