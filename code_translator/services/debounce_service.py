"""
/**
 * @file code_translator/services/debounce_service.py
 * @description 防抖调度：静默期结束后仅触发最后一次输入，每次触发带递增序号。
 */
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Set, Union


logger = logging.getLogger(__name__)

SettledCallback = Callable[[int, str], Union[None, Awaitable[Any]]]


class Debouncer:
    """
    Holds at most one scheduled call on the event loop.

    Every schedule() cancels the pending timer and re-arms it; when the quiet
    interval elapses the callback receives (sequence, text). Sequence numbers
    grow monotonically across the debouncer's lifetime. Coroutine callbacks are
    run as tasks which close() cancels.
    """

    def __init__(
        self,
        delay: float,
        callback: SettledCallback,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.delay = delay
        self._callback = callback
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._sequence = 0
        self._tasks: Set[asyncio.Task] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def latest_sequence(self) -> int:
        return self._sequence

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def schedule(self, text: str) -> int:
        self.cancel_pending()
        self._sequence += 1
        seq = self._sequence
        self._handle = self.loop.call_later(self.delay, self._fire, seq, text)
        return seq

    def cancel_pending(self) -> bool:
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    def _fire(self, seq: int, text: str) -> None:
        self._handle = None
        result = self._callback(seq, text)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result, loop=self.loop)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Debounced callback failed: {task.exception()!r}")

    async def close(self) -> None:
        self.cancel_pending()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
