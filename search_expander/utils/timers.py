from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, List, Optional, Protocol, Set

logger = logging.getLogger(__name__)

Callback = Callable[[], Any]


class TimerHandle:
    """
    Cancellable reference to a scheduled callback.
    Cancelling twice, or after the callback ran, is a no-op.
    """

    def __init__(self, cancel: Callable[[], None]) -> None:
        self._cancel = cancel
        self._cancelled = False

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class Scheduler(Protocol):
    """
    Timer source used by the engine. Delays are in seconds.
    A callback may return an awaitable; the scheduler runs it as a task.
    """

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        ...

    def call_every(self, interval: float, callback: Callback) -> TimerHandle:
        ...

    def spawn(self, result: Any) -> None:
        ...


class LoopScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._tasks: Set[asyncio.Task] = set()
        self._handles: Set[TimerHandle] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        def fire() -> None:
            self._handles.discard(handle)
            self._run(callback)

        timer = self.loop.call_later(max(delay, 0.0), fire)
        handle = self._track(TimerHandle(timer.cancel))
        return handle

    def call_every(self, interval: float, callback: Callback) -> TimerHandle:
        current: List[asyncio.TimerHandle] = []

        def tick() -> None:
            current[0] = self.loop.call_later(interval, tick)
            self._run(callback)

        current.append(self.loop.call_later(interval, tick))
        return self._track(TimerHandle(lambda: current[0].cancel()))

    def spawn(self, result: Any) -> None:
        """Run an awaitable returned by a callback as a tracked task."""
        if not inspect.isawaitable(result):
            return
        task = asyncio.ensure_future(result, loop=self.loop)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    async def drain(self) -> None:
        """Wait for every task spawned so far, including ones they spawn."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def pending(self) -> int:
        """Timers that are still due to fire."""
        return sum(1 for h in self._handles if not h.cancelled)

    def cancel_all(self) -> None:
        for handle in list(self._handles):
            handle.cancel()
        self._handles.clear()

    # ---- internals ----

    def _run(self, callback: Callback) -> None:
        self.spawn(callback())

    def _track(self, handle: TimerHandle) -> TimerHandle:
        self._handles = {h for h in self._handles if not h.cancelled}
        self._handles.add(handle)
        return handle

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Scheduled task failed: %r", exc, exc_info=exc)


class Debouncer:
    """
    Delays ``func`` until calls stop arriving for ``wait`` seconds.
    Each call cancels the previously scheduled fire.
    """

    def __init__(self, scheduler: Scheduler, wait: float, func: Callback) -> None:
        self._scheduler = scheduler
        self._wait = wait
        self._func = func
        self._handle: Optional[TimerHandle] = None

    def __call__(self) -> None:
        self.cancel()
        self._handle = self._scheduler.call_later(self._wait, self._fire)

    def _fire(self) -> Any:
        self._handle = None
        return self._func()

    @property
    def pending(self) -> bool:
        return self._handle is not None and not self._handle.cancelled

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
