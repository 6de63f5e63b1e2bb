"""
Leading-edge throttling with pluggable clocks.

The first call in a window runs immediately; a latch drops every further
call until the clock fires the reset. There is no trailing flush, so the
last call inside a window may be lost. The latch is guarded by a lock, so
clocks may reset it from their own thread.
"""

import asyncio
import heapq
import itertools
import threading
from typing import Callable, Optional, Protocol

from snowfall.logger import logger


class Clock(Protocol):
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> None:
        """Run callback once after delay_ms milliseconds."""


class VirtualClock:
    """
    Manually advanced clock for deterministic tests.

    Callbacks run synchronously inside advance(), in due-time order.
    """

    def __init__(self):
        self.now_ms = 0.0
        self._pending: list[tuple[float, int, Callable[[], None]]] = []
        self._sequence = itertools.count()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> None:
        heapq.heappush(self._pending, (self.now_ms + delay_ms, next(self._sequence), callback))

    def advance(self, ms: float) -> None:
        target = self.now_ms + ms
        while self._pending and self._pending[0][0] <= target:
            due, _, callback = heapq.heappop(self._pending)
            self.now_ms = due
            callback()
        self.now_ms = target

    @property
    def pending(self) -> int:
        return len(self._pending)


class AsyncioClock:
    """Clock backed by an asyncio event loop (the service's main loop)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> None:
        self.loop.call_soon_threadsafe(self.loop.call_later, delay_ms / 1000, callback)


class ThreadingClock:
    """Clock backed by daemon threading.Timer instances."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> None:
        timer = threading.Timer(delay_ms / 1000, callback)
        timer.daemon = True
        timer.start()


class Throttle:
    """
    Wrap func so it runs at most once per wait_ms window.

    Example:
        on_resize = Throttle(worker.resize, 33, clock)
        on_resize()  # runs
        on_resize()  # dropped until 33 ms have passed
    """

    def __init__(self, func: Callable[..., None], wait_ms: float, clock: Clock):
        self.func = func
        self.wait_ms = wait_ms
        self.clock = clock
        self.waiting = False
        self._lock = threading.Lock()

    def __call__(self, *args, **kwargs) -> bool:
        """
        Returns:
            True if func ran, False if the call was dropped
        """
        with self._lock:
            if self.waiting:
                logger.debug(f"Throttled call dropped: {getattr(self.func, '__name__', self.func)}")
                return False
            self.waiting = True

        try:
            self.func(*args, **kwargs)
        except Exception:
            self._release()
            raise
        self.clock.call_later(self.wait_ms, self._release)
        return True

    def _release(self) -> None:
        with self._lock:
            self.waiting = False
