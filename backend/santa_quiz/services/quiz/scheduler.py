import heapq
import itertools
import time
from typing import Callable, List, Tuple


class ScheduledCall:
    """Handle for a pending delayed callback. Cancelled calls never fire."""

    def __init__(self, delay: float):
        self.delay = delay
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


class VirtualScheduler:
    """Deterministic scheduler driven by an explicit virtual clock.

    Nothing runs until `advance` is called; due callbacks then fire in
    deadline order (ties in scheduling order), with `now()` set to each
    callback's deadline while it runs.
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._queue: List[Tuple[float, int, ScheduledCall, Callable[[], None]]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        handle = ScheduledCall(delay)
        due = round(self._now + max(0.0, delay), 9)
        heapq.heappush(self._queue, (due, next(self._seq), handle, callback))
        return handle

    def advance(self, seconds: float) -> None:
        target = round(self._now + seconds, 9)
        while self._queue and self._queue[0][0] <= target + 1e-9:
            due, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = max(self._now, due)
            handle.fired = True
            callback()
        self._now = max(self._now, target)

    def pending(self) -> int:
        return sum(1 for _, _, h, _ in self._queue if not h.cancelled)


class SocketIOScheduler:
    """Runs delayed callbacks as Socket.IO background tasks inside an app context."""

    def __init__(self, app, socketio):
        self.app = app
        self.socketio = socketio

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        handle = ScheduledCall(delay)

        def _worker():
            if delay > 0:
                self.socketio.sleep(delay)
            if handle.cancelled:
                return
            handle.fired = True
            with self.app.app_context():
                try:
                    callback()
                except Exception:
                    self.app.logger.exception(f"[timer-error] callback failed after {delay}s")

        self.socketio.start_background_task(_worker)
        return handle
