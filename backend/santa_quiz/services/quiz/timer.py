import math
from typing import Callable, Optional


class TimerHandle:
    """One countdown run. Remaining time is tracked in whole ticks."""

    def __init__(self, duration: float, step: float):
        self.duration = duration
        self.step = step
        self.ticks_left = int(round(duration / step))
        self.active = True
        self._call = None

    @property
    def remaining(self) -> float:
        return round(max(0, self.ticks_left) * self.step, 6)

    @property
    def display(self) -> int:
        return math.ceil(self.remaining)


class CountdownTimer:
    """Single-shot, cancelable countdown on top of a scheduler.

    Ticks every `interval` seconds, taking `step` seconds off the remaining
    time and reporting it to `on_tick`. When nothing is left `on_time_up`
    fires once. Starting a new run cancels the previous one, so at most one
    run is live per timer.
    """

    def __init__(self, scheduler, interval: float = 0.1, step: float = 0.1):
        self.scheduler = scheduler
        self.interval = interval
        self.step = step
        self._current: Optional[TimerHandle] = None

    @property
    def current(self) -> Optional[TimerHandle]:
        return self._current

    def start(self, duration: float,
              on_tick: Optional[Callable[[float], None]] = None,
              on_time_up: Optional[Callable[[], None]] = None) -> TimerHandle:
        self.cancel()
        handle = TimerHandle(duration, self.step)
        self._current = handle

        def _tick():
            if not handle.active:
                return
            handle.ticks_left -= 1
            if on_tick:
                on_tick(handle.remaining)
            # on_tick may have cancelled the run
            if not handle.active:
                return
            if handle.ticks_left <= 0:
                handle.active = False
                if on_time_up:
                    on_time_up()
                return
            handle._call = self.scheduler.call_later(self.interval, _tick)

        handle._call = self.scheduler.call_later(self.interval, _tick)
        return handle

    def cancel(self, handle: Optional[TimerHandle] = None) -> None:
        handle = handle or self._current
        if handle is None:
            return
        handle.active = False
        if handle._call is not None:
            handle._call.cancel()
        if handle is self._current:
            self._current = None
