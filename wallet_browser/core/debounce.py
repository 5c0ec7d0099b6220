"""
Debounced delivery of rapidly changing values (e.g. search keystrokes).

A Scheduler arms a callback after a delay and returns a TimerHandle that can
cancel it. The Debouncer cancels the pending handle on every new value, so
only the last value inside the window is delivered.
"""
from __future__ import annotations

import heapq
import itertools
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Generic, List, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SEARCH_DEBOUNCE_MS = 300


class TimerHandle(ABC):
    @abstractmethod
    def cancel(self) -> None:
        pass

    @property
    @abstractmethod
    def active(self) -> bool:
        """True while the callback is armed and has neither fired nor been cancelled."""
        pass


class Scheduler(ABC):
    @abstractmethod
    def arm(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run `callback` once after `delay` seconds unless cancelled."""
        pass


# -------------------------------------------------------------------------
# Wall-clock scheduler
# -------------------------------------------------------------------------

class _ThreadTimerHandle(TimerHandle):
    def __init__(self, delay: float, callback: Callable[[], None]):
        self._fired = False
        self._cancelled = False

        def _run() -> None:
            self._fired = True
            callback()

        self._timer = threading.Timer(delay, _run)
        self._timer.daemon = True
        self._timer.start()

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()

    @property
    def active(self) -> bool:
        return not (self._fired or self._cancelled)


class ThreadingScheduler(Scheduler):
    """
    Fires callbacks on a background timer thread. Hosts that are not
    thread-safe should marshal the callback back onto their own loop.
    """

    def arm(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return _ThreadTimerHandle(delay, callback)


# -------------------------------------------------------------------------
# Virtual-clock scheduler
# -------------------------------------------------------------------------

class _ManualHandle(TimerHandle):
    def __init__(self, callback: Callable[[], None]):
        self.callback = callback
        self.fired = False
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.fired or self.cancelled)


class ManualScheduler(Scheduler):
    """
    Single-threaded scheduler driven by advance(). Callbacks run
    synchronously inside advance(), in due-time order.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, _ManualHandle]] = []
        self._seq = itertools.count()

    def arm(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle(callback)
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), handle))
        return handle

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due callbacks. Returns how many fired."""
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            self.now = due
            if handle.cancelled:
                continue
            handle.fired = True
            handle.callback()
            fired += 1
        self.now = target
        return fired


# -------------------------------------------------------------------------
# Debouncer
# -------------------------------------------------------------------------

class Debouncer(Generic[T]):
    """
    Coalesce submitted values: the callback receives only the last value
    once `delay_ms` passes without another submit (last write wins).

    Each armed timer carries the generation it was armed for. A timer whose
    generation is no longer current (superseded by submit, cancel or flush)
    delivers nothing, even if it was already running when it was cancelled.
    """

    def __init__(
            self,
            callback: Callable[[T], None],
            *,
            scheduler: Scheduler,
            delay_ms: int = DEFAULT_SEARCH_DEBOUNCE_MS,
    ) -> None:
        self._callback = callback
        self._scheduler = scheduler
        self._delay = delay_ms / 1000.0
        self._lock = threading.Lock()
        self._handle: Optional[TimerHandle] = None
        self._value: Optional[T] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._handle is not None and self._handle.active

    def submit(self, value: T) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._generation += 1
            generation = self._generation
            self._value = value
            self._handle = self._scheduler.arm(self._delay, lambda: self._fire(generation))

    def cancel(self) -> None:
        with self._lock:
            self._drop()

    def flush(self) -> None:
        """Deliver the pending value now instead of waiting for the window."""
        with self._lock:
            if self._handle is None or not self._handle.active:
                return
            value = self._value
            self._drop()
        self._deliver(value)

    def _drop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                logger.debug("Ignoring superseded debounce timer")
                return
            value = self._value
            self._handle = None
            self._generation += 1
        self._deliver(value)

    def _deliver(self, value: Optional[T]) -> None:
        logger.debug("Debounce window elapsed, delivering value")
        self._callback(value)  # type: ignore[arg-type]
