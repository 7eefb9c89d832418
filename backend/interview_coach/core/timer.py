"""
Countdown Timer
Restartable single-countdown primitive driven by a recurring scheduled callback.

The timer knows nothing about questions or scoring. It ticks once per second
while running, and raises a one-shot expiry signal when it reaches zero.
"""

import logging
from typing import Any, Callable, List, Optional, Protocol

from interview_coach.core.constants import TICK_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class CancellableHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything with asyncio's ``call_later`` signature (the running event loop in production)."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> CancellableHandle: ...


ExpiryListener = Callable[[], None]


class CountdownTimer:
    """
    Single countdown.

    Invariants:
    - remaining_seconds is never negative
    - is_running is never True while remaining_seconds == 0
    - the expiry signal fires at most once per start() and stays raised
      until start() or reset() clears it
    """

    def __init__(self, scheduler: Scheduler, name: str = "timer"):
        self._scheduler = scheduler
        self.name = name
        self._remaining = 0
        self._running = False
        self._expired = False
        self._handle: Optional[CancellableHandle] = None
        self._listeners: List[ExpiryListener] = []

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def has_expired(self) -> bool:
        return self._expired

    def add_expiry_listener(self, listener: ExpiryListener) -> None:
        self._listeners.append(listener)

    def start(self, duration_seconds: int) -> None:
        """Reset remaining time, clear any prior expiry and begin ticking."""
        self._validate_duration(duration_seconds)
        self._cancel_pending()
        self._remaining = duration_seconds
        self._expired = False

        if duration_seconds == 0:
            # Nothing to count down
            self._running = False
            self._fire_expiry()
            return

        self._running = True
        self._schedule_tick()
        logger.debug(f"[{self.name}] started with {duration_seconds}s")

    def stop(self) -> None:
        """Halt ticking. Remaining time and expiry state are kept."""
        self._cancel_pending()
        self._running = False

    def reset(self, duration_seconds: int) -> None:
        """Stop ticking, set remaining time and clear the expiry signal."""
        self._validate_duration(duration_seconds)
        self._cancel_pending()
        self._running = False
        self._remaining = duration_seconds
        self._expired = False

    def tick(self) -> None:
        """Advance the countdown by one second."""
        self._handle = None
        if not self._running or self._remaining <= 0:
            return

        if self._remaining <= 1:
            self._remaining = 0
            self._running = False
            self._fire_expiry()
            return

        self._remaining -= 1
        self._schedule_tick()

    def _schedule_tick(self) -> None:
        self._handle = self._scheduler.call_later(TICK_INTERVAL_SECONDS, self.tick)

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire_expiry(self) -> None:
        if self._expired:
            return
        self._expired = True
        logger.debug(f"[{self.name}] expired")
        for listener in list(self._listeners):
            listener()

    @staticmethod
    def _validate_duration(duration_seconds: int) -> None:
        if duration_seconds < 0:
            raise ValueError(f"duration_seconds must be >= 0, got {duration_seconds}")
