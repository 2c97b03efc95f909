"""
Time sources for playback.

The real clock is the host's audio element; these stand in for it in the
headless player and in tests.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Protocol


class PlaybackClock(Protocol):
    """Anything that can report the current playback position."""

    @property
    def duration(self) -> Optional[float]: ...

    def current_time(self) -> float: ...

    @property
    def ended(self) -> bool: ...


class ManualClock:
    """A clock that only moves when told to."""

    def __init__(self, duration: Optional[float] = None, start: float = 0.0):
        self._duration = duration
        self._now = start

    @property
    def duration(self) -> Optional[float]:
        return self._duration

    def current_time(self) -> float:
        return self._now

    def set(self, t: float) -> None:
        self._now = t

    def advance(self, dt: float) -> float:
        self._now += dt
        return self._now

    @property
    def ended(self) -> bool:
        return self._duration is not None and self._now >= self._duration


class WallClock:
    """
    Seconds since start() on a monotonic timer, capped at the duration.
    """

    def __init__(self, duration: Optional[float] = None, timer: Callable[[], float] = time.monotonic):
        self._duration = duration
        self._timer = timer
        self._t0: Optional[float] = None

    @property
    def duration(self) -> Optional[float]:
        return self._duration

    def start(self) -> None:
        self._t0 = self._timer()

    def current_time(self) -> float:
        if self._t0 is None:
            return 0.0
        elapsed = self._timer() - self._t0
        if self._duration is not None:
            return min(elapsed, self._duration)
        return elapsed

    @property
    def ended(self) -> bool:
        return self._duration is not None and self.current_time() >= self._duration
