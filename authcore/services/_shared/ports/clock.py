from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Port returning the current time as integer epoch seconds."""

    def now(self) -> int: ...


class SystemClock(Clock):
    """Wall-clock implementation."""

    def now(self) -> int:
        return int(time.time())


class FixedClock(Clock):
    """Deterministic clock for tests; advance it explicitly."""

    def __init__(self, now: int = 0) -> None:
        self._now = now

    def now(self) -> int:
        return self._now

    def set(self, now: int) -> None:
        self._now = now

    def advance(self, seconds: int) -> None:
        self._now += seconds
