"""Monotonic millisecond clocks."""

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of monotonically non-decreasing time in milliseconds."""

    def now(self) -> float: ...


class MonotonicClock:
    """Clock backed by ``time.perf_counter``."""

    def now(self) -> float:
        return time.perf_counter() * 1000


__all__ = ["Clock", "MonotonicClock"]
