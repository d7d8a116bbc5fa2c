"""Memory usage probing with trend detection.

Two probes implement the same interface and are chosen when a session
is constructed:

- **PsutilMemoryProbe** reads process RSS and physical memory via psutil
- **NullMemoryProbe** always reports the "unavailable" sentinel

Neither probe raises; an unavailable reading is the sentinel snapshot
``MemorySnapshot(0, 0, 0, stable)``. ``MemoryMonitor`` keeps a bounded
window of recent readings and classifies their direction.

Example:
    monitor = MemoryMonitor(create_memory_probe(config), window_size=10)
    snapshot = monitor.snapshot()
    print(f"{snapshot.used_mb}MB ({snapshot.trend.value})")
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any

import psutil

from .config import PerfScopeConfig
from .perf_logging import LogCategory, get_category_logger

logger = get_category_logger(LogCategory.MEMORY)

_BYTES_PER_MB = 1024 * 1024


class MemoryTrend(Enum):
    """Direction of memory usage across the recent window."""

    STABLE = "stable"
    INCREASING = "increasing"
    DECREASING = "decreasing"


@dataclass(frozen=True)
class MemorySnapshot:
    """Point-in-time memory usage.

    Attributes:
        used_mb: Memory used by the process in MB.
        total_mb: Total memory available to the host in MB.
        percentage: used / total as a percentage in [0, 100].
        trend: Direction of usage over the recent window.
    """

    used_mb: float = 0.0
    total_mb: float = 0.0
    percentage: float = 0.0
    trend: MemoryTrend = MemoryTrend.STABLE

    @classmethod
    def unavailable(cls) -> "MemorySnapshot":
        """Sentinel snapshot for hosts without memory counters."""
        return cls()

    @property
    def is_available(self) -> bool:
        return self.total_mb > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "used_mb": self.used_mb,
            "total_mb": self.total_mb,
            "percentage": self.percentage,
            "trend": self.trend.value,
        }


class MemoryProbe(ABC):
    """Interface for host memory queries. Implementations never raise."""

    @abstractmethod
    def query(self) -> MemorySnapshot:
        """Return the current reading with a stable trend."""


class NullMemoryProbe(MemoryProbe):
    """Probe for hosts without memory counters."""

    def query(self) -> MemorySnapshot:
        return MemorySnapshot.unavailable()


class PsutilMemoryProbe(MemoryProbe):
    """Probe reporting process RSS against total physical memory.

    The percentage is the process's share of host RAM (the figure
    ``psutil.Process.memory_percent`` reports), so it stays small for
    most processes. There is no managed-heap limit to measure against.
    """

    def __init__(self) -> None:
        self._process: psutil.Process | None = None

    def query(self) -> MemorySnapshot:
        try:
            if self._process is None:
                self._process = psutil.Process()
            used = self._process.memory_info().rss
            total = psutil.virtual_memory().total
        except (psutil.Error, OSError) as e:
            logger.debug(f"Memory probe unavailable: {e}")
            return MemorySnapshot.unavailable()

        if total <= 0:
            return MemorySnapshot.unavailable()

        percentage = min(100.0, max(0.0, float(round(used / total * 100))))
        return MemorySnapshot(
            used_mb=round(used / _BYTES_PER_MB, 2),
            total_mb=round(total / _BYTES_PER_MB, 2),
            percentage=percentage,
        )


def create_memory_probe(config: PerfScopeConfig | None = None) -> MemoryProbe:
    """Select the memory probe for a session."""
    config = config or PerfScopeConfig()
    if config.enable_memory_probe:
        return PsutilMemoryProbe()
    return NullMemoryProbe()


def classify_trend(values: list[float]) -> MemoryTrend:
    """Classify a series as increasing, decreasing or stable.

    Increasing when every consecutive pair is non-decreasing and at least
    one pair strictly increases; decreasing analogously. Anything else,
    including fewer than two values, is stable.
    """
    if len(values) < 2:
        return MemoryTrend.STABLE

    pairs = list(zip(values, values[1:]))
    if all(b >= a for a, b in pairs) and any(b > a for a, b in pairs):
        return MemoryTrend.INCREASING
    if all(b <= a for a, b in pairs) and any(b < a for a, b in pairs):
        return MemoryTrend.DECREASING
    return MemoryTrend.STABLE


class MemoryMonitor:
    """Tracks recent memory readings to attach a trend to each snapshot."""

    def __init__(self, probe: MemoryProbe, window_size: int = 10):
        if window_size < 2:
            raise ValueError("window_size must be at least 2")
        self.probe = probe
        self.window_size = window_size
        self._window: deque[float] = deque(maxlen=window_size)

    def snapshot(self) -> MemorySnapshot:
        """Query the probe and return the reading with its trend.

        Sentinel readings are returned as-is and do not enter the window.
        """
        reading = self.probe.query()
        if not reading.is_available:
            return reading

        self._window.append(reading.used_mb)
        trend = classify_trend(list(self._window))
        return MemorySnapshot(
            used_mb=reading.used_mb,
            total_mb=reading.total_mb,
            percentage=reading.percentage,
            trend=trend,
        )

    def history(self) -> list[float]:
        """Used-MB readings currently in the window, oldest first."""
        return list(self._window)

    def reset(self) -> None:
        self._window.clear()


__all__ = [
    "MemoryTrend",
    "MemorySnapshot",
    "MemoryProbe",
    "NullMemoryProbe",
    "PsutilMemoryProbe",
    "MemoryMonitor",
    "create_memory_probe",
    "classify_trend",
]
