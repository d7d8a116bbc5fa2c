"""Lifetime running statistics per subject.

The aggregator keeps one immutable ``AggregateRecord`` per subject and
replaces it on every update, so a record handed to a caller is a
snapshot that later updates never modify.

Example usage:
    aggregator = MetricsAggregator()
    aggregator.update("redux", 12.5)
    aggregator.update("redux", 7.5)

    record = aggregator.get("redux")
    print(f"{record.count} samples, avg {record.average_duration}ms")
"""

import math
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Any

from .errors import InvalidSample
from .perf_logging import LogCategory, get_category_logger

logger = get_category_logger(LogCategory.AGGREGATOR)


@dataclass(frozen=True)
class AggregateRecord:
    """Running statistics for one subject.

    Attributes:
        subject: Name of the measured strategy.
        count: Number of samples recorded.
        total_duration: Sum of sample durations in milliseconds.
        average_duration: total_duration / count, or 0 with no samples.
        min_duration: Shortest sample, or 0 with no samples.
        max_duration: Longest sample, or 0 with no samples.
    """

    subject: str
    count: int = 0
    total_duration: float = 0.0
    average_duration: float = 0.0
    min_duration: float = 0.0
    max_duration: float = 0.0

    def with_sample(self, duration_ms: float) -> "AggregateRecord":
        """Return a new record including one more sample."""
        count = self.count + 1
        total = self.total_duration + duration_ms
        first = self.count == 0
        return AggregateRecord(
            subject=self.subject,
            count=count,
            total_duration=total,
            average_duration=total / count,
            min_duration=duration_ms if first else min(self.min_duration, duration_ms),
            max_duration=duration_ms if first else max(self.max_duration, duration_ms),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "count": self.count,
            "total_duration": self.total_duration,
            "average_duration": self.average_duration,
            "min_duration": self.min_duration,
            "max_duration": self.max_duration,
        }


DEFAULT_RECENT_WINDOW = 100


class MetricsAggregator:
    """Per-subject count, total and mean of recorded samples.

    Subjects are kept in registration order: the order in which each
    subject received its first sample since it was last reset.

    Alongside the lifetime record, the most recent ``recent_window``
    samples of each subject are kept for short-term averages.
    """

    def __init__(self, recent_window: int = DEFAULT_RECENT_WINDOW) -> None:
        if recent_window < 1:
            raise ValueError(f"recent_window must be >= 1, got {recent_window}")
        self.recent_window = recent_window
        self._records: dict[str, AggregateRecord] = {}
        self._recent: dict[str, deque[float]] = {}
        self._lock = Lock()

    def update(self, subject: str, duration_ms: float) -> AggregateRecord:
        """Record a sample for a subject.

        Args:
            subject: Name of the subject.
            duration_ms: Sample duration in milliseconds.

        Returns:
            The subject's updated record.

        Raises:
            InvalidSample: If the duration is negative or NaN. The
                aggregate is left unchanged.
        """
        if duration_ms < 0 or math.isnan(duration_ms):
            raise InvalidSample(subject, duration_ms)

        with self._lock:
            current = self._records.get(subject) or AggregateRecord(subject=subject)
            record = current.with_sample(float(duration_ms))
            self._records[subject] = record
            window = self._recent.setdefault(subject, deque(maxlen=self.recent_window))
            window.append(float(duration_ms))

        logger.debug(
            f"[PERF] {subject}: sample {duration_ms:.3f}ms "
            f"(n={record.count}, avg={record.average_duration:.3f}ms)",
            extra={"duration_ms": duration_ms, "subject": subject},
        )
        return record

    def get(self, subject: str) -> AggregateRecord | None:
        """Get the record for a subject, or None if it has no samples."""
        with self._lock:
            return self._records.get(subject)

    def get_all(self) -> list[AggregateRecord]:
        """Get all records in registration order."""
        with self._lock:
            return list(self._records.values())

    def subjects(self) -> list[str]:
        """Get tracked subjects in registration order."""
        with self._lock:
            return list(self._records.keys())

    def recent_samples(self, subject: str) -> list[float]:
        """Most recent samples for a subject, oldest first."""
        with self._lock:
            return list(self._recent.get(subject, ()))

    def recent_average(self, subject: str) -> float:
        """Mean of the recent samples, rounded to 2 decimals; 0 without samples."""
        samples = self.recent_samples(subject)
        if not samples:
            return 0.0
        return round(sum(samples) / len(samples), 2)

    def reset(self, subject: str | None = None) -> None:
        """Clear collected statistics.

        Args:
            subject: Specific subject to clear, or None for all.
        """
        with self._lock:
            if subject is None:
                self._records.clear()
                self._recent.clear()
            else:
                self._records.pop(subject, None)
                self._recent.pop(subject, None)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, subject: object) -> bool:
        return subject in self._records


__all__ = ["DEFAULT_RECENT_WINDOW", "AggregateRecord", "MetricsAggregator"]
