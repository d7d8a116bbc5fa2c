"""Controlled repeated-execution benchmarks.

A benchmark invokes one operation a fixed number of times, strictly one
trial after another, and records the per-trial durations. Results go to
an append-only log owned by the runner and never touch live aggregates.

Example usage:
    runner = BenchmarkRunner()

    result = runner.run("redux", "add_todo", add_todo, iterations=100)
    print(f"{result.average_time:.4f}ms per call")

    # Async operations are awaited to completion inside each trial
    result = await runner.run_async("swr", "fetch", fetch_page, iterations=10)

    print(runner.generate_report())
"""

import inspect
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

from .clock import Clock, MonotonicClock
from .errors import InvalidIterationCount
from .perf_logging import LogCategory, get_category_logger

logger = get_category_logger(LogCategory.BENCHMARK)

DEFAULT_ITERATIONS = 1000

CancelCheck = Callable[[], bool]


@dataclass(frozen=True)
class BenchmarkResult:
    """Outcome of one benchmark run.

    Attributes:
        subject: Strategy that was benchmarked.
        operation_label: Name of the benchmarked operation.
        iterations: Number of completed trials.
        total_duration: Sum of trial durations in milliseconds.
        average_time: total_duration / iterations.
        durations: Individual trial durations in run order.
        requested_iterations: Number of trials asked for.
        cancelled: Whether the run stopped before all requested trials.
    """

    subject: str
    operation_label: str
    iterations: int
    total_duration: float
    average_time: float
    durations: tuple[float, ...] = field(default_factory=tuple)
    requested_iterations: int = 0
    cancelled: bool = False

    @property
    def min_time(self) -> float:
        return min(self.durations) if self.durations else 0.0

    @property
    def max_time(self) -> float:
        return max(self.durations) if self.durations else 0.0

    def percentile(self, percentile: float) -> float:
        """Trial duration at a percentile (0-100), linearly interpolated."""
        sorted_values = sorted(self.durations)
        if not sorted_values:
            return 0.0

        n = len(sorted_values)
        if n == 1:
            return sorted_values[0]

        k = (percentile / 100) * (n - 1)
        f = int(k)
        c = f + 1 if f + 1 < n else f

        if f == c:
            return sorted_values[f]
        return sorted_values[f] + (k - f) * (sorted_values[c] - sorted_values[f])

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "subject": self.subject,
            "operation_label": self.operation_label,
            "iterations": self.iterations,
            "requested_iterations": self.requested_iterations,
            "cancelled": self.cancelled,
            "total_duration": round(self.total_duration, 4),
            "average_time": round(self.average_time, 4),
            "min_time": round(self.min_time, 4),
            "max_time": round(self.max_time, 4),
        }


def _validate_iterations(iterations: Any) -> int:
    if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
        raise InvalidIterationCount(iterations)
    return iterations


class BenchmarkRunner:
    """Runs benchmarks and keeps their results in memory.

    Trials never overlap: each trial's timer starts only after the
    previous operation call (including any awaited work) has finished.
    Cancellation is checked only between trials, so at least one trial
    always completes.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        default_iterations: int = DEFAULT_ITERATIONS,
    ):
        self.clock = clock or MonotonicClock()
        self.default_iterations = _validate_iterations(default_iterations)
        self._results: list[BenchmarkResult] = []
        self._lock = Lock()

    def run(
        self,
        subject: str,
        operation_label: str,
        operation: Callable[[], Any],
        iterations: int | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> BenchmarkResult:
        """Benchmark a synchronous operation.

        Args:
            subject: Strategy being benchmarked.
            operation_label: Name of the operation for grouping.
            operation: Zero-argument callable to time.
            iterations: Trials to run (defaults to ``default_iterations``).
            should_cancel: Optional check consulted between trials.

        Returns:
            The logged BenchmarkResult.

        Raises:
            InvalidIterationCount: If iterations is not a positive integer.
            TypeError: If the operation is asynchronous; use ``run_async``.
        """
        requested = self._requested(iterations)
        if inspect.iscoroutinefunction(operation):
            raise TypeError(
                f"Operation for '{operation_label}' is a coroutine function; use run_async()"
            )

        durations: list[float] = []
        for trial in range(requested):
            start = self.clock.now()
            try:
                outcome = operation()
            except Exception as e:
                self._log_failure(subject, operation_label, trial, e)
                raise
            end = self.clock.now()
            if inspect.isawaitable(outcome):
                if inspect.iscoroutine(outcome):
                    outcome.close()
                raise TypeError(
                    f"Operation for '{operation_label}' returned an awaitable; use run_async()"
                )
            durations.append(end - start)

            if trial + 1 < requested and should_cancel is not None and should_cancel():
                break

        return self._record(subject, operation_label, durations, requested)

    def run_async(
        self,
        subject: str,
        operation_label: str,
        operation: Callable[[], Awaitable[Any] | Any],
        iterations: int | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> Coroutine[Any, Any, BenchmarkResult]:
        """Benchmark an operation that may suspend.

        Awaitable results are awaited to completion before the trial's
        timer stops. Same arguments as ``run``; the iteration count is
        checked when this is called, before any coroutine is created.

        Returns:
            Coroutine resolving to the logged BenchmarkResult.
        """
        requested = self._requested(iterations)
        return self._run_trials_async(
            subject, operation_label, operation, requested, should_cancel
        )

    async def _run_trials_async(
        self,
        subject: str,
        operation_label: str,
        operation: Callable[[], Awaitable[Any] | Any],
        requested: int,
        should_cancel: CancelCheck | None,
    ) -> BenchmarkResult:
        durations: list[float] = []
        for trial in range(requested):
            start = self.clock.now()
            try:
                outcome = operation()
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                self._log_failure(subject, operation_label, trial, e)
                raise
            end = self.clock.now()
            durations.append(end - start)

            if trial + 1 < requested and should_cancel is not None and should_cancel():
                break

        return self._record(subject, operation_label, durations, requested)

    def get_results(self) -> list[BenchmarkResult]:
        """Get a copy of all logged results."""
        with self._lock:
            return self._results.copy()

    def compare_operations(self, operation_label: str) -> list[BenchmarkResult]:
        """Results for one operation, fastest average first."""
        matching = [r for r in self.get_results() if r.operation_label == operation_label]
        return sorted(matching, key=lambda r: r.average_time)

    def generate_report(self) -> str:
        """Render the log as markdown, one table per operation label.

        Labels appear in the order they were first benchmarked; rows are
        sorted by ascending average time.
        """
        results = self.get_results()
        report_lines = ["# Benchmark Report", ""]

        if not results:
            report_lines.append("No benchmark results recorded.")
            return "\n".join(report_lines) + "\n"

        labels = list(dict.fromkeys(r.operation_label for r in results))
        for label in labels:
            report_lines.extend(
                [
                    f"## {label}",
                    "",
                    "| Subject | Average (ms) | Total (ms) | Iterations |",
                    "|---------|--------------|------------|------------|",
                ]
            )
            for result in self.compare_operations(label):
                report_lines.append(
                    f"| {result.subject} | {result.average_time:.4f} "
                    f"| {result.total_duration:.2f} | {result.iterations} |"
                )
            report_lines.append("")

        return "\n".join(report_lines)

    def clear(self) -> None:
        """Clear all logged results."""
        with self._lock:
            self._results.clear()

    def _requested(self, iterations: int | None) -> int:
        if iterations is None:
            return self.default_iterations
        return _validate_iterations(iterations)

    def _log_failure(
        self, subject: str, operation_label: str, trial: int, error: Exception
    ) -> None:
        logger.error(
            f"[PERF] {subject}/{operation_label} failed on trial {trial + 1}: {error}",
            extra={"subject": subject, "operation": operation_label, "iterations": trial},
        )

    def _record(
        self,
        subject: str,
        operation_label: str,
        durations: list[float],
        requested: int,
    ) -> BenchmarkResult:
        completed = len(durations)
        total = sum(durations)
        result = BenchmarkResult(
            subject=subject,
            operation_label=operation_label,
            iterations=completed,
            total_duration=total,
            average_time=total / completed,
            durations=tuple(durations),
            requested_iterations=requested,
            cancelled=completed < requested,
        )

        with self._lock:
            self._results.append(result)

        if result.cancelled:
            logger.info(
                f"[PERF] {subject}/{operation_label} cancelled after "
                f"{completed}/{requested} iterations",
                extra={"subject": subject, "operation": operation_label, "iterations": completed},
            )
        logger.debug(
            f"[PERF] {subject}/{operation_label}: {completed} iterations, "
            f"avg={result.average_time:.4f}ms, total={total:.2f}ms",
            extra={
                "duration_ms": total,
                "subject": subject,
                "operation": operation_label,
                "iterations": completed,
            },
        )
        return result


__all__ = ["DEFAULT_ITERATIONS", "BenchmarkResult", "BenchmarkRunner"]
