"""Caller-owned measurement session.

A ``PerfSession`` bundles one sampler, aggregator, score calculator,
benchmark runner and memory monitor. Sessions share no state, so
several can run side by side and tests can build a fresh one each time.

Example usage:
    session = PerfSession()

    session.start_measure("context")
    render_with_context()
    session.end_measure("context")

    with session.measure("redux"):
        render_with_redux()

    print(session.compare().fastest)

    session.run_benchmark("redux", "add_todo", add_todo, iterations=500)
    print(session.generate_report())
"""

from collections.abc import Awaitable, Callable, Coroutine, Generator
from contextlib import contextmanager
from typing import Any, TypeVar

from .aggregator import AggregateRecord, MetricsAggregator
from .benchmark import BenchmarkResult, BenchmarkRunner, CancelCheck
from .clock import Clock, MonotonicClock
from .config import PerfScopeConfig
from .errors import MeasurementError
from .memory import MemoryMonitor, MemoryProbe, MemorySnapshot, create_memory_probe
from .perf_logging import LogCategory, get_category_logger
from .sampler import Sampler
from .scoring import Comparison, create_score_calculator

logger = get_category_logger(LogCategory.SESSION)

F = TypeVar("F", bound=Callable[..., Any])


class PerfSession:
    """Entry point for instrumentation, comparison and benchmarking.

    Attributes:
        config: Session configuration.
        clock: Clock shared by the sampler and the benchmark runner.
        aggregator: Live per-subject statistics.
        sampler: Start/end timing feeding the aggregator.
        scores: Score calculator over aggregate snapshots.
        benchmarks: Benchmark runner and result log.
        memory: Memory monitor with trend window.
    """

    def __init__(
        self,
        config: PerfScopeConfig | None = None,
        clock: Clock | None = None,
        memory_probe: MemoryProbe | None = None,
    ):
        self.config = config or PerfScopeConfig()
        self.clock = clock or MonotonicClock()
        self.aggregator = MetricsAggregator(recent_window=self.config.recent_window_size)
        self.sampler = Sampler(
            self.aggregator,
            clock=self.clock,
            reject_overlapping_starts=self.config.reject_overlapping_starts,
        )
        self.scores = create_score_calculator(self.config.score_strategy)
        self.benchmarks = BenchmarkRunner(
            clock=self.clock,
            default_iterations=self.config.default_iterations,
        )
        self.memory = MemoryMonitor(
            memory_probe or create_memory_probe(self.config),
            window_size=self.config.memory_window_size,
        )

    # Live measurement

    def start_measure(self, subject: str) -> None:
        self.sampler.start(subject)

    def end_measure(self, subject: str) -> float:
        """Finish a measurement and return its duration in milliseconds.

        An end without a matching start is logged and reported as 0.0,
        unless ``strict_measurements`` is set, in which case the
        MeasurementError propagates.
        """
        try:
            return self.sampler.end(subject)
        except MeasurementError as e:
            if self.config.strict_measurements:
                raise
            logger.warning(str(e), extra={"subject": subject})
            return e.duration_ms

    @contextmanager
    def measure(self, subject: str) -> Generator[None, None, None]:
        """Measure a block; finishing follows ``end_measure`` rules.

        Nested blocks for one subject share a single pending start, so
        only the innermost records a sample.
        """
        with self.sampler.measure(subject, end=self.end_measure):
            yield

    def timed(self, subject: str) -> Callable[[F], F]:
        return self.sampler.timed(subject, end=self.end_measure)

    def record_sample(self, subject: str, duration_ms: float) -> AggregateRecord:
        """Record an externally measured duration."""
        return self.aggregator.update(subject, duration_ms)

    # Aggregates

    def get_aggregate(self, subject: str) -> AggregateRecord | None:
        return self.aggregator.get(subject)

    def get_all_aggregates(self) -> list[AggregateRecord]:
        return self.aggregator.get_all()

    def get_recent_average(self, subject: str) -> float:
        """Average of the subject's most recent samples (0.0 without any)."""
        return self.aggregator.recent_average(subject)

    def reset_aggregates(self, subject: str | None = None) -> None:
        self.aggregator.reset(subject)

    def compare(self) -> Comparison:
        """Rank subjects by score, best first."""
        return self.scores.compare(self.aggregator.get_all())

    # Benchmarks

    def run_benchmark(
        self,
        subject: str,
        operation_label: str,
        operation: Callable[[], Any],
        iterations: int | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> BenchmarkResult:
        return self.benchmarks.run(
            subject, operation_label, operation, iterations, should_cancel
        )

    def run_benchmark_async(
        self,
        subject: str,
        operation_label: str,
        operation: Callable[[], Awaitable[Any] | Any],
        iterations: int | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> Coroutine[Any, Any, BenchmarkResult]:
        """Validate now and return the coroutine running the benchmark."""
        return self.benchmarks.run_async(
            subject, operation_label, operation, iterations, should_cancel
        )

    def get_benchmark_results(self) -> list[BenchmarkResult]:
        return self.benchmarks.get_results()

    def compare_operations(self, operation_label: str) -> list[BenchmarkResult]:
        return self.benchmarks.compare_operations(operation_label)

    def generate_report(self) -> str:
        return self.benchmarks.generate_report()

    def clear_benchmarks(self) -> None:
        self.benchmarks.clear()

    # Memory

    def get_memory_snapshot(self) -> MemorySnapshot:
        return self.memory.snapshot()


__all__ = ["PerfSession"]
