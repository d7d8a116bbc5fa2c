"""Performance telemetry and comparative benchmarking.

This package measures alternative implementation strategies ("subjects")
and compares them:

- **sampler**: start/end timing, ``measure`` context manager, ``timed``
- **aggregator**: lifetime count/total/average per subject
- **scoring**: bounded scores and ranked comparisons
- **benchmark**: sequential repeated trials with a result log and report
- **memory**: psutil-backed memory snapshots with trend detection
- **session**: ``PerfSession`` tying all of the above together

Example usage:

    from perfscope import PerfSession

    session = PerfSession()

    with session.measure("redux"):
        render()

    session.run_benchmark("redux", "add_todo", add_todo, iterations=100)
    print(session.generate_report())
"""

__version__ = "0.1.0"

from .aggregator import AggregateRecord, MetricsAggregator
from .benchmark import BenchmarkResult, BenchmarkRunner
from .clock import Clock, MonotonicClock
from .config import PerfScopeConfig
from .errors import (
    ConfigurationError,
    ErrorCategory,
    InvalidIterationCount,
    InvalidSample,
    MeasurementError,
    PerfScopeError,
)
from .memory import (
    MemoryMonitor,
    MemoryProbe,
    MemorySnapshot,
    MemoryTrend,
    NullMemoryProbe,
    PsutilMemoryProbe,
    create_memory_probe,
)
from .perf_logging import LogCategory, get_logger, setup_logging
from .sampler import Sampler
from .scoring import (
    Comparison,
    ScoreCalculator,
    SubjectScore,
    ThresholdScoreCalculator,
    create_score_calculator,
)
from .session import PerfSession

__all__ = [
    "__version__",
    # Session
    "PerfSession",
    "PerfScopeConfig",
    # Components
    "Clock",
    "MonotonicClock",
    "Sampler",
    "AggregateRecord",
    "MetricsAggregator",
    "ScoreCalculator",
    "ThresholdScoreCalculator",
    "create_score_calculator",
    "SubjectScore",
    "Comparison",
    "BenchmarkResult",
    "BenchmarkRunner",
    # Memory
    "MemoryTrend",
    "MemorySnapshot",
    "MemoryProbe",
    "NullMemoryProbe",
    "PsutilMemoryProbe",
    "MemoryMonitor",
    "create_memory_probe",
    # Errors
    "ErrorCategory",
    "PerfScopeError",
    "MeasurementError",
    "InvalidSample",
    "InvalidIterationCount",
    "ConfigurationError",
    # Logging
    "LogCategory",
    "setup_logging",
    "get_logger",
]
