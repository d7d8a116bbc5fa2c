"""Start/stop timing per subject.

The sampler turns elapsed clock time into samples for a
``MetricsAggregator``:
- ``start``/``end`` pair for manual instrumentation
- ``measure`` context manager for code blocks
- ``timed`` decorator for sync and async functions
"""

import functools
import inspect
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any, TypeVar

from .aggregator import MetricsAggregator
from .clock import Clock, MonotonicClock
from .errors import MeasurementError
from .perf_logging import LogCategory, get_category_logger

logger = get_category_logger(LogCategory.SAMPLER)

F = TypeVar("F", bound=Callable[..., Any])

EndHook = Callable[[str], float]


class Sampler:
    """Pairs start and end calls per subject and records the elapsed time.

    Only one measurement may be pending per subject. By default a second
    ``start`` replaces the pending one (the earlier start is discarded);
    with ``reject_overlapping_starts`` it raises instead.

    Example:
        >>> sampler = Sampler(aggregator)
        >>> sampler.start("context")
        >>> render()
        >>> duration = sampler.end("context")
    """

    def __init__(
        self,
        aggregator: MetricsAggregator,
        clock: Clock | None = None,
        reject_overlapping_starts: bool = False,
    ):
        self.aggregator = aggregator
        self.clock = clock or MonotonicClock()
        self.reject_overlapping_starts = reject_overlapping_starts
        self._pending: dict[str, float] = {}

    def start(self, subject: str) -> None:
        """Begin a measurement for a subject.

        Raises:
            MeasurementError: If a measurement is already pending and
                overlapping starts are rejected.
        """
        if subject in self._pending:
            if self.reject_overlapping_starts:
                raise MeasurementError(
                    subject,
                    f"Measurement for subject '{subject}' is already pending",
                )
            logger.debug(
                f"[PERF] {subject}: restarting pending measurement",
                extra={"subject": subject},
            )
        self._pending[subject] = self.clock.now()

    def end(self, subject: str) -> float:
        """Finish a measurement and record its duration.

        Returns:
            Elapsed milliseconds since the matching ``start``.

        Raises:
            MeasurementError: If no measurement is pending for the subject.
                Nothing is recorded.
        """
        started = self._pending.pop(subject, None)
        if started is None:
            raise MeasurementError(subject)

        duration_ms = max(0.0, self.clock.now() - started)
        self.aggregator.update(subject, duration_ms)
        return duration_ms

    def cancel(self, subject: str) -> bool:
        """Drop a pending measurement without recording it.

        Returns:
            True if a measurement was pending.
        """
        return self._pending.pop(subject, None) is not None

    def pending(self) -> list[str]:
        """Subjects with a measurement in flight."""
        return list(self._pending)

    @contextmanager
    def measure(
        self, subject: str, end: EndHook | None = None
    ) -> Generator[None, None, None]:
        """Measure a code block for a subject.

        The sample is recorded even if the block raises. A block's own
        exception always wins: if the measurement cannot be finished
        while it propagates, the MeasurementError is logged instead.

        Args:
            subject: Name of the subject.
            end: Callable finishing the measurement (defaults to ``end``).

        Example:
            with sampler.measure("zustand"):
                store.dispatch(action)
        """
        finish = end or self.end
        self.start(subject)
        try:
            yield
        except BaseException:
            try:
                finish(subject)
            except MeasurementError as e:
                logger.warning(f"[PERF] {e}", extra={"subject": subject})
            raise
        finish(subject)

    def timed(self, subject: str, end: EndHook | None = None) -> Callable[[F], F]:
        """Decorator recording each call of a function as a sample.

        Coroutine functions are timed until the coroutine completes.

        Example:
            @sampler.timed("mobx")
            def update_store(value):
                ...
        """

        def decorator(func: F) -> F:
            if inspect.iscoroutinefunction(func):

                @functools.wraps(func)
                async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                    with self.measure(subject, end):
                        return await func(*args, **kwargs)

                return async_wrapper  # type: ignore[return-value]

            @functools.wraps(func)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                with self.measure(subject, end):
                    return func(*args, **kwargs)

            return wrapper  # type: ignore[return-value]

        return decorator


__all__ = ["Sampler"]
