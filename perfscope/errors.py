"""Structured error types for measurement and benchmarking.

Every error is recoverable: callers may catch and ignore any of them
without leaving the session in an inconsistent state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Categories of perfscope errors."""

    MEASUREMENT = "measurement"  # start/end pairing problems
    SAMPLE = "sample"  # rejected sample values
    BENCHMARK = "benchmark"  # invalid benchmark requests
    CONFIGURATION = "configuration"  # invalid settings


@dataclass(eq=False)
class PerfScopeError(Exception):
    """Base class for structured perfscope errors.

    Attributes:
        category: Error category for grouping.
        message: Human-readable error message.
        suggestion: Optional actionable recovery suggestion.
        details: Optional additional details dict.
    """

    category: ErrorCategory
    message: str
    suggestion: str | None = None
    details: dict[str, Any] | None = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Initialize the exception with the message."""
        super().__init__(self.message)

    def format(self) -> str:
        """Format the error for display, including suggestion and details."""
        lines = [f"Error: {self.message}"]

        if self.suggestion:
            lines.append(f"Suggestion: {self.suggestion}")

        if self.details:
            for key, value in self.details.items():
                lines.append(f"  {key}: {value}")

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.message


class MeasurementError(PerfScopeError):
    """A measurement could not be taken for a subject.

    Raised when ``end`` has no matching ``start``, or when a second
    ``start`` is rejected. The reported duration is always 0.
    """

    duration_ms: float = 0.0

    def __init__(self, subject: str, message: str | None = None):
        super().__init__(
            category=ErrorCategory.MEASUREMENT,
            message=message or f"No pending measurement for subject '{subject}'",
            suggestion="Call start() for the subject before end()",
            details={"subject": subject},
        )
        self.subject = subject


class InvalidSample(PerfScopeError, ValueError):
    """A sample duration was rejected (negative or NaN)."""

    def __init__(self, subject: str, duration_ms: float):
        super().__init__(
            category=ErrorCategory.SAMPLE,
            message=f"Invalid sample for '{subject}': {duration_ms!r}ms (must be >= 0)",
            details={"subject": subject, "duration_ms": duration_ms},
        )
        self.subject = subject
        self.duration_ms = duration_ms


class InvalidIterationCount(PerfScopeError, ValueError):
    """A benchmark was requested with a non-positive or non-integer count."""

    def __init__(self, iterations: Any):
        super().__init__(
            category=ErrorCategory.BENCHMARK,
            message=f"Iterations must be a positive integer, got {iterations!r}",
            suggestion="Pass iterations >= 1",
            details={"iterations": iterations},
        )
        self.iterations = iterations


class ConfigurationError(PerfScopeError):
    """Settings could not be loaded."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=message,
            suggestion="Check the PERFSCOPE_* environment variables",
            details=details or {},
        )


__all__ = [
    "ConfigurationError",
    "ErrorCategory",
    "PerfScopeError",
    "MeasurementError",
    "InvalidSample",
    "InvalidIterationCount",
]
