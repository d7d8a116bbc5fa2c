"""Tests for the error taxonomy."""

import pytest

from perfscope.errors import (
    ConfigurationError,
    ErrorCategory,
    InvalidIterationCount,
    InvalidSample,
    MeasurementError,
    PerfScopeError,
)


class TestErrorCategory:
    """Tests for ErrorCategory enum."""

    def test_categories_exist(self):
        assert ErrorCategory.MEASUREMENT.value == "measurement"
        assert ErrorCategory.SAMPLE.value == "sample"
        assert ErrorCategory.BENCHMARK.value == "benchmark"
        assert ErrorCategory.CONFIGURATION.value == "configuration"


class TestPerfScopeError:
    """Tests for the base error."""

    def test_basic_error(self):
        error = PerfScopeError(category=ErrorCategory.SAMPLE, message="Bad value")
        assert str(error) == "Bad value"
        assert error.suggestion is None

    def test_format_with_suggestion_and_details(self):
        error = PerfScopeError(
            category=ErrorCategory.BENCHMARK,
            message="Bad request",
            suggestion="Try again",
            details={"iterations": 0},
        )
        formatted = error.format()
        assert "Error: Bad request" in formatted
        assert "Suggestion: Try again" in formatted
        assert "iterations: 0" in formatted


class TestSpecificErrors:
    """Tests for the concrete errors."""

    def test_measurement_error(self):
        error = MeasurementError("redux")
        assert error.category == ErrorCategory.MEASUREMENT
        assert error.subject == "redux"
        assert error.duration_ms == 0.0
        assert "redux" in str(error)
        assert isinstance(error, PerfScopeError)

    def test_invalid_sample(self):
        error = InvalidSample("redux", -1)
        assert error.category == ErrorCategory.SAMPLE
        assert error.duration_ms == -1
        assert isinstance(error, ValueError)

    def test_invalid_iteration_count(self):
        error = InvalidIterationCount(0)
        assert error.category == ErrorCategory.BENCHMARK
        assert error.iterations == 0
        assert isinstance(error, ValueError)

    def test_configuration_error(self):
        error = ConfigurationError(
            "Invalid perfscope configuration", details={"default_iterations": "too small"}
        )
        assert error.category == ErrorCategory.CONFIGURATION
        assert "PERFSCOPE_" in error.format()
        assert "default_iterations: too small" in error.format()

    def test_raise_and_catch(self):
        with pytest.raises(PerfScopeError):
            raise InvalidIterationCount(-5)
