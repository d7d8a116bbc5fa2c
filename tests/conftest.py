"""
Shared fixtures for the perfscope test suite.

Provides:
- A manually advanced clock for deterministic timing
- A session wired to that clock and a null memory probe
"""

import pytest

from perfscope import NullMemoryProbe, PerfScopeConfig, PerfSession


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, ms: float) -> None:
        self.current += ms


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def session(clock: ManualClock) -> PerfSession:
    """Session with deterministic time and no memory capability."""
    return PerfSession(
        config=PerfScopeConfig(default_iterations=5),
        clock=clock,
        memory_probe=NullMemoryProbe(),
    )
