"""Shared test fixtures for all test modules."""

from collections.abc import Callable
from functools import partial

import pytest

from cloudwatchpy.adapters.transport.in_memory import InMemoryTransport
from cloudwatchpy.core.config import ReporterConfig
from cloudwatchpy.core.metrics import MetricsRegistry, UniformReservoir
from cloudwatchpy.core.reporter import CloudWatchReporter

NAMESPACE = "testnamespace"
CYCLE_TIMESTAMP = 1702300000.0


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Provide a hand-driven monotonic clock."""
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> MetricsRegistry:
    """Registry whose reservoirs keep every value recorded in a test."""
    return MetricsRegistry(reservoir_factory=partial(UniformReservoir, 10_000), clock=clock)


@pytest.fixture
def transport() -> InMemoryTransport:
    """Provide an empty recording transport."""
    return InMemoryTransport()


@pytest.fixture
def make_reporter(
    registry: MetricsRegistry, transport: InMemoryTransport
) -> Callable[..., CloudWatchReporter]:
    """Factory fixture building a reporter over the shared registry and transport.

    Keyword arguments are passed to ReporterConfig.

    Usage:
        def test_something(make_reporter, transport):
            reporter = make_reporter(timer_summary=True)
            reporter.report()
    """

    def _make(**overrides: object) -> CloudWatchReporter:
        config = ReporterConfig(namespace=NAMESPACE, **overrides)  # type: ignore[arg-type]
        return CloudWatchReporter(
            config, transport, registry, clock=lambda: CYCLE_TIMESTAMP
        )

    return _make
