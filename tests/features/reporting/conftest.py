"""BDD step definitions for reporting cycle features."""

from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from cloudwatchpy.adapters.transport.in_memory import InMemoryTransport
from cloudwatchpy.core.config import ReporterConfig
from cloudwatchpy.core.dimensions import InstanceIdAdder
from cloudwatchpy.core.metrics import MetricsRegistry
from cloudwatchpy.core.ports import DimensionAdderPort
from cloudwatchpy.core.reporter import CloudWatchReporter, ReportResult


@dataclass
class ReportingScenarioContext:
    """State shared between the steps of one scenario."""

    registry: MetricsRegistry = field(default_factory=MetricsRegistry)
    transport: InMemoryTransport = field(default_factory=InMemoryTransport)
    adders: list[DimensionAdderPort] = field(default_factory=list)
    send_enabled: bool = True
    result: ReportResult | None = None


@pytest.fixture
def ctx() -> ReportingScenarioContext:
    """Fresh scenario context for each test."""
    return ReportingScenarioContext()


# === Background Steps ===
@given("an empty metrics registry")
def step_registry(ctx: ReportingScenarioContext) -> None:
    ctx.registry = MetricsRegistry()


@given("a recording transport")
def step_transport(ctx: ReportingScenarioContext) -> None:
    ctx.transport = InMemoryTransport()


# === Given ===
@given(parsers.parse("{n:d} counters are registered"))
def step_counters(ctx: ReportingScenarioContext, n: int) -> None:
    for i in range(n):
        ctx.registry.counter(f"counter{i:03d}").inc(i)


@given(parsers.parse('the reporter tags metrics with instance id "{instance_id}"'))
def step_instance_id(ctx: ReportingScenarioContext, instance_id: str) -> None:
    ctx.adders.append(InstanceIdAdder(instance_id))


@given(parsers.parse("the transport fails on delivery {n:d}"))
def step_failing_transport(ctx: ReportingScenarioContext, n: int) -> None:
    ctx.transport = InMemoryTransport(fail_on_call=n)


@given("delivery is disabled")
def step_dry_run(ctx: ReportingScenarioContext) -> None:
    ctx.send_enabled = False


# === When ===
@when("the reporter runs one cycle")
def step_report(ctx: ReportingScenarioContext) -> None:
    config = ReporterConfig(
        namespace="bdd",
        dimension_adders=ctx.adders,
        send_enabled=ctx.send_enabled,
    )
    reporter = CloudWatchReporter(config, ctx.transport, ctx.registry)
    ctx.result = reporter.report()


# === Then ===
@then(parsers.re(r"(?P<n>\d+) batch(es)? (is|are) delivered"), converters={"n": int})
def step_batch_count(ctx: ReportingScenarioContext, n: int) -> None:
    assert len(ctx.transport.calls) == n


@then(parsers.parse("batch {index:d} holds {n:d} datapoints"))
def step_batch_size(ctx: ReportingScenarioContext, index: int, n: int) -> None:
    _, datapoints = ctx.transport.calls[index - 1]
    assert len(datapoints) == n


@then(parsers.parse('every datapoint has the dimension "{name}" = "{value}"'))
def step_every_dimension(ctx: ReportingScenarioContext, name: str, value: str) -> None:
    assert ctx.transport.datapoints
    for datapoint in ctx.transport.datapoints:
        assert [(d.name, d.value) for d in datapoint.dimensions] == [(name, value)]


@then("the cycle is reported as a partial failure")
def step_partial(ctx: ReportingScenarioContext) -> None:
    assert ctx.result is not None
    assert ctx.result.partial
    assert ctx.result.error is not None
