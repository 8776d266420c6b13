"""Tests for CloudWatchReporter reporting cycles."""

import logging
import math

import pytest

from cloudwatchpy.adapters.transport.in_memory import InMemoryTransport
from cloudwatchpy.core.config import ReporterConfig
from cloudwatchpy.core.dimensions import InstanceIdAdder, StaticDimensionAdder
from cloudwatchpy.core.exceptions import DeliveryError
from cloudwatchpy.core.metrics import MetricsRegistry, RegistrySnapshot
from cloudwatchpy.core.models import Dimension, StandardUnit
from cloudwatchpy.core.reporter import CloudWatchReporter, ReportResult
from cloudwatchpy.core.sender import LARGEST_SENDABLE
from cloudwatchpy.core.units import TimeUnit

pytestmark = pytest.mark.reporting

TIMER = "TestTimer"


class TestDefaultReporting:
    """Tests for reporting with the default configuration."""

    def test_empty_registry_sends_nothing(self, make_reporter, transport) -> None:
        """No metrics means no delivery call."""
        result = make_reporter().report()

        assert transport.calls == []
        assert result == ReportResult()
        assert result.ok

    def test_counter(self, make_reporter, registry, transport) -> None:
        """A counter is sent as its count, and follows increments."""
        counter = registry.counter("TestCounter")
        reporter = make_reporter()

        reporter.report()
        assert len(transport.datapoints) == 1
        datapoint = transport.datapoints[0]
        assert datapoint.name == "TestCounter"
        assert datapoint.value == 0.0
        assert datapoint.unit is StandardUnit.COUNT
        assert datapoint.dimensions == ()

        counter.inc()
        transport.clear()
        reporter.report()
        assert [d.value for d in transport.datapoints] == [1.0]

    def test_datapoints_carry_namespace_and_cycle_timestamp(
        self, make_reporter, registry, transport
    ) -> None:
        """Every datapoint is stamped with the cycle start."""
        registry.counter("a")
        registry.counter("b")

        make_reporter().report(timestamp=42.0)

        namespace, datapoints = transport.calls[0]
        assert namespace == "testnamespace"
        assert {d.timestamp for d in datapoints} == {42.0}

    def test_visits_kinds_in_order_and_names_sorted(
        self, make_reporter, registry, transport
    ) -> None:
        """Gauges, counters, histograms, meters then timers, each by name."""
        registry.timer("t")
        registry.meter("m")
        registry.histogram("h")
        registry.counter("c2")
        registry.counter("c1")
        registry.gauge("g", lambda: 1.0)

        make_reporter(percentiles=(0.5,)).report()

        assert [d.name for d in transport.datapoints] == [
            "g",
            "c1",
            "c2",
            "h.median",
            "m.1MinuteRate",
            "t.1MinuteRate",
            "t.median",
        ]


class TestTimerReporting:
    """Tests for timer duration conversion."""

    @pytest.fixture
    def timer(self, registry: MetricsRegistry):
        timer = registry.timer(TIMER)
        for minutes in range(100):
            for _ in range(50):
                timer.update(minutes, TimeUnit.MINUTES)
        return timer

    def test_timer_with_summary(self, make_reporter, timer, transport) -> None:
        """Rates, percentiles and summary are sent with converted durations."""
        reporter = make_reporter(
            five_minute_rate=True,
            one_minute_rate=False,
            timer_summary=True,
            percentiles=(0.1, 0.5, 0.9, 0.999),
        )

        reporter.report()

        assert len(transport.datapoints) == 9
        assert set(transport.latest_by_name) == {
            f"{TIMER}.median",
            f"{TIMER}_percentile_0.999",
            f"{TIMER}_percentile_0.9",
            f"{TIMER}.mean",
            f"{TIMER}.5MinuteRate",
            f"{TIMER}.min",
            f"{TIMER}.max",
            f"{TIMER}.stddev",
            f"{TIMER}_percentile_0.1",
        }
        minimum = transport.latest_by_name[f"{TIMER}.min"]
        assert minimum.unit is StandardUnit.MILLISECONDS
        assert minimum.unit.value == "Milliseconds"
        assert minimum.value == 0.0
        p999 = transport.latest_by_name[f"{TIMER}_percentile_0.999"]
        assert p999.value == 5_940_000.0
        assert transport.latest_by_name[f"{TIMER}.max"].value == 5_940_000.0

    def test_timer_in_seconds(self, make_reporter, timer, transport) -> None:
        """The configured duration unit drives both value and unit tag."""
        make_reporter(duration_unit=TimeUnit.SECONDS, percentiles=(0.999,)).report()

        p999 = transport.latest_by_name[f"{TIMER}_percentile_0.999"]
        assert p999.value == 5940.0
        assert p999.unit is StandardUnit.SECONDS


class TestBatching:
    """Tests for batch boundaries across a whole cycle."""

    @pytest.mark.parametrize(
        ("counters", "batch_sizes"),
        [(0, []), (1, [1]), (20, [20]), (21, [20, 1]), (45, [20, 20, 5])],
    )
    def test_batch_sizes(
        self, make_reporter, registry, transport, counters, batch_sizes
    ) -> None:
        """Datapoints are delivered 20 at a time plus one trailing batch."""
        for i in range(counters):
            registry.counter(f"counter{i:03d}")

        result = make_reporter().report()

        assert [len(batch) for _, batch in transport.calls] == batch_sizes
        assert result.batches_delivered == len(batch_sizes)
        assert result.datapoints_delivered == counters

    def test_batches_split_a_single_metric(self, make_reporter, registry, transport) -> None:
        """A metric's datapoints may straddle two batches."""
        for i in range(19):
            registry.counter(f"counter{i:03d}")
        registry.meter("zmeter")

        make_reporter(five_minute_rate=True).report()

        assert [len(batch) for _, batch in transport.calls] == [20, 1]
        assert transport.calls[1][1][0].name == "zmeter.5MinuteRate"


class TestDimensions:
    """Tests for dimension tagging during a cycle."""

    def test_no_adders_no_dimensions(self, make_reporter, registry, transport) -> None:
        """Without adders datapoints carry no dimensions."""
        registry.counter("c")
        registry.histogram("h")

        make_reporter().report()

        assert transport.datapoints
        assert all(d.dimensions == () for d in transport.datapoints)

    def test_instance_id_dimension(self, make_reporter, registry, transport) -> None:
        """A fixed instance id tags every datapoint."""
        registry.counter("c")
        registry.histogram("h")
        registry.timer("t")

        make_reporter(dimension_adders=[InstanceIdAdder("flask")]).report()

        assert len(transport.datapoints) == 8
        for datapoint in transport.datapoints:
            assert datapoint.dimensions == (Dimension("InstanceId", "flask"),)

    def test_predicate_limits_dimension(self, make_reporter, registry, transport) -> None:
        """Gated adders only tag the metrics they accept."""
        registry.counter("api.calls")
        registry.counter("db.calls")
        adder = StaticDimensionAdder(
            "Tier", "api", predicate=lambda name, metric: name.startswith("api.")
        )

        make_reporter(dimension_adders=[adder]).report()

        tagged = {d.name: d.dimensions for d in transport.datapoints}
        assert tagged == {"api.calls": (Dimension("Tier", "api"),), "db.calls": ()}


class TestGauges:
    """Tests for gauge type guarding."""

    def test_non_numeric_gauge_warned_once(
        self, make_reporter, registry, transport, caplog
    ) -> None:
        """A non-numeric gauge is skipped and warned about once."""
        registry.gauge("status", lambda: "healthy")
        registry.gauge("threads", lambda: 8)
        reporter = make_reporter()

        with caplog.at_level(logging.WARNING, logger="cloudwatchpy.core.reporter"):
            reporter.report()
            assert reporter.unsendable == {"status"}
            reporter.report()

        assert reporter.unsendable == {"status"}
        assert [d.name for d in transport.datapoints] == ["threads", "threads"]
        assert caplog.text.count("status") == 1

    def test_numeric_gauge_is_unitless(self, make_reporter, registry, transport) -> None:
        """Numeric gauges are sent without a unit."""
        registry.gauge("load", lambda: 0.75)

        make_reporter().report()

        assert transport.datapoints[0].value == 0.75
        assert transport.datapoints[0].unit is StandardUnit.NONE


    def test_nan_gauge_is_not_delivered(
        self, make_reporter, registry, transport
    ) -> None:
        """A NaN gauge is skipped and the rest of the cycle still goes out."""
        registry.gauge("ratio", lambda: math.nan)
        registry.gauge("threads", lambda: 8)
        registry.counter("requests").inc(3)
        reporter = make_reporter()

        result = reporter.report()

        assert result.ok
        assert reporter.unsendable == {"ratio"}
        assert [d.name for d in transport.datapoints] == ["threads", "requests"]
        assert not any(math.isnan(d.value) for d in transport.datapoints)

    def test_oversized_int_gauge_is_clamped(
        self, make_reporter, registry, transport
    ) -> None:
        """Integers too large for a float are sent as the largest sendable value."""
        registry.gauge("a_huge", lambda: 10**400)
        registry.gauge("a_negative_huge", lambda: -(10**400))
        registry.counter("b_counter").inc()
        reporter = make_reporter()

        result = reporter.report()

        assert result.ok
        assert reporter.unsendable == set()
        values = {d.name: d.value for d in transport.datapoints}
        assert values == {
            "a_huge": LARGEST_SENDABLE,
            "a_negative_huge": -LARGEST_SENDABLE,
            "b_counter": 1.0,
        }


class TestFailures:
    """Tests for delivery failures and dry runs."""

    def test_failure_aborts_cycle_and_reports_partial(self, registry) -> None:
        """A failed delivery drops the rest of the cycle without raising."""
        for i in range(50):
            registry.counter(f"counter{i:03d}")
        transport = InMemoryTransport(fail_on_call=2)
        reporter = CloudWatchReporter(ReporterConfig(namespace="ns"), transport, registry)

        result = reporter.report()

        assert len(transport.calls) == 1
        assert result.batches_delivered == 1
        assert result.datapoints_delivered == 20
        assert isinstance(result.error, DeliveryError)
        assert result.error.size == 20
        assert result.error.namespace == "ns"
        assert not result.ok
        assert result.partial

    def test_failure_on_first_batch_is_not_partial(self, registry) -> None:
        """A cycle failing before any delivery is a total failure."""
        registry.counter("c")
        transport = InMemoryTransport(fail_on_call=1)
        reporter = CloudWatchReporter(ReporterConfig(namespace="ns"), transport, registry)

        result = reporter.report()

        assert not result.ok
        assert not result.partial

    def test_next_cycle_runs_after_failure(self, registry) -> None:
        """A failed cycle does not affect the next one."""
        registry.counter("c")
        transport = InMemoryTransport(fail_on_call=1)
        reporter = CloudWatchReporter(ReporterConfig(namespace="ns"), transport, registry)

        reporter.report()
        result = reporter.report()

        assert result.ok
        assert len(transport.calls) == 1

    def test_dry_run_logs_instead_of_delivering(
        self, make_reporter, registry, transport, caplog
    ) -> None:
        """With delivery disabled, batches are logged and the transport unused."""
        registry.counter("c")

        with caplog.at_level(logging.INFO, logger="cloudwatchpy.core.reporter"):
            result = make_reporter(send_enabled=False).report()

        assert transport.calls == []
        assert result.batches_delivered == 1
        assert '"name": "c"' in caplog.text


class TestSnapshots:
    """Tests for reporting explicit snapshots."""

    def test_report_explicit_snapshot(self, transport) -> None:
        """A snapshot can be reported without a registry."""
        source = MetricsRegistry()
        source.counter("c").inc(3)
        reporter = CloudWatchReporter(ReporterConfig(namespace="ns"), transport)

        reporter.report(source.snapshot(), timestamp=1.0)

        assert [d.value for d in transport.datapoints] == [3.0]

    def test_report_without_registry_or_snapshot_raises(self, transport) -> None:
        """report() needs something to report."""
        reporter = CloudWatchReporter(ReporterConfig(namespace="ns"), transport)
        with pytest.raises(ValueError, match="snapshot is required"):
            reporter.report()

    def test_metric_filter_applies_to_registry(
        self, make_reporter, registry, transport
    ) -> None:
        """The configured filter restricts what is read from the registry."""
        registry.counter("jvm.memory")
        registry.counter("app.requests")

        make_reporter(metric_filter=lambda name, metric: name.startswith("app.")).report()

        assert [d.name for d in transport.datapoints] == ["app.requests"]

    def test_empty_snapshot(self, transport) -> None:
        """An empty snapshot delivers nothing."""
        reporter = CloudWatchReporter(ReporterConfig(namespace="ns"), transport)
        assert reporter.report(RegistrySnapshot()).batches_delivered == 0
