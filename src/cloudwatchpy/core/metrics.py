"""In-process metrics registry and metric kinds.

Application code records into counters, gauges, histograms, meters and
timers held by a MetricsRegistry. The reporter only reads them, through
``MetricsRegistry.snapshot()``.
"""

import math
import random
import threading
import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from cloudwatchpy.core.ports import MetricFilter
from cloudwatchpy.core.units import TimeUnit

DEFAULT_RESERVOIR_SIZE = 1028

# Seconds between EWMA ticks
TICK_INTERVAL = 5.0


def ALL(name: str, metric: Any) -> bool:
    """Metric filter accepting every metric."""
    return True


class Counter:
    """A monotonically adjusted integer count."""

    def __init__(self) -> None:
        self._count = 0
        self._lock = threading.Lock()

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    @property
    def count(self) -> int:
        return self._count


class Gauge:
    """A metric whose value is read from a callable on demand.

    The value may be of any type; only real numbers can be reported.
    """

    def __init__(self, fn: Callable[[], Any]) -> None:
        self._fn = fn

    @property
    def value(self) -> Any:
        return self._fn()


class Snapshot:
    """A sorted, immutable view of sampled values."""

    def __init__(self, values: Sequence[float]) -> None:
        self._values = sorted(values)

    def __len__(self) -> int:
        return len(self._values)

    @property
    def values(self) -> list[float]:
        return list(self._values)

    def value(self, quantile: float) -> float:
        """Return the value at the given quantile.

        Interpolates between the two samples around ``quantile * (n + 1)``.

        Args:
            quantile: A number in [0, 1].

        Raises:
            ValueError: If quantile is outside [0, 1] or NaN.
        """
        if math.isnan(quantile) or not 0.0 <= quantile <= 1.0:
            raise ValueError(f"{quantile} is not in [0..1]")
        if not self._values:
            return 0.0

        pos = quantile * (len(self._values) + 1)
        index = int(pos)
        if index < 1:
            return float(self._values[0])
        if index >= len(self._values):
            return float(self._values[-1])

        lower = self._values[index - 1]
        upper = self._values[index]
        return lower + (pos - math.floor(pos)) * (upper - lower)

    @property
    def median(self) -> float:
        return self.value(0.5)

    @property
    def min(self) -> float:
        return float(self._values[0]) if self._values else 0.0

    @property
    def max(self) -> float:
        return float(self._values[-1]) if self._values else 0.0

    @property
    def mean(self) -> float:
        if not self._values:
            return 0.0
        return sum(self._values) / len(self._values)

    @property
    def stddev(self) -> float:
        """Sample standard deviation; 0 for fewer than two values."""
        if len(self._values) <= 1:
            return 0.0
        mean = self.mean
        total = sum((v - mean) ** 2 for v in self._values)
        return math.sqrt(total / (len(self._values) - 1))


class UniformReservoir:
    """Fixed-size uniform random sample of a stream (Vitter's algorithm R).

    Args:
        size: Maximum number of samples kept.
        rng: Random source; pass a seeded one for reproducible sampling.
    """

    def __init__(
        self, size: int = DEFAULT_RESERVOIR_SIZE, rng: random.Random | None = None
    ) -> None:
        self._size = size
        self._values: list[float] = []
        self._seen = 0
        self._rng = rng or random.Random()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._values)

    def update(self, value: float) -> None:
        with self._lock:
            self._seen += 1
            if len(self._values) < self._size:
                self._values.append(value)
                return
            slot = self._rng.randrange(self._seen)
            if slot < self._size:
                self._values[slot] = value

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot(self._values)


ReservoirFactory = Callable[[], UniformReservoir]


class Histogram:
    """Distribution of recorded values, sampled through a reservoir."""

    def __init__(self, reservoir: UniformReservoir | None = None) -> None:
        self._reservoir = reservoir or UniformReservoir()
        self._count = 0
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._count += 1
        self._reservoir.update(value)

    @property
    def count(self) -> int:
        return self._count

    def snapshot(self) -> Snapshot:
        return self._reservoir.snapshot()


class EWMA:
    """Exponentially weighted moving average of a per-second rate.

    Args:
        minutes: Averaging window in minutes (1, 5 or 15).
        interval: Seconds between ticks.
    """

    def __init__(self, minutes: int, interval: float = TICK_INTERVAL) -> None:
        self._alpha = 1 - math.exp(-interval / 60.0 / minutes)
        self._interval = interval
        self._rate = 0.0
        self._uncounted = 0
        self._initialized = False

    def update(self, n: int) -> None:
        self._uncounted += n

    def tick(self) -> None:
        instant_rate = self._uncounted / self._interval
        self._uncounted = 0
        if self._initialized:
            self._rate += self._alpha * (instant_rate - self._rate)
        else:
            self._rate = instant_rate
            self._initialized = True

    @property
    def rate(self) -> float:
        """Current rate in events per second."""
        return self._rate


class Meter:
    """Measures the rate of events over 1, 5 and 15 minute windows.

    Args:
        clock: Monotonic clock returning seconds.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._start = clock()
        self._last_tick = self._start
        self._count = 0
        self._m1 = EWMA(1)
        self._m5 = EWMA(5)
        self._m15 = EWMA(15)
        self._lock = threading.Lock()

    def mark(self, n: int = 1) -> None:
        with self._lock:
            self._tick_if_necessary()
            self._count += n
            self._m1.update(n)
            self._m5.update(n)
            self._m15.update(n)

    def _tick_if_necessary(self) -> None:
        now = self._clock()
        age = now - self._last_tick
        if age <= TICK_INTERVAL:
            return
        self._last_tick = now - age % TICK_INTERVAL
        for _ in range(int(age // TICK_INTERVAL)):
            self._m1.tick()
            self._m5.tick()
            self._m15.tick()

    def _rate(self, ewma: EWMA) -> float:
        with self._lock:
            self._tick_if_necessary()
            return ewma.rate

    @property
    def count(self) -> int:
        return self._count

    @property
    def one_minute_rate(self) -> float:
        return self._rate(self._m1)

    @property
    def five_minute_rate(self) -> float:
        return self._rate(self._m5)

    @property
    def fifteen_minute_rate(self) -> float:
        return self._rate(self._m15)

    @property
    def mean_rate(self) -> float:
        """Lifetime events per second."""
        if self._count == 0:
            return 0.0
        elapsed = self._clock() - self._start
        if elapsed <= 0:
            return 0.0
        return self._count / elapsed


class Timer:
    """A meter of events plus a histogram of their durations in nanoseconds."""

    def __init__(
        self,
        reservoir: UniformReservoir | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._meter = Meter(clock)
        self._histogram = Histogram(reservoir)

    def update(self, duration: float, unit: TimeUnit = TimeUnit.NANOSECONDS) -> None:
        """Record a duration; negative durations are ignored."""
        if duration < 0:
            return
        self._histogram.update(unit.to_nanos(duration))
        self._meter.mark()

    @contextmanager
    def time(self) -> Iterator[None]:
        """Context manager recording the wall time of its body."""
        start = time.perf_counter_ns()
        try:
            yield
        finally:
            self.update(time.perf_counter_ns() - start)

    @property
    def count(self) -> int:
        return self._meter.count

    @property
    def one_minute_rate(self) -> float:
        return self._meter.one_minute_rate

    @property
    def five_minute_rate(self) -> float:
        return self._meter.five_minute_rate

    @property
    def fifteen_minute_rate(self) -> float:
        return self._meter.fifteen_minute_rate

    @property
    def mean_rate(self) -> float:
        return self._meter.mean_rate

    def snapshot(self) -> Snapshot:
        return self._histogram.snapshot()


@dataclass(frozen=True)
class RegistrySnapshot:
    """Name-ordered view of every registered metric, split by kind."""

    gauges: dict[str, Gauge] = field(default_factory=dict)
    counters: dict[str, Counter] = field(default_factory=dict)
    histograms: dict[str, Histogram] = field(default_factory=dict)
    meters: dict[str, Meter] = field(default_factory=dict)
    timers: dict[str, Timer] = field(default_factory=dict)

    def __len__(self) -> int:
        return (
            len(self.gauges)
            + len(self.counters)
            + len(self.histograms)
            + len(self.meters)
            + len(self.timers)
        )


class MetricsRegistry:
    """Named collection of metrics.

    Args:
        reservoir_factory: Builds the reservoir for each new histogram or timer.
        clock: Monotonic clock handed to meters and timers.
    """

    def __init__(
        self,
        reservoir_factory: ReservoirFactory = UniformReservoir,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._metrics: dict[str, Any] = {}
        self._reservoir_factory = reservoir_factory
        self._clock = clock
        self._lock = threading.Lock()

    def _get_or_add(self, name: str, kind: type, factory: Callable[[], Any]) -> Any:
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                metric = factory()
                self._metrics[name] = metric
            elif not isinstance(metric, kind):
                raise ValueError(
                    f"{name} is already registered as a {type(metric).__name__}"
                )
            return metric

    def counter(self, name: str) -> Counter:
        return self._get_or_add(name, Counter, Counter)

    def gauge(self, name: str, fn: Callable[[], Any]) -> Gauge:
        return self._get_or_add(name, Gauge, lambda: Gauge(fn))

    def histogram(self, name: str) -> Histogram:
        return self._get_or_add(
            name, Histogram, lambda: Histogram(self._reservoir_factory())
        )

    def meter(self, name: str) -> Meter:
        return self._get_or_add(name, Meter, lambda: Meter(self._clock))

    def timer(self, name: str) -> Timer:
        return self._get_or_add(
            name, Timer, lambda: Timer(self._reservoir_factory(), self._clock)
        )

    def remove(self, name: str) -> bool:
        """Unregister a metric. Returns True if it existed."""
        with self._lock:
            return self._metrics.pop(name, None) is not None

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._metrics)

    def snapshot(self, metric_filter: MetricFilter = ALL) -> RegistrySnapshot:
        """Return the metrics accepted by ``metric_filter``, sorted by name.

        Args:
            metric_filter: Predicate over (name, metric).

        Returns:
            RegistrySnapshot with one name-ordered dict per metric kind.
        """
        with self._lock:
            items = sorted(self._metrics.items())

        by_kind: dict[type, dict[str, Any]] = {
            Gauge: {},
            Counter: {},
            Histogram: {},
            Meter: {},
            Timer: {},
        }
        for name, metric in items:
            if metric_filter(name, metric):
                by_kind[type(metric)][name] = metric

        return RegistrySnapshot(
            gauges=by_kind[Gauge],
            counters=by_kind[Counter],
            histograms=by_kind[Histogram],
            meters=by_kind[Meter],
            timers=by_kind[Timer],
        )
