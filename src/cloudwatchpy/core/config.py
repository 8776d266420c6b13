"""Reporter configuration.

As CloudWatch charges per unique metric, the defaults are parsimonious:
only the median, 95th and 99th percentiles for histograms and timers, and
only the one minute rate for meters and timers. Use ``dataclasses.replace``
to derive variants of a configuration.
"""

import math
import numbers
from collections.abc import Sequence
from dataclasses import dataclass, field

from cloudwatchpy.core.exceptions import ConfigurationError
from cloudwatchpy.core.metrics import ALL
from cloudwatchpy.core.ports import DimensionAdderPort, MetricFilter
from cloudwatchpy.core.units import TimeUnit, standard_unit_for

DEFAULT_PERCENTILES = (0.5, 0.95, 0.99)

# CloudWatch rejects datapoints with more dimensions than this
MAX_DIMENSIONS = 10


@dataclass(frozen=True)
class ReporterConfig:
    """Settings for a CloudWatchReporter.

    Attributes:
        namespace: CloudWatch namespace. Must be non-empty.
        rate_unit: Unit that meter and timer rates are expressed per.
        duration_unit: Unit for timer durations; milli/micro/seconds only.
        percentiles: Percentiles sent for histograms and timers.
        one_minute_rate: Send the one minute rate of meters and timers.
        five_minute_rate: Send the five minute rate of meters and timers.
        fifteen_minute_rate: Send the fifteen minute rate of meters and timers.
        meter_summary: Send lifetime count and mean rate of meters and timers.
        timer_summary: Send lifetime min, max, mean and stddev of timers.
        histogram_summary: Send lifetime min, max, mean and stddev of histograms.
        dimension_adders: Adders run, in order, for every reported metric.
        send_enabled: Deliver to CloudWatch. When False, batches are logged
            instead, to check what would be sent before paying for it.
        metric_filter: Only metrics accepted by this predicate are reported.
        max_dimensions: Dimensions kept per datapoint; extras are dropped.
    """

    namespace: str
    rate_unit: TimeUnit = TimeUnit.SECONDS
    duration_unit: TimeUnit = TimeUnit.MILLISECONDS
    percentiles: Sequence[float] = DEFAULT_PERCENTILES
    one_minute_rate: bool = True
    five_minute_rate: bool = False
    fifteen_minute_rate: bool = False
    meter_summary: bool = False
    timer_summary: bool = False
    histogram_summary: bool = False
    dimension_adders: Sequence[DimensionAdderPort] = field(default_factory=tuple)
    send_enabled: bool = True
    metric_filter: MetricFilter = ALL
    max_dimensions: int = MAX_DIMENSIONS

    def __post_init__(self) -> None:
        if not isinstance(self.namespace, str) or not self.namespace.strip():
            raise ConfigurationError("namespace must be a non-empty string")
        if not isinstance(self.rate_unit, TimeUnit):
            raise ConfigurationError(f"rate_unit must be a TimeUnit, got {self.rate_unit!r}")
        if not isinstance(self.duration_unit, TimeUnit):
            raise ConfigurationError(
                f"duration_unit must be a TimeUnit, got {self.duration_unit!r}"
            )
        standard_unit_for(self.duration_unit)
        for p in self.percentiles:
            if not isinstance(p, numbers.Real) or isinstance(p, bool):
                raise ConfigurationError(f"percentile {p!r} is not a number")
            if math.isnan(p) or not 0.0 <= p <= 1.0:
                raise ConfigurationError(f"percentile {p} is not in [0..1]")
        if not 1 <= self.max_dimensions <= MAX_DIMENSIONS:
            raise ConfigurationError(
                f"max_dimensions must be between 1 and {MAX_DIMENSIONS}"
            )
        # Freeze caller-supplied sequences
        object.__setattr__(self, "percentiles", tuple(self.percentiles))
        object.__setattr__(self, "dimension_adders", tuple(self.dimension_adders))
