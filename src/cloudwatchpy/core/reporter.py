"""Translation of registry snapshots into CloudWatch datapoint batches."""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from cloudwatchpy.core.config import ReporterConfig
from cloudwatchpy.core.dimensions import DimensionPipeline
from cloudwatchpy.core.encoding.ndjson import encode_datapoints
from cloudwatchpy.core.exceptions import DeliveryError, UnsendableValueError
from cloudwatchpy.core.metrics import MetricsRegistry, RegistrySnapshot
from cloudwatchpy.core.models import Batch, Datapoint, Reading
from cloudwatchpy.core.ports import TransportPort
from cloudwatchpy.core.sender import ValueSender
from cloudwatchpy.core.translators import (
    translate_counter,
    translate_gauge,
    translate_histogram,
    translate_meter,
    translate_timer,
)

logger = logging.getLogger(__name__)


@dataclass
class ReportResult:
    """Outcome of one reporting cycle.

    Batches delivered before a failure stay delivered; everything queued
    after it is dropped.

    Attributes:
        batches_delivered: Delivery calls that succeeded.
        datapoints_delivered: Datapoints in those calls.
        error: The delivery failure that aborted the cycle, if any.
    """

    batches_delivered: int = 0
    datapoints_delivered: int = 0
    error: DeliveryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def partial(self) -> bool:
        """True if the cycle failed after delivering at least one batch."""
        return self.error is not None and self.batches_delivered > 0


class CloudWatchReporter:
    """Reports the metrics of a registry to CloudWatch.

    Each call to ``report()`` visits gauges, counters, histograms, meters
    and timers, each in name order, and delivers their datapoints in
    batches of at most 20. Cycles must not run concurrently.

    Args:
        config: Reporter settings.
        transport: Delivers batches.
        registry: Registry read by ``report()`` when no snapshot is given.
        clock: Returns the Unix time used to stamp each cycle.
    """

    def __init__(
        self,
        config: ReporterConfig,
        transport: TransportPort,
        registry: MetricsRegistry | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.registry = registry
        self._transport = transport
        self._clock = clock
        self._dimensions = DimensionPipeline(
            config.dimension_adders, config.max_dimensions
        )
        self._sender = ValueSender(self._deliver)
        self._result = ReportResult()
        self.unsendable: set[str] = set()

    def _deliver(self, namespace: str, datapoints: Sequence[Datapoint]) -> None:
        if self.config.send_enabled:
            self._transport.deliver(namespace, datapoints)
        else:
            logger.info(
                "CloudWatch delivery disabled; would send to %s:\n%s",
                namespace,
                encode_datapoints(datapoints),
            )
        self._result.batches_delivered += 1
        self._result.datapoints_delivered += len(datapoints)

    def report(
        self, snapshot: RegistrySnapshot | None = None, timestamp: float | None = None
    ) -> ReportResult:
        """Run one reporting cycle.

        Args:
            snapshot: Metrics to report. Defaults to a snapshot of the
                registry, filtered by the configured metric filter.
            timestamp: Cycle timestamp. Defaults to the clock.

        Returns:
            ReportResult describing what was delivered. Delivery failures
            are logged and returned, never raised.
        """
        if snapshot is None:
            if self.registry is None:
                raise ValueError("a snapshot is required when no registry is set")
            snapshot = self.registry.snapshot(self.config.metric_filter)
        if timestamp is None:
            timestamp = self._clock()

        self._result = result = ReportResult()
        batch = Batch(namespace=self.config.namespace, timestamp=timestamp)
        try:
            for name, gauge in snapshot.gauges.items():
                batch = self._process_gauge(batch, name, gauge)
            for name, counter in snapshot.counters.items():
                batch = self._emit(batch, name, counter, translate_counter(counter))
            for name, histogram in snapshot.histograms.items():
                readings = translate_histogram(histogram, self.config)
                batch = self._emit(batch, name, histogram, readings)
            for name, meter in snapshot.meters.items():
                batch = self._emit(batch, name, meter, translate_meter(meter, self.config))
            for name, timer in snapshot.timers.items():
                batch = self._emit(batch, name, timer, translate_timer(timer, self.config))
            self._sender.flush(batch)
        except DeliveryError as e:
            logger.error(
                "Error writing to CloudWatch; dropping the rest of this cycle "
                "after %d delivered batches: %s",
                result.batches_delivered,
                e,
            )
            result.error = e
        return result

    def _process_gauge(self, batch: Batch, name: str, gauge: Any) -> Batch:
        try:
            readings = translate_gauge(name, gauge)
        except UnsendableValueError as e:
            if name not in self.unsendable:
                self.unsendable.add(name)
                logger.warning("%s", e)
            return batch
        return self._emit(batch, name, gauge, readings)

    def _emit(
        self, batch: Batch, name: str, metric: Any, readings: Sequence[Reading]
    ) -> Batch:
        dimensions = self._dimensions.dimensions(name, metric)
        for reading in readings:
            batch = self._sender.send(
                batch, name + reading.suffix, reading.value, reading.unit, dimensions
            )
        return batch
