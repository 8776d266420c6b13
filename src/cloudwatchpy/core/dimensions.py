"""Dimension adders and the pipeline that runs them.

An adder contributes zero or more dimensions to every datapoint of the
metrics its predicate accepts. Adders run in registration order and their
output is concatenated; duplicate names are not merged.
"""

import logging
from collections.abc import Sequence
from typing import Any

from cloudwatchpy.core.metrics import ALL
from cloudwatchpy.core.models import Dimension
from cloudwatchpy.core.ports import DimensionAdderPort, MetadataSourcePort, MetricFilter

logger = logging.getLogger(__name__)

INSTANCE_ID = "InstanceId"
UNKNOWN_INSTANCE_ID = "unknown"


class StaticDimensionAdder:
    """Adds one fixed dimension to the metrics matching a predicate."""

    def __init__(self, name: str, value: str, predicate: MetricFilter = ALL) -> None:
        self._dimension = Dimension(name, value)
        self._predicate = predicate

    def generate(self, name: str, metric: Any) -> list[Dimension]:
        if not self._predicate(name, metric):
            return []
        return [self._dimension]


class InstanceIdAdder:
    """Adds an ``InstanceId`` dimension to the metrics matching a predicate.

    The value is either given up front or looked up once, on first use, from
    a metadata source such as the EC2 metadata service. If the lookup fails,
    ``unknown`` is sent instead.

    Args:
        instance_id: Fixed instance id. Takes precedence over the source.
        metadata_source: Source queried when no instance id is given.
        predicate: Only metrics accepted by this filter get the dimension.
    """

    def __init__(
        self,
        instance_id: str | None = None,
        metadata_source: MetadataSourcePort | None = None,
        predicate: MetricFilter = ALL,
    ) -> None:
        if instance_id is None and metadata_source is None:
            raise ValueError("either instance_id or metadata_source is required")
        self._instance_id = instance_id
        self._metadata_source = metadata_source
        self._predicate = predicate

    @property
    def instance_id(self) -> str:
        """The instance id, resolving it on first access."""
        if self._instance_id is None:
            self._instance_id = self._resolve()
        return self._instance_id

    def _resolve(self) -> str:
        try:
            return self._metadata_source.lookup()  # type: ignore[union-attr]
        except Exception as e:
            logger.warning(
                "Unable to look up instance id, sending %r instead: %s",
                UNKNOWN_INSTANCE_ID,
                e,
            )
            return UNKNOWN_INSTANCE_ID

    def generate(self, name: str, metric: Any) -> list[Dimension]:
        if not self._predicate(name, metric):
            return []
        return [Dimension(INSTANCE_ID, self.instance_id)]


class DimensionPipeline:
    """Runs dimension adders in order and caps the combined output.

    Args:
        adders: Adders in registration order.
        max_dimensions: Dimensions kept per metric; the rest are dropped
            with a one-time warning per metric name.
    """

    def __init__(self, adders: Sequence[DimensionAdderPort], max_dimensions: int) -> None:
        self._adders = list(adders)
        self._max_dimensions = max_dimensions
        self.truncated: set[str] = set()

    def dimensions(self, name: str, metric: Any) -> tuple[Dimension, ...]:
        result: list[Dimension] = []
        for adder in self._adders:
            result.extend(adder.generate(name, metric))
        if len(result) > self._max_dimensions:
            if name not in self.truncated:
                self.truncated.add(name)
                logger.warning(
                    "%s has %d dimensions but CloudWatch accepts %d; dropping the rest.",
                    name,
                    len(result),
                    self._max_dimensions,
                )
            del result[self._max_dimensions :]
        return tuple(result)
