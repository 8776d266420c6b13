"""Core domain models for CloudWatch datapoints."""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple


class StandardUnit(str, Enum):
    """Unit tags accepted by CloudWatch, valued by their wire spelling."""

    NONE = "None"
    COUNT = "Count"
    MILLISECONDS = "Milliseconds"
    MICROSECONDS = "Microseconds"
    SECONDS = "Seconds"


@dataclass(frozen=True)
class Dimension:
    """A key/value tag attached to a datapoint.

    Attributes:
        name: Dimension key (e.g., InstanceId).
        value: Dimension value.
    """

    name: str
    value: str


@dataclass(frozen=True)
class Datapoint:
    """A single named observation ready to be delivered.

    Attributes:
        name: Metric name, including any suffix (e.g., requests.1MinuteRate).
        timestamp: Unix timestamp in seconds of the reporting cycle.
        value: The clamped metric value.
        unit: Unit tag for the value.
        dimensions: Ordered dimension tags.
    """

    name: str
    timestamp: float
    value: float
    unit: StandardUnit
    dimensions: tuple[Dimension, ...] = ()


class Reading(NamedTuple):
    """One (suffix, value, unit) triple produced by a metric translator."""

    suffix: str
    value: float
    unit: StandardUnit


@dataclass
class Batch:
    """Datapoints staged for one delivery call.

    Attributes:
        namespace: CloudWatch namespace shared by every datapoint.
        timestamp: Reporting cycle timestamp.
        datapoints: Datapoints in the order they were queued.
    """

    namespace: str
    timestamp: float
    datapoints: list[Datapoint] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.datapoints)

    def empty_copy(self) -> "Batch":
        """Return a new empty batch for the same namespace and timestamp."""
        return Batch(namespace=self.namespace, timestamp=self.timestamp)
