"""Port interfaces for reporter collaborators.

These protocols define the contracts that adapters must implement.
The core reporter depends only on these interfaces, not concrete implementations.
"""

from collections.abc import Callable, Sequence
from typing import Any, Protocol, runtime_checkable

from cloudwatchpy.core.models import Datapoint, Dimension

# (name, metric) -> bool; metrics failing the filter are never reported.
MetricFilter = Callable[[str, Any], bool]


@runtime_checkable
class TransportPort(Protocol):
    """Port for delivering batches to the monitoring backend.

    Adapters implementing this protocol send a whole batch or raise.
    Examples: InMemoryTransport, CloudWatchTransport.
    """

    def deliver(self, namespace: str, datapoints: Sequence[Datapoint]) -> None:
        """Deliver datapoints under the given namespace.

        Args:
            namespace: CloudWatch namespace.
            datapoints: At most 20 datapoints, in order.

        Raises:
            Exception: Any failure; the batch is treated as lost.
        """
        ...


@runtime_checkable
class MetadataSourcePort(Protocol):
    """Port for discovering the identifier of the running instance."""

    def lookup(self) -> str:
        """Return the instance identifier or raise on failure."""
        ...


@runtime_checkable
class DimensionAdderPort(Protocol):
    """Port for contributing dimensions to the datapoints of a metric."""

    def generate(self, name: str, metric: Any) -> list[Dimension]:
        """Return the dimensions to attach to datapoints of this metric.

        Args:
            name: Registered metric name.
            metric: The metric instance.

        Returns:
            Zero or more dimensions, in order.
        """
        ...
