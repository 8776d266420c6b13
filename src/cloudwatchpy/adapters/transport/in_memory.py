"""In-memory transport adapter."""

from collections.abc import Sequence

from cloudwatchpy.core.models import Datapoint


class InMemoryTransport:
    """In-memory implementation of TransportPort.

    Records every delivery instead of sending it. Suitable for testing
    and for inspecting what a reporter would send.

    Args:
        fail_on_call: 1-based index of a delivery call that raises
            ConnectionError instead of recording.
    """

    def __init__(self, fail_on_call: int | None = None) -> None:
        self.calls: list[tuple[str, list[Datapoint]]] = []
        self.latest_by_name: dict[str, Datapoint] = {}
        self._fail_on_call = fail_on_call
        self._attempts = 0

    def deliver(self, namespace: str, datapoints: Sequence[Datapoint]) -> None:
        """Record a delivery."""
        self._attempts += 1
        if self._attempts == self._fail_on_call:
            raise ConnectionError(f"delivery {self._attempts} refused")
        self.calls.append((namespace, list(datapoints)))
        for datapoint in datapoints:
            self.latest_by_name[datapoint.name] = datapoint

    @property
    def datapoints(self) -> list[Datapoint]:
        """Every recorded datapoint, in delivery order."""
        return [d for _, batch in self.calls for d in batch]

    def clear(self) -> None:
        self.calls.clear()
        self.latest_by_name.clear()
