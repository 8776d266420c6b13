"""CloudWatch PutMetricData transport adapter.

Works with any client exposing ``put_metric_data(Namespace=..., MetricData=...)``,
such as ``boto3.client("cloudwatch")``.
"""

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any, Protocol

from cloudwatchpy.core.models import Datapoint


class PutMetricDataClient(Protocol):
    def put_metric_data(self, **kwargs: Any) -> Any: ...


def to_metric_datum(datapoint: Datapoint) -> dict[str, Any]:
    """Convert a datapoint to a PutMetricData ``MetricData`` entry."""
    return {
        "MetricName": datapoint.name,
        "Timestamp": datetime.fromtimestamp(datapoint.timestamp, tz=timezone.utc),
        "Value": datapoint.value,
        "Unit": datapoint.unit.value,
        "Dimensions": [{"Name": d.name, "Value": d.value} for d in datapoint.dimensions],
    }


class CloudWatchTransport:
    """TransportPort implementation backed by a CloudWatch client."""

    def __init__(self, client: PutMetricDataClient) -> None:
        self._client = client

    def deliver(self, namespace: str, datapoints: Sequence[Datapoint]) -> None:
        """Send datapoints in a single PutMetricData call."""
        self._client.put_metric_data(
            Namespace=namespace,
            MetricData=[to_metric_datum(d) for d in datapoints],
        )
