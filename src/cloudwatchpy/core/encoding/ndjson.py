"""NDJSON encoder for datapoints."""

import json
from collections.abc import Iterable

from cloudwatchpy.core.models import Datapoint


def encode_datapoints(datapoints: Iterable[Datapoint]) -> str:
    """Encode datapoints to newline-delimited JSON.

    Args:
        datapoints: An iterable of Datapoint objects.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no datapoints.
    """
    lines = []
    for datapoint in datapoints:
        obj = {
            "name": datapoint.name,
            "timestamp": datapoint.timestamp,
            "value": datapoint.value,
            "unit": datapoint.unit.value,
            "dimensions": [
                {"name": d.name, "value": d.value} for d in datapoint.dimensions
            ],
        }
        lines.append(json.dumps(obj))

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
