"""Text encodings of datapoints."""

from cloudwatchpy.core.encoding.ndjson import encode_datapoints

__all__ = ["encode_datapoints"]
