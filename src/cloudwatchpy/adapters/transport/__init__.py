"""Transport adapters for delivering datapoint batches."""

from cloudwatchpy.adapters.transport.cloudwatch import CloudWatchTransport
from cloudwatchpy.adapters.transport.in_memory import InMemoryTransport

__all__ = ["CloudWatchTransport", "InMemoryTransport"]
