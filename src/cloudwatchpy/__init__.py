"""cloudwatchpy - report in-process metrics to Amazon CloudWatch."""

from cloudwatchpy.adapters.metadata.ec2 import EC2MetadataSource, ec2_instance_id_adder
from cloudwatchpy.adapters.scheduler import ScheduledReporter, enable
from cloudwatchpy.adapters.transport.cloudwatch import CloudWatchTransport
from cloudwatchpy.adapters.transport.in_memory import InMemoryTransport
from cloudwatchpy.core.config import ReporterConfig
from cloudwatchpy.core.dimensions import (
    DimensionPipeline,
    InstanceIdAdder,
    StaticDimensionAdder,
)
from cloudwatchpy.core.exceptions import (
    CloudWatchReporterError,
    ConfigurationError,
    DeliveryError,
    UnsendableValueError,
)
from cloudwatchpy.core.metrics import (
    ALL,
    Counter,
    Gauge,
    Histogram,
    Meter,
    MetricsRegistry,
    RegistrySnapshot,
    Snapshot,
    Timer,
    UniformReservoir,
)
from cloudwatchpy.core.models import Batch, Datapoint, Dimension, StandardUnit
from cloudwatchpy.core.ports import DimensionAdderPort, MetadataSourcePort, TransportPort
from cloudwatchpy.core.reporter import CloudWatchReporter, ReportResult
from cloudwatchpy.core.units import TimeUnit

__all__ = [
    "ALL",
    "Batch",
    "CloudWatchReporter",
    "CloudWatchReporterError",
    "CloudWatchTransport",
    "ConfigurationError",
    "Counter",
    "Datapoint",
    "DeliveryError",
    "Dimension",
    "DimensionAdderPort",
    "DimensionPipeline",
    "EC2MetadataSource",
    "Gauge",
    "Histogram",
    "InMemoryTransport",
    "InstanceIdAdder",
    "MetadataSourcePort",
    "Meter",
    "MetricsRegistry",
    "RegistrySnapshot",
    "ReportResult",
    "ReporterConfig",
    "ScheduledReporter",
    "Snapshot",
    "StandardUnit",
    "StaticDimensionAdder",
    "TimeUnit",
    "Timer",
    "TransportPort",
    "UnsendableValueError",
    "UniformReservoir",
    "ec2_instance_id_adder",
    "enable",
]
