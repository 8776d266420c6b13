"""Exceptions raised by the CloudWatch reporter."""


class CloudWatchReporterError(Exception):
    """Base class for reporter errors."""


class ConfigurationError(CloudWatchReporterError, ValueError):
    """Raised when a reporter configuration is invalid."""


class UnsendableValueError(CloudWatchReporterError, TypeError):
    """Raised when a gauge holds a value CloudWatch cannot accept."""

    def __init__(self, name: str, value: object) -> None:
        super().__init__(
            f"The value for {name} is {value!r} of type {type(value).__name__}. "
            "It must be a real number other than NaN to send to CloudWatch."
        )
        self.name = name
        self.value = value


class DeliveryError(CloudWatchReporterError):
    """Raised when the transport fails to deliver a batch.

    Attributes:
        namespace: Namespace of the failed batch.
        size: Number of datapoints in the failed batch.
    """

    def __init__(self, namespace: str, size: int, reason: str) -> None:
        super().__init__(
            f"Failed delivering {size} datapoints to namespace {namespace}: {reason}"
        )
        self.namespace = namespace
        self.size = size
