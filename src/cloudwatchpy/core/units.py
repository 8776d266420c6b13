"""Time unit conversion for durations and rates.

Timers record durations in nanoseconds and meters measure rates in events
per second. The reporter converts both to its configured units before
sending, and tags durations with the matching CloudWatch unit.
"""

from enum import Enum

from cloudwatchpy.core.exceptions import ConfigurationError
from cloudwatchpy.core.models import StandardUnit


class TimeUnit(Enum):
    """Time units, valued by their length in nanoseconds."""

    NANOSECONDS = 1
    MICROSECONDS = 1_000
    MILLISECONDS = 1_000_000
    SECONDS = 1_000_000_000
    MINUTES = 60_000_000_000
    HOURS = 3_600_000_000_000
    DAYS = 86_400_000_000_000

    @property
    def nanos(self) -> int:
        return self.value

    def to_nanos(self, duration: float) -> int:
        """Convert a duration expressed in this unit to whole nanoseconds."""
        return int(duration * self.value)


_STANDARD_DURATION_UNITS = {
    TimeUnit.MILLISECONDS: StandardUnit.MILLISECONDS,
    TimeUnit.MICROSECONDS: StandardUnit.MICROSECONDS,
    TimeUnit.SECONDS: StandardUnit.SECONDS,
}


def convert_duration(nanos: float, unit: TimeUnit) -> float:
    """Convert a duration in nanoseconds to the given unit.

    Args:
        nanos: Duration in nanoseconds.
        unit: Target unit.

    Returns:
        The duration expressed in ``unit``.
    """
    return nanos / unit.nanos


def convert_rate(per_second: float, unit: TimeUnit) -> float:
    """Convert an events-per-second rate to events per ``unit``."""
    return per_second * (unit.nanos / TimeUnit.SECONDS.nanos)


def standard_unit_for(unit: TimeUnit) -> StandardUnit:
    """Return the CloudWatch unit tag for a duration unit.

    Raises:
        ConfigurationError: If CloudWatch has no unit for ``unit``.
    """
    try:
        return _STANDARD_DURATION_UNITS[unit]
    except KeyError:
        raise ConfigurationError(
            f"CloudWatch only supports milli/micro/seconds [ {unit.name} ]"
        ) from None
