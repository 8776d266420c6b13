"""Per-kind translation of metrics into (suffix, value, unit) readings."""

import math
import numbers
from typing import Any

from cloudwatchpy.core.config import ReporterConfig
from cloudwatchpy.core.exceptions import UnsendableValueError
from cloudwatchpy.core.metrics import Counter, Gauge, Histogram, Meter, Snapshot, Timer
from cloudwatchpy.core.models import Reading, StandardUnit
from cloudwatchpy.core.units import convert_duration, convert_rate, standard_unit_for


def percentile_suffix(percentile: float) -> str:
    """Return the name suffix for a percentile.

    0.5 is reported as ``.median``; every other percentile uses its
    literal decimal form, e.g. ``_percentile_0.99``.
    """
    if percentile == 0.5:
        return ".median"
    return f"_percentile_{float(percentile)!r}"


def is_sendable(value: Any) -> bool:
    """Return True for real numbers other than booleans and NaN."""
    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        return False
    return not math.isnan(to_float(value))


def to_float(value: numbers.Real) -> float:
    """Convert a real number to float, saturating to infinity on overflow.

    Infinite values are later clamped to the largest sendable value.
    """
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def translate_gauge(name: str, gauge: Gauge) -> list[Reading]:
    """Translate a gauge into a single unitless reading.

    Raises:
        UnsendableValueError: If the gauge value is not a real number, or is NaN.
    """
    value = gauge.value
    if not is_sendable(value):
        raise UnsendableValueError(name, value)
    return [Reading("", to_float(value), StandardUnit.NONE)]


def translate_counter(counter: Counter) -> list[Reading]:
    return [Reading("", to_float(counter.count), StandardUnit.COUNT)]


def translate_meter(meter: Meter | Timer, config: ReporterConfig) -> list[Reading]:
    """Translate the rate side of a meter or timer.

    Each windowed rate is toggled independently; the lifetime count and
    mean rate are sent only with the meter summary enabled.
    """
    readings = []
    if config.one_minute_rate:
        readings.append(
            Reading(".1MinuteRate", _rate(meter.one_minute_rate, config), StandardUnit.NONE)
        )
    if config.five_minute_rate:
        readings.append(
            Reading(".5MinuteRate", _rate(meter.five_minute_rate, config), StandardUnit.NONE)
        )
    if config.fifteen_minute_rate:
        readings.append(
            Reading(
                ".15MinuteRate", _rate(meter.fifteen_minute_rate, config), StandardUnit.NONE
            )
        )
    if config.meter_summary:
        readings.append(Reading(".count", to_float(meter.count), StandardUnit.COUNT))
        readings.append(
            Reading(".meanRate", _rate(meter.mean_rate, config), StandardUnit.NONE)
        )
    return readings


def translate_histogram(histogram: Histogram, config: ReporterConfig) -> list[Reading]:
    """Translate a histogram into percentile and optional summary readings."""
    return _distribution(
        histogram.snapshot(),
        config,
        summary=config.histogram_summary,
        convert=float,
        unit=StandardUnit.NONE,
    )


def translate_timer(timer: Timer, config: ReporterConfig) -> list[Reading]:
    """Translate a timer: its meter readings, then its durations.

    Durations are converted from nanoseconds to the configured duration
    unit and tagged with it.
    """
    unit = standard_unit_for(config.duration_unit)
    readings = translate_meter(timer, config)
    readings.extend(
        _distribution(
            timer.snapshot(),
            config,
            summary=config.timer_summary,
            convert=lambda nanos: convert_duration(nanos, config.duration_unit),
            unit=unit,
        )
    )
    return readings


def _rate(per_second: float, config: ReporterConfig) -> float:
    return convert_rate(per_second, config.rate_unit)


def _distribution(snapshot: Snapshot, config, summary, convert, unit) -> list[Reading]:
    readings = [
        Reading(percentile_suffix(p), convert(snapshot.value(p)), unit)
        for p in config.percentiles
    ]
    if summary:
        readings.extend(
            [
                Reading(".min", convert(snapshot.min), unit),
                Reading(".max", convert(snapshot.max), unit),
                Reading(".mean", convert(snapshot.mean), unit),
                Reading(".stddev", convert(snapshot.stddev), unit),
            ]
        )
    return readings
