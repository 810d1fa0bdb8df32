"""Metric helper functions for creating MetricSample objects."""

import time

from pizzatelemetry.core.models import MetricSample, ValueKind


def counter(
    name: str,
    value: float,
    unit: str = "1",
    attributes: dict[str, str] | None = None,
    value_kind: ValueKind = "int",
) -> MetricSample:
    """Create a cumulative counter sample.

    Args:
        name: Metric name (e.g., "pizza_sold_total")
        value: Running total since process start
        unit: Metric unit (default: "1")
        attributes: Optional dimension attributes
        value_kind: "int" or "double" (default: "int")

    Returns:
        Monotonic cumulative sum MetricSample with current timestamp
    """
    return MetricSample(
        name=name,
        unit=unit,
        kind="sum",
        value_kind=value_kind,
        value=value,
        attributes=attributes or {},
        timestamp_nanos=time.time_ns(),
        monotonic=True,
        temporality="cumulative",
    )


def gauge(
    name: str,
    value: float,
    unit: str = "1",
    attributes: dict[str, str] | None = None,
    value_kind: ValueKind = "double",
) -> MetricSample:
    """Create a gauge sample.

    Args:
        name: Metric name (e.g., "cpu_usage_percent")
        value: Current gauge value
        unit: Metric unit (default: "1")
        attributes: Optional dimension attributes
        value_kind: "int" or "double" (default: "double")

    Returns:
        Gauge MetricSample with current timestamp
    """
    return MetricSample(
        name=name,
        unit=unit,
        kind="gauge",
        value_kind=value_kind,
        value=value,
        attributes=attributes or {},
        timestamp_nanos=time.time_ns(),
    )
