"""Core domain models for telemetry data."""

from dataclasses import dataclass, field
from typing import Any, Literal

LogLevel = Literal["info", "warn", "error"]
LogType = Literal["http", "db", "factory", "exception"]
MetricKind = Literal["sum", "gauge"]
ValueKind = Literal["int", "double"]
Temporality = Literal["cumulative"]


@dataclass(frozen=True)
class LogEvent:
    """A single log line bound for the log collector.

    Attributes:
        level: Log level ("info", "warn" or "error").
        type: Event category ("http", "db", "factory" or "exception").
        timestamp_nanos: Unix timestamp in nanoseconds.
        labels: Stream labels (component, level, type).
        payload: Sanitized JSON-compatible payload.
    """

    level: LogLevel
    type: LogType
    timestamp_nanos: int
    labels: dict[str, str] = field(default_factory=dict)
    payload: Any = None


@dataclass(frozen=True)
class MetricSample:
    """A single metric data point bound for the metrics collector.

    Attributes:
        name: Metric name (e.g., http_requests_total).
        unit: Unit string ("1", "%", "ms").
        kind: "sum" for cumulative counters, "gauge" for instantaneous values.
        value_kind: Wire representation of the value ("int" or "double").
        value: The metric value.
        attributes: Key-value pairs for metric dimensions.
        timestamp_nanos: Unix timestamp in nanoseconds.
        monotonic: Whether a sum never decreases (sums only).
        temporality: Aggregation temporality (sums only).
    """

    name: str
    unit: str
    kind: MetricKind
    value_kind: ValueKind
    value: float
    attributes: dict[str, str] = field(default_factory=dict)
    timestamp_nanos: int = 0
    monotonic: bool = False
    temporality: Temporality | None = None
