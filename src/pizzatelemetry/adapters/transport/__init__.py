"""Transport adapters implementing the sink ports."""

from pizzatelemetry.adapters.transport.http import (
    GrafanaLogTransport,
    GrafanaMetricsTransport,
)
from pizzatelemetry.adapters.transport.in_memory import (
    InMemoryLogSink,
    InMemoryMetricsSink,
)

__all__ = [
    "GrafanaLogTransport",
    "GrafanaMetricsTransport",
    "InMemoryLogSink",
    "InMemoryMetricsSink",
]
