"""Port interfaces for telemetry sinks.

These protocols define the contracts that transport adapters must implement.
The core domain depends only on these interfaces, not concrete implementations.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from pizzatelemetry.core.models import LogEvent, MetricSample


@runtime_checkable
class LogSinkPort(Protocol):
    """Port for shipping log events.

    Adapters implementing this protocol accept one event per call.
    Examples: GrafanaLogTransport, InMemoryLogSink.
    """

    def send(self, event: LogEvent) -> None:
        """Hand off a log event.

        Must return immediately and never raise into the caller.
        """
        ...


@runtime_checkable
class MetricsSinkPort(Protocol):
    """Port for shipping metric batches.

    Adapters implementing this protocol accept one flush batch per call.
    Examples: GrafanaMetricsTransport, InMemoryMetricsSink.
    """

    def send(self, batch: Sequence[MetricSample]) -> None:
        """Hand off a batch of metric samples.

        Must return immediately and never raise into the caller.
        """
        ...
