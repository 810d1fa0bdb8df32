"""In-memory sinks for log events and metric batches."""

from collections.abc import Sequence

from pizzatelemetry.core.models import LogEvent, MetricSample


class InMemoryLogSink:
    """In-memory implementation of LogSinkPort.

    Stores log events in a list. Suitable for testing and local
    development where no collector is available.
    """

    def __init__(self) -> None:
        self.events: list[LogEvent] = []

    def send(self, event: LogEvent) -> None:
        """Record a log event."""
        self.events.append(event)


class InMemoryMetricsSink:
    """In-memory implementation of MetricsSinkPort.

    Stores each flushed batch as a separate list.
    """

    def __init__(self) -> None:
        self.batches: list[list[MetricSample]] = []

    def send(self, batch: Sequence[MetricSample]) -> None:
        """Record a metric batch."""
        self.batches.append(list(batch))

    @property
    def last_batch(self) -> list[MetricSample]:
        """Most recent batch, or an empty list before the first flush."""
        return self.batches[-1] if self.batches else []
