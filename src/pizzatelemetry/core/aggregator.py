"""In-memory metrics aggregation with periodic reporting.

A single MetricsAggregator instance owns all counters, the active-user set
and the latency windows for the process. Event hooks are plain synchronous
mutations so they can be called from any request handler; flush_and_report()
reads the state, builds one batch and hands it to a metrics sink.

Counters are cumulative: a flush reports them but never resets them. Only the
latency windows shrink over time, and only as a capacity policy.
"""

import logging
import time
from collections.abc import Callable, Hashable
from typing import Protocol

from pizzatelemetry.core.metrics import counter, gauge
from pizzatelemetry.core.models import MetricSample
from pizzatelemetry.core.ports import MetricsSinkPort
from pizzatelemetry.core.ring_buffer import LatencyWindow
from pizzatelemetry.core.system import SystemStats

logger = logging.getLogger(__name__)

LATENCY_CAPACITY = 1000
TRIM_THRESHOLD = 100
TRIM_KEEP = 50


class SystemStatsSource(Protocol):
    """Anything that can report host CPU and memory utilization."""

    def cpu_usage_percent(self) -> float: ...

    def memory_usage_percent(self) -> float: ...


class MetricsAggregator:
    """Process-wide metrics state with event hooks and a flush operation."""

    def __init__(
        self,
        sink: MetricsSinkPort,
        source: str,
        system: SystemStatsSource | None = None,
        latency_capacity: int = LATENCY_CAPACITY,
    ) -> None:
        """Initialize empty state.

        Args:
            sink: Adapter implementing MetricsSinkPort.
            source: Value of the "source" attribute on every sample.
            system: Host readings provider (default: psutil-backed SystemStats).
            latency_capacity: Size of each latency ring buffer.
        """
        self.sink = sink
        self.source = source
        self.system: SystemStatsSource = system or SystemStats()
        self._requests: dict[str, int] = {}
        self._active_users: set[Hashable] = set()
        self._auth_success = 0
        self._auth_failure = 0
        self._pizza_sold = 0
        self._pizza_failures = 0
        self._pizza_revenue = 0.0
        self._endpoint_latencies = LatencyWindow(latency_capacity)
        self._pizza_latencies = LatencyWindow(latency_capacity)

    # === Event hooks ===

    def on_request(self, method: str, path: str = "") -> Callable[[], None]:
        """Count a request and return the callback that records its latency.

        The returned callable must be invoked once the response has finished;
        it appends the elapsed milliseconds to the endpoint latency window.
        """
        self._requests[method] = self._requests.get(method, 0) + 1
        start = time.perf_counter()
        endpoint = f"{method} {path}"

        def finished() -> None:
            latency_ms = (time.perf_counter() - start) * 1000
            self._endpoint_latencies.append(latency_ms)
            logger.debug("%s took %.1fms", endpoint, latency_ms)

        return finished

    def on_auth_attempt(self, success: bool) -> None:
        """Count a successful or failed authentication attempt."""
        if success:
            self._auth_success += 1
        else:
            self._auth_failure += 1

    def on_user_login(self, user_id: Hashable) -> None:
        """Mark a user as active."""
        self._active_users.add(user_id)

    def on_user_logout(self, user_id: Hashable) -> None:
        """Mark a user as no longer active."""
        self._active_users.discard(user_id)

    def on_pizza_purchase(
        self,
        success: bool,
        latency_ms: float | None = None,
        price: float | None = None,
    ) -> None:
        """Record the outcome of a pizza order.

        Args:
            success: Whether the factory accepted the order.
            latency_ms: Factory round-trip time, recorded regardless of outcome.
            price: Order total added to revenue on success (default 0).
        """
        if success:
            self._pizza_sold += 1
            if price is not None and price > 0:
                self._pizza_revenue += price
        else:
            self._pizza_failures += 1

        if latency_ms is not None:
            self._pizza_latencies.append(latency_ms)

    # === Read-only views ===

    @property
    def request_counts(self) -> dict[str, int]:
        return dict(self._requests)

    @property
    def active_users(self) -> frozenset[Hashable]:
        return frozenset(self._active_users)

    @property
    def auth_success_count(self) -> int:
        return self._auth_success

    @property
    def auth_failure_count(self) -> int:
        return self._auth_failure

    @property
    def pizza_sold_count(self) -> int:
        return self._pizza_sold

    @property
    def pizza_failure_count(self) -> int:
        return self._pizza_failures

    @property
    def pizza_revenue_total(self) -> float:
        return self._pizza_revenue

    @property
    def endpoint_latencies(self) -> LatencyWindow:
        return self._endpoint_latencies

    @property
    def pizza_latencies(self) -> LatencyWindow:
        return self._pizza_latencies

    # === Reporting ===

    def _attrs(self, **attributes: str) -> dict[str, str]:
        return {**attributes, "source": self.source}

    def collect(self) -> list[MetricSample]:
        """Build the metric batch for the current state without mutating it."""
        samples: list[MetricSample] = []

        for method, count in self._requests.items():
            if count > 0:
                samples.append(
                    counter("http_requests_total", count, attributes=self._attrs(method=method))
                )
        total_requests = sum(self._requests.values())
        if total_requests > 0:
            samples.append(
                counter(
                    "http_requests_total",
                    total_requests,
                    attributes=self._attrs(method="ALL"),
                )
            )

        samples.append(
            gauge(
                "active_users",
                len(self._active_users),
                attributes=self._attrs(),
                value_kind="int",
            )
        )

        samples.append(
            counter(
                "auth_attempts_total",
                self._auth_success,
                attributes=self._attrs(status="success"),
            )
        )
        samples.append(
            counter(
                "auth_attempts_total",
                self._auth_failure,
                attributes=self._attrs(status="failure"),
            )
        )

        cpu = self.system.cpu_usage_percent()
        memory = self.system.memory_usage_percent()
        samples.append(gauge("cpu_usage_percent", cpu, unit="%", attributes=self._attrs()))
        samples.append(
            gauge("memory_usage_percent", memory, unit="%", attributes=self._attrs())
        )
        logger.debug("CPU: %.2f%%, Memory: %.2f%%", cpu, memory)

        samples.append(counter("pizza_sold_total", self._pizza_sold, attributes=self._attrs()))
        samples.append(
            counter(
                "pizza_creation_failures_total",
                self._pizza_failures,
                attributes=self._attrs(),
            )
        )
        samples.append(
            counter(
                "pizza_revenue_total",
                self._pizza_revenue,
                attributes=self._attrs(),
                value_kind="double",
            )
        )

        endpoint_mean = self._endpoint_latencies.mean()
        if endpoint_mean is not None:
            samples.append(
                gauge("endpoint_latency_ms", endpoint_mean, unit="ms", attributes=self._attrs())
            )
        pizza_mean = self._pizza_latencies.mean()
        if pizza_mean is not None:
            samples.append(
                gauge(
                    "pizza_creation_latency_ms",
                    pizza_mean,
                    unit="ms",
                    attributes=self._attrs(),
                )
            )

        return samples

    def flush_and_report(self) -> None:
        """Send the current batch to the sink and trim latency windows.

        Counters are left untouched. Errors are reported locally, never raised.
        """
        try:
            batch = self.collect()
            self.sink.send(batch)
        except Exception:
            logger.exception("Error collecting metrics")
            return
        self._endpoint_latencies.trim(TRIM_THRESHOLD, TRIM_KEEP)
        self._pizza_latencies.trim(TRIM_THRESHOLD, TRIM_KEEP)
