"""Embedded runtime wiring transports, logger, aggregator and scheduler."""

import logging

from pizzatelemetry.adapters.transport.http import (
    GrafanaLogTransport,
    GrafanaMetricsTransport,
)
from pizzatelemetry.config import TelemetryConfig
from pizzatelemetry.core.aggregator import MetricsAggregator
from pizzatelemetry.core.logs import TelemetryLogger
from pizzatelemetry.runtime.scheduler import FlushScheduler

logger = logging.getLogger(__name__)


class TelemetryRuntime:
    """Owns the telemetry components for one process.

    Example:
        ```python
        runtime = TelemetryRuntime.from_config(load_config())
        app = FastAPI()
        instrument_app(app, runtime.telemetry, runtime.metrics)

        await runtime.start()
        ...
        await runtime.stop()
        ```
    """

    def __init__(
        self,
        telemetry: TelemetryLogger,
        metrics: MetricsAggregator,
        flush_interval_seconds: float,
        log_transport: GrafanaLogTransport | None = None,
        metrics_transport: GrafanaMetricsTransport | None = None,
    ) -> None:
        self.telemetry = telemetry
        self.metrics = metrics
        self.flush_interval_seconds = flush_interval_seconds
        self.scheduler = FlushScheduler(metrics.flush_and_report)
        self._log_transport = log_transport
        self._metrics_transport = metrics_transport

    @classmethod
    def from_config(cls, config: TelemetryConfig) -> "TelemetryRuntime":
        """Build Grafana transports and the components that use them."""
        log_transport = GrafanaLogTransport(config.logging)
        metrics_transport = GrafanaMetricsTransport(config.metrics)
        if not config.logging.is_configured:
            logger.warning("Log collector URL or API key missing; logs disabled")
        if not config.metrics.is_configured:
            logger.warning("Metrics collector URL or API key missing; metrics disabled")
        return cls(
            telemetry=TelemetryLogger(log_transport, config.logging.source),
            metrics=MetricsAggregator(metrics_transport, config.metrics.source),
            flush_interval_seconds=config.flush_interval_seconds,
            log_transport=log_transport,
            metrics_transport=metrics_transport,
        )

    async def start(self) -> None:
        """Bind the transports to the running loop and start metric reporting."""
        for transport in (self._log_transport, self._metrics_transport):
            if transport is not None:
                transport.bind_loop()
        self.scheduler.start(self.flush_interval_seconds)

    async def stop(self) -> None:
        """Stop reporting and wait for in-flight deliveries."""
        self.scheduler.stop()
        for transport in (self._log_transport, self._metrics_transport):
            if transport is not None:
                await transport.aclose()
