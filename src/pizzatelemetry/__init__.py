"""pizzatelemetry - request logging and metrics for the pizza service.

Ships sanitized HTTP/db/factory/exception logs to a Loki-style collector and
periodic cumulative metrics to an OTLP/HTTP collector, without blocking
request handling.
"""

import logging

from pizzatelemetry.adapters.frameworks.asgi import ASGITelemetryMiddleware
from pizzatelemetry.adapters.transport.http import (
    GrafanaLogTransport,
    GrafanaMetricsTransport,
)
from pizzatelemetry.adapters.transport.in_memory import (
    InMemoryLogSink,
    InMemoryMetricsSink,
)
from pizzatelemetry.config import (
    LoggingConfig,
    MetricsConfig,
    TelemetryConfig,
    load_config,
)
from pizzatelemetry.core.aggregator import MetricsAggregator
from pizzatelemetry.core.logs import TelemetryLogger, level_for_status
from pizzatelemetry.core.models import LogEvent, MetricSample
from pizzatelemetry.core.ports import LogSinkPort, MetricsSinkPort
from pizzatelemetry.core.sanitize import REDACTED, sanitize, sanitize_params
from pizzatelemetry.runtime.embedded import TelemetryRuntime
from pizzatelemetry.runtime.scheduler import FlushScheduler


def get_logger(name: str) -> logging.Logger:
    """Return a standard library logger for local diagnostics."""
    return logging.getLogger(name)


__all__ = [
    "ASGITelemetryMiddleware",
    "FlushScheduler",
    "GrafanaLogTransport",
    "GrafanaMetricsTransport",
    "InMemoryLogSink",
    "InMemoryMetricsSink",
    "LogEvent",
    "LogSinkPort",
    "LoggingConfig",
    "MetricSample",
    "MetricsAggregator",
    "MetricsConfig",
    "MetricsSinkPort",
    "REDACTED",
    "TelemetryConfig",
    "TelemetryLogger",
    "TelemetryRuntime",
    "get_logger",
    "level_for_status",
    "load_config",
    "sanitize",
    "sanitize_params",
]
