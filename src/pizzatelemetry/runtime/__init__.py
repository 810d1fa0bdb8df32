"""Process-level runtime: flush scheduling and component wiring."""

from pizzatelemetry.runtime.embedded import TelemetryRuntime
from pizzatelemetry.runtime.scheduler import FlushScheduler

__all__ = ["FlushScheduler", "TelemetryRuntime"]
