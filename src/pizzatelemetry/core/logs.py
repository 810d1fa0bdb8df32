"""Log event construction and the telemetry logger façade."""

import logging
import time
import traceback
from typing import Any

from pizzatelemetry.core.models import LogEvent, LogLevel, LogType
from pizzatelemetry.core.ports import LogSinkPort
from pizzatelemetry.core.sanitize import sanitize, sanitize_params

logger = logging.getLogger(__name__)


def level_for_status(status: int) -> LogLevel:
    """Determine log level based on HTTP status code.

    Maps status codes to log levels:
    - 500 and above → "error"
    - 400-499 → "warn"
    - Other → "info"

    Args:
        status: HTTP status code from response.

    Returns:
        Log level string ("info", "warn", or "error").
    """
    if status >= 500:
        return "error"
    if status >= 400:
        return "warn"
    return "info"


def now_nanos() -> int:
    """Return the current Unix time in nanoseconds."""
    return time.time_ns()


class TelemetryLogger:
    """Builds sanitized log events and hands them to a log sink.

    Example:
        ```python
        from pizzatelemetry import InMemoryLogSink, TelemetryLogger

        sink = InMemoryLogSink()
        telemetry = TelemetryLogger(sink, source="jwt-pizza-service")
        telemetry.db_log("SELECT * FROM user WHERE email=?", ["a@b.c"], 3)
        ```
    """

    def __init__(self, sink: LogSinkPort, source: str) -> None:
        """Initialize the logger with a sink and a component label.

        Args:
            sink: Adapter implementing LogSinkPort.
            source: Value of the "component" stream label.
        """
        self.sink = sink
        self.source = source

    def build_event(self, level: LogLevel, type_: LogType, data: Any) -> LogEvent:
        """Create a LogEvent for *data* with the standard stream labels."""
        return LogEvent(
            level=level,
            type=type_,
            timestamp_nanos=now_nanos(),
            labels={"component": self.source, "level": level, "type": type_},
            payload=sanitize(data),
        )

    def log(self, level: LogLevel, type_: LogType, data: Any) -> None:
        """Sanitize *data* and ship it as one log event.

        Failures are reported locally and never raised.
        """
        try:
            event = self.build_event(level, type_, data)
        except Exception:
            logger.exception("Failed to build %s log event", type_)
            return
        self.sink.send(event)

    def http_log(self, data: dict[str, Any], status: int) -> None:
        """Ship an HTTP request/response record."""
        self.log(level_for_status(status), "http", data)

    def db_log(self, sql: str, params: Any, ms: float) -> None:
        """Ship a database query record with password-like params redacted."""
        data = {"sql": sql, "params": sanitize_params(params), "ms": ms}
        self.log("info", "db", data)

    def factory_log(
        self,
        request_body: Any,
        response_body: Any,
        status: int,
        error: BaseException | None = None,
    ) -> None:
        """Ship a record of a call to the pizza factory service."""
        data: dict[str, Any] = {
            "request": request_body,
            "response": response_body,
            "status": status,
        }
        if error is not None:
            data["error"] = str(error)
        level: LogLevel = "warn" if status >= 400 or error is not None else "info"
        self.log(level, "factory", data)

    def exception_log(
        self,
        error: BaseException,
        request: dict[str, Any] | None = None,
    ) -> None:
        """Ship an unhandled exception with optional request context.

        Args:
            error: The exception raised while handling a request.
            request: Optional mapping with "method", "path" and "headers".
        """
        data: dict[str, Any] = {
            "message": str(error),
            "name": type(error).__name__,
            "stack": "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ),
        }
        if request is not None:
            data["request"] = {
                "method": request.get("method"),
                "path": request.get("path"),
                "headers": request.get("headers"),
            }
        self.log("error", "exception", data)
