"""ASGI middleware for request logging and request metrics.

This adapter wraps any ASGI application (FastAPI, Starlette, plain ASGI
callables) without requiring a specific framework. The response is observed
through a wrapped ``send`` callable; it is forwarded to the server unchanged.
"""

import asyncio
import fnmatch
import json
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from pizzatelemetry.core.aggregator import MetricsAggregator
from pizzatelemetry.core.logs import TelemetryLogger

logger = logging.getLogger(__name__)

# ASGI type aliases
Scope = dict[str, Any]
Message = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, Message]]
Send = Callable[[Message], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


def _get_header(scope: Scope, header_name: str) -> str | None:
    """Return the first value of a header (case-insensitive), or None."""
    header_bytes = header_name.lower().encode()
    headers: list[tuple[bytes, bytes]] = scope.get("headers", [])
    for name, value in headers:
        if name.lower() == header_bytes:
            return value.decode("latin-1")
    return None


def _client_ip(scope: Scope) -> str | None:
    """Client address, preferring X-Forwarded-For over the socket peer."""
    forwarded = _get_header(scope, "x-forwarded-for")
    if forwarded:
        return forwarded
    client = scope.get("client")
    if client:
        return str(client[0])
    return None


def _full_path(scope: Scope) -> str:
    """Request path including the query string, if any."""
    path = scope.get("path", "")
    query_string = scope.get("query_string", b"")
    if query_string:
        return f"{path}?{query_string.decode('latin-1')}"
    return path


def _parse_body(body: bytes) -> Any:
    """Decode a body as JSON, falling back to text. Empty bodies give None."""
    if not body:
        return None
    text = body.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return text


MAX_CAPTURED_BODY = 64 * 1024


class _BodyBuffer:
    """Collects body chunks up to *limit* bytes.

    Once the total size passes the limit the stored chunks are released and
    the body is reported as a truncation marker instead of its content, so
    no unsanitized fragment of a large body is ever logged.
    """

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.size = 0
        self._chunks: list[bytes] = []

    @property
    def truncated(self) -> bool:
        return self.size > self.limit

    def append(self, chunk: bytes) -> None:
        self.size += len(chunk)
        if self.truncated:
            self._chunks.clear()
        else:
            self._chunks.append(chunk)

    def value(self) -> Any:
        if self.truncated:
            return {"truncated": True, "size": self.size}
        return _parse_body(b"".join(self._chunks))


class ResponseCapture:
    """Per-request record of what flowed through receive and send.

    finalize() returns True exactly once, for whichever completion path
    reaches it first; every later call returns False. Each body keeps at
    most ``max_body_bytes``.
    """

    def __init__(self, max_body_bytes: int = MAX_CAPTURED_BODY) -> None:
        self.status: int | None = None
        self.started = False
        self._request = _BodyBuffer(max_body_bytes)
        self._response = _BodyBuffer(max_body_bytes)
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def record_request(self, message: Message) -> None:
        if message.get("type") == "http.request":
            self._request.append(message.get("body", b""))

    def record_response(self, message: Message) -> bool:
        """Record a send message; True when it completes the response body."""
        if message["type"] == "http.response.start":
            self.started = True
            self.status = message["status"]
            return False
        if message["type"] == "http.response.body":
            self._response.append(message.get("body", b""))
            return not message.get("more_body", False)
        return False

    def finalize(self) -> bool:
        if self._finalized:
            return False
        self._finalized = True
        return True

    @property
    def request_body(self) -> Any:
        return self._request.value()

    @property
    def response_body(self) -> Any:
        return self._response.value()


class ASGITelemetryMiddleware:
    """ASGI middleware that logs every HTTP exchange and feeds request metrics.

    One "http" log event is produced per request, after the response body
    has been handed to the server. Logging is deferred with loop.call_soon
    so it never adds latency to the response, and any failure while building
    the log is reported locally instead of reaching the application.
    """

    def __init__(
        self,
        app: ASGIApp,
        telemetry: TelemetryLogger | None = None,
        metrics: MetricsAggregator | None = None,
        exclude_paths: list[str] | None = None,
    ) -> None:
        """Initialize the middleware with a wrapped app and telemetry collaborators.

        Args:
            app: The ASGI application to wrap.
            telemetry: TelemetryLogger receiving the request logs (optional).
            metrics: MetricsAggregator receiving request counts and latency
                (optional).
            exclude_paths: List of paths to exclude from logging/metrics.
                          Supports exact matches and wildcard patterns
                          (e.g., "/internal/*").
        """
        self.app = app
        self.telemetry = telemetry
        self.metrics = metrics
        self.exclude_paths = exclude_paths or []
        self.log_requests = True
        self.record_metrics = True

    def set_log_requests(self, enabled: bool) -> None:
        """Set whether to log requests.

        Args:
            enabled: True to enable request logging, False to disable.
        """
        self.log_requests = enabled

    def set_record_metrics(self, enabled: bool) -> None:
        """Set whether to record request metrics.

        Args:
            enabled: True to enable metrics recording, False to disable.
        """
        self.record_metrics = enabled

    def _path_excluded(self, path: str) -> bool:
        """Check if path matches any pattern in exclude_paths."""
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.exclude_paths)

    def _build_log_data(self, scope: Scope, capture: ResponseCapture) -> dict[str, Any]:
        return {
            "authorized": _get_header(scope, "authorization") is not None,
            "method": scope["method"],
            "path": _full_path(scope),
            "status": capture.status or 200,
            "ip": _client_ip(scope),
            "req": capture.request_body,
            "res": capture.response_body,
        }

    def _emit_log(self, scope: Scope, capture: ResponseCapture) -> None:
        """Build and ship the request log. Runs after the response completed."""
        if self.telemetry is None:
            return
        try:
            data = self._build_log_data(scope, capture)
            self.telemetry.http_log(data, data["status"])
        except Exception:
            logger.exception("Error logging %s %s", scope.get("method"), scope.get("path"))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI callable interface that processes requests through the wrapped app."""
        if scope["type"] != "http" or self._path_excluded(scope["path"]):
            await self.app(scope, receive, send)
            return

        loop = asyncio.get_running_loop()
        capture = ResponseCapture()
        record_latency: Callable[[], None] | None = None
        if self.record_metrics and self.metrics is not None:
            record_latency = self.metrics.on_request(scope["method"], scope["path"])

        def finish() -> None:
            if not capture.finalize():
                return
            try:
                if record_latency is not None:
                    record_latency()
                if self.log_requests and self.telemetry is not None:
                    loop.call_soon(self._emit_log, scope, capture)
            except Exception:
                logger.exception("Error finishing request telemetry")

        async def wrapped_receive() -> Message:
            message = await receive()
            try:
                capture.record_request(message)
            except Exception:
                logger.exception("Error capturing request body")
            return message

        async def wrapped_send(message: Message) -> None:
            try:
                complete = capture.record_response(message)
            except Exception:
                logger.exception("Error capturing response")
                complete = False
            await send(message)
            if complete:
                finish()

        try:
            await self.app(scope, wrapped_receive, wrapped_send)
        except Exception:
            if not capture.started:
                capture.status = 500
            raise
        finally:
            finish()
