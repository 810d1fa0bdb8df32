"""HTTP transports pushing telemetry to Grafana-style collectors.

Both transports are fire-and-forget: send() encodes the payload, schedules
the POST as a detached task on the transport's event loop and returns. Delivery
failures are logged and dropped; nothing is retried or queued.
"""

import asyncio
import base64
import concurrent.futures
import logging
from collections.abc import Sequence
from typing import Any

import httpx

from pizzatelemetry.config import LoggingConfig, MetricsConfig
from pizzatelemetry.core.encoding.loki import encode_log_event
from pizzatelemetry.core.encoding.otlp import encode_metrics
from pizzatelemetry.core.models import LogEvent, MetricSample

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(10.0, connect=5.0)


def metrics_auth_header(api_key: str) -> str:
    """Basic auth when the key is a "user:token" pair, Bearer otherwise."""
    if ":" in api_key:
        encoded = base64.b64encode(api_key.encode()).decode()
        return f"Basic {encoded}"
    return f"Bearer {api_key}"


class _FireAndForgetTransport:
    """Shared delivery machinery for the log and metrics transports.

    Deliveries run on the event loop the transport was bound to. The loop is
    recorded by bind_loop() or by the first send() made on it; later sends
    from worker threads (sync handlers, sync DB code) are handed over to
    that loop. A payload is dropped only when no loop is known.
    """

    name = "telemetry"

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client
        self._owns_client = client is None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._futures: set[concurrent.futures.Future[None]] = set()

    @property
    def pending(self) -> int:
        """Number of deliveries still in flight."""
        return len(self._tasks) + len(self._futures)

    def bind_loop(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Record the loop deliveries run on (the running loop by default)."""
        self._loop = loop or asyncio.get_running_loop()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
        return self._client

    def _dispatch(self, url: str, body: dict[str, Any], headers: dict[str, str]) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None:
            if self._loop is None:
                self._loop = running
            task = running.create_task(self._post(url, body, headers))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            return

        loop = self._loop
        if loop is None or loop.is_closed():
            logger.warning("No running event loop; %s payload dropped", self.name)
            return
        future = asyncio.run_coroutine_threadsafe(self._post(url, body, headers), loop)
        self._futures.add(future)
        future.add_done_callback(self._futures.discard)

    async def _post(self, url: str, body: dict[str, Any], headers: dict[str, str]) -> None:
        try:
            response = await self._get_client().post(url, json=body, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("Error sending %s: %s", self.name, exc)
            return
        if not response.is_success:
            logger.error(
                "Failed to send %s. Status: %s Response: %s",
                self.name,
                response.status_code,
                response.text,
            )
            return
        self._on_delivered(body)

    def _on_delivered(self, body: dict[str, Any]) -> None:
        logger.debug("Delivered %s", self.name)

    async def aclose(self) -> None:
        """Wait for in-flight deliveries and close an owned HTTP client."""
        waiting = [*self._tasks, *(asyncio.wrap_future(f) for f in list(self._futures))]
        if waiting:
            await asyncio.gather(*waiting, return_exceptions=True)
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


class GrafanaLogTransport(_FireAndForgetTransport):
    """Pushes log events to a Loki endpoint with Bearer user:key auth."""

    name = "logs"

    def __init__(self, config: LoggingConfig, client: httpx.AsyncClient | None = None) -> None:
        """Initialize the transport.

        Args:
            config: Log collector settings.
            client: Optional pre-built httpx client (tests inject a
                MockTransport-backed client here).
        """
        super().__init__(client)
        self.config = config

    def send(self, event: LogEvent) -> None:
        """Schedule delivery of one log event and return immediately."""
        if not self.config.is_configured:
            logger.warning("Logging not configured; log event dropped")
            return
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.user_id}:{self.config.api_key}",
        }
        self._dispatch(self.config.url, encode_log_event(event), headers)


class GrafanaMetricsTransport(_FireAndForgetTransport):
    """Pushes metric batches to an OTLP/HTTP endpoint."""

    name = "metrics"

    def __init__(
        self, config: MetricsConfig, client: httpx.AsyncClient | None = None
    ) -> None:
        super().__init__(client)
        self.config = config

    def send(self, batch: Sequence[MetricSample]) -> None:
        """Schedule delivery of one metric batch and return immediately."""
        if not batch:
            return
        if not self.config.is_configured:
            logger.warning("Metrics not configured; %d samples dropped", len(batch))
            return
        headers = {
            "Content-Type": "application/json",
            "Authorization": metrics_auth_header(self.config.api_key),
        }
        self._dispatch(self.config.url, encode_metrics(batch), headers)

    def _on_delivered(self, body: dict[str, Any]) -> None:
        metrics = body["resourceMetrics"][0]["scopeMetrics"][0]["metrics"]
        logger.info("Successfully sent %d metrics", len(metrics))
