"""Shared test fixtures for all test modules."""

import json

import httpx
import pytest

from pizzatelemetry.adapters.transport.in_memory import (
    InMemoryLogSink,
    InMemoryMetricsSink,
)
from pizzatelemetry.config import LoggingConfig, MetricsConfig
from pizzatelemetry.core.aggregator import MetricsAggregator
from pizzatelemetry.core.logs import TelemetryLogger


class FixedSystemStats:
    """Host readings stub with constant CPU and memory values."""

    def __init__(self, cpu: float = 12.5, memory: float = 40.0) -> None:
        self.cpu = cpu
        self.memory = memory

    def cpu_usage_percent(self) -> float:
        return self.cpu

    def memory_usage_percent(self) -> float:
        return self.memory


class CollectorStub:
    """httpx MockTransport handler recording every request it receives."""

    def __init__(self, status_code: int = 204) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text="collector says hi")

    @property
    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


# === Sink and Component Fixtures ===


@pytest.fixture
def log_sink() -> InMemoryLogSink:
    """Fixture providing an empty in-memory log sink."""
    return InMemoryLogSink()


@pytest.fixture
def metrics_sink() -> InMemoryMetricsSink:
    """Fixture providing an empty in-memory metrics sink."""
    return InMemoryMetricsSink()


@pytest.fixture
def system_stats() -> FixedSystemStats:
    """Fixture providing deterministic host readings."""
    return FixedSystemStats()


@pytest.fixture
def telemetry(log_sink: InMemoryLogSink) -> TelemetryLogger:
    """Fixture providing a TelemetryLogger writing to the in-memory sink."""
    return TelemetryLogger(log_sink, source="jwt-pizza-service-test")


@pytest.fixture
def aggregator(
    metrics_sink: InMemoryMetricsSink, system_stats: FixedSystemStats
) -> MetricsAggregator:
    """Fixture providing a fresh aggregator per test."""
    return MetricsAggregator(metrics_sink, source="jwt-pizza-service-test", system=system_stats)


# === Collector Fixtures ===


@pytest.fixture
def collector() -> CollectorStub:
    """Fixture providing a collector that accepts everything."""
    return CollectorStub()


@pytest.fixture
def collector_client(collector: CollectorStub) -> httpx.AsyncClient:
    """httpx.AsyncClient routed to the collector stub."""
    return httpx.AsyncClient(transport=httpx.MockTransport(collector))


@pytest.fixture
def logging_config() -> LoggingConfig:
    return LoggingConfig(
        url="https://logs.example.test/loki/api/v1/push",
        api_key="log-key",
        user_id="123456",
        source="jwt-pizza-service-test",
    )


@pytest.fixture
def metrics_config() -> MetricsConfig:
    return MetricsConfig(
        url="https://otlp.example.test/otlp/v1/metrics",
        api_key="987654:metric-key",
        source="jwt-pizza-service-test",
    )


# === ASGI Test Fixtures ===


@pytest.fixture
def basic_asgi_app():
    """Basic ASGI app fixture that returns a JSON 200."""
    from pizzatelemetry.adapters.frameworks.asgi import Receive, Scope, Send

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        await send(
            {
                "type": "http.response.start",
                "status": 200,
                "headers": [(b"content-type", b"application/json")],
            }
        )
        await send({"type": "http.response.body", "body": b'{"ok": true}'})

    return app


@pytest.fixture
def asgi_scope():
    """Factory fixture for creating ASGI scope dicts."""
    from pizzatelemetry.adapters.frameworks.asgi import Scope

    def _scope(
        method: str = "GET",
        path: str = "/api/order",
        headers: dict[str, str] | None = None,
        query_string: bytes = b"",
    ) -> Scope:
        return {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string,
            "headers": [
                (k.lower().encode(), v.encode()) for k, v in (headers or {}).items()
            ],
            "client": ("10.0.0.7", 51234),
        }

    return _scope


@pytest.fixture
def asgi_send_capture():
    """Fixture that returns a send callable and a responses list for capture."""

    responses: list[dict[str, object]] = []

    async def send(message: dict[str, object]) -> None:
        """Capture ASGI messages."""
        responses.append(message)

    return send, responses


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            async with asgi_test_client(app) as client:
                response = await client.get("/endpoint")
    """

    def _get_client(app, raise_app_exceptions: bool = True):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(
                app=app, raise_app_exceptions=raise_app_exceptions
            ),
            base_url="http://test",
        )

    return _get_client
