"""FastAPI integration for request telemetry and periodic metrics."""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pizzatelemetry.adapters.frameworks.asgi import ASGITelemetryMiddleware
from pizzatelemetry.core.aggregator import MetricsAggregator
from pizzatelemetry.core.logs import TelemetryLogger
from pizzatelemetry.runtime.scheduler import FlushScheduler


def instrument_app(
    app: FastAPI,
    telemetry: TelemetryLogger | None = None,
    metrics: MetricsAggregator | None = None,
    exclude_paths: list[str] | None = None,
) -> None:
    """Wrap a FastAPI app with ASGITelemetryMiddleware.

    Args:
        app: The FastAPI application.
        telemetry: TelemetryLogger receiving request logs (optional).
        metrics: MetricsAggregator receiving request metrics (optional).
        exclude_paths: Path patterns to skip entirely.
    """
    app.add_middleware(
        ASGITelemetryMiddleware,
        telemetry=telemetry,
        metrics=metrics,
        exclude_paths=exclude_paths,
    )


def install_exception_logging(app: FastAPI, telemetry: TelemetryLogger) -> None:
    """Log unhandled exceptions as "exception" events and answer with a JSON 500.

    Request headers are included in the event; sensitive ones such as
    Authorization are redacted by the logger.
    """

    async def handle_exception(request: Request, exc: Exception) -> JSONResponse:
        telemetry.exception_log(
            exc,
            {
                "method": request.method,
                "path": request.url.path,
                "headers": dict(request.headers),
            },
        )
        return JSONResponse(status_code=500, content={"message": str(exc)})

    app.add_exception_handler(Exception, handle_exception)


def telemetry_lifespan(
    scheduler: FlushScheduler, period: float
) -> Callable[[FastAPI], Any]:
    """Create a lifespan that runs the metrics scheduler while the app is up.

    Usage:
        app = FastAPI(lifespan=telemetry_lifespan(scheduler, period=10))
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        scheduler.start(period)
        try:
            yield
        finally:
            scheduler.stop()

    return lifespan
