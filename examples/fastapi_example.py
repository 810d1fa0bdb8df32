"""Example pizza service instrumented with pizzatelemetry.

Run with:
    uvicorn examples.fastapi_example:app --reload

Configuration is read from the environment (or a .env file):
    LOGGING_URL, LOGGING_API_KEY, LOGGING_USER_ID, LOGGING_SOURCE
    METRICS_URL, METRICS_API_KEY, METRICS_SOURCE, METRICS_FLUSH_INTERVAL

Endpoints:
    PUT    /api/auth         - log in (any password except "wrong" succeeds)
    DELETE /api/auth         - log out
    GET    /api/order/menu   - the menu
    POST   /api/order        - order pizzas from the simulated factory
    GET    /api/boom         - unhandled error, logged as an "exception" event

Instrumentation:
    Every request is logged and counted by the ASGI middleware. Business
    events (logins, orders) are reported through the aggregator hooks, and
    metrics are flushed on the configured interval while the app runs.
"""

import asyncio
import random
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from pizzatelemetry import TelemetryRuntime, get_logger, load_config
from pizzatelemetry.adapters.frameworks.fastapi import (
    install_exception_logging,
    instrument_app,
)

logger = get_logger(__name__)

runtime = TelemetryRuntime.from_config(load_config())

MENU = [
    {"id": 1, "title": "Veggie", "description": "A garden of delight", "price": 0.0038},
    {"id": 2, "title": "Pepperoni", "description": "Spicy treat", "price": 0.0042},
]


class Credentials(BaseModel):
    email: str
    password: str


class OrderItem(BaseModel):
    menuId: int
    description: str
    price: float


class Order(BaseModel):
    franchiseId: int
    storeId: int
    items: list[OrderItem]


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    await runtime.start()
    try:
        yield
    finally:
        await runtime.stop()


app = FastAPI(title="Pizza Service", lifespan=lifespan)
instrument_app(app, runtime.telemetry, runtime.metrics, exclude_paths=["/docs*"])
install_exception_logging(app, runtime.telemetry)


@app.put("/api/auth")
async def login(credentials: Credentials) -> dict[str, object]:
    started = time.perf_counter()
    await asyncio.sleep(0.005)
    runtime.telemetry.db_log(
        "SELECT * FROM user WHERE email=?",
        [credentials.email],
        (time.perf_counter() - started) * 1000,
    )
    if credentials.password == "wrong":
        runtime.metrics.on_auth_attempt(False)
        raise HTTPException(status_code=404, detail="unknown user")
    runtime.metrics.on_auth_attempt(True)
    runtime.metrics.on_user_login(credentials.email)
    return {"user": {"email": credentials.email}, "token": "demo.jwt.token"}


@app.delete("/api/auth")
async def logout(email: str = "") -> dict[str, str]:
    runtime.metrics.on_user_logout(email)
    return {"message": "logout successful"}


@app.get("/api/order/menu")
async def menu() -> list[dict[str, object]]:
    return MENU


@app.post("/api/order")
async def create_order(order: Order) -> dict[str, object]:
    """Simulate a call to the pizza factory and report the outcome."""
    started = time.perf_counter()
    await asyncio.sleep(random.uniform(0.01, 0.05))
    latency_ms = (time.perf_counter() - started) * 1000
    request_body = order.model_dump()

    if random.random() < 0.1:
        runtime.telemetry.factory_log(request_body, {"message": "oven on fire"}, 500)
        runtime.metrics.on_pizza_purchase(False, latency_ms=latency_ms)
        raise HTTPException(status_code=500, detail="Failed to fulfill order at factory")

    response_body = {"jwt": "factory.signed.order", "reportUrl": "https://factory.example"}
    runtime.telemetry.factory_log(request_body, response_body, 200)
    price = sum(item.price for item in order.items)
    runtime.metrics.on_pizza_purchase(True, latency_ms=latency_ms, price=price)
    logger.info("Order for %d pizzas fulfilled in %.1fms", len(order.items), latency_ms)
    return {"order": request_body, **response_body}


@app.get("/api/boom")
async def boom() -> dict[str, str]:
    raise RuntimeError("Intentional error for demonstration")
