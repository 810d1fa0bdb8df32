"""BDD step definitions for metrics reporting features."""

import pytest
from pytest_bdd import given, parsers, then, when
from tests.features.metrics.steps_helpers import (
    MetricsScenarioContext,
    find_samples,
)

from pizzatelemetry.core.aggregator import MetricsAggregator


@pytest.fixture
def ctx() -> MetricsScenarioContext:
    """Fresh scenario context for each test."""
    return MetricsScenarioContext()


# === Background Steps ===
@given(parsers.parse('a metrics aggregator for source "{source}"'))
def step_aggregator(ctx: MetricsScenarioContext, source: str) -> None:
    ctx.aggregator = MetricsAggregator(ctx.sink, source=source, system=ctx.host)


@given(parsers.parse("the host reports {cpu:g} percent CPU and {memory:g} percent memory"))
def step_host(ctx: MetricsScenarioContext, cpu: float, memory: float) -> None:
    ctx.host.cpu = cpu
    ctx.host.memory = memory


# === Activity Steps ===
@given(parsers.parse("{n:d} pizzas were sold for {price:g} each"))
@when(parsers.parse("{n:d} pizzas were sold for {price:g} each"))
def step_pizzas_sold(ctx: MetricsScenarioContext, n: int, price: float) -> None:
    for _ in range(n):
        ctx.aggregator.on_pizza_purchase(True, latency_ms=50, price=price)


@given(parsers.parse("user {user_id:d} logged in"))
def step_login(ctx: MetricsScenarioContext, user_id: int) -> None:
    ctx.aggregator.on_user_login(user_id)


@given(parsers.parse("user {user_id:d} logged out"))
def step_logout(ctx: MetricsScenarioContext, user_id: int) -> None:
    ctx.aggregator.on_user_logout(user_id)


@given(parsers.parse("an order failed after {ms:g} ms"))
def step_order_failed(ctx: MetricsScenarioContext, ms: float) -> None:
    ctx.aggregator.on_pizza_purchase(False, latency_ms=ms)


@given(parsers.parse("an order succeeded after {ms:g} ms for {price:g}"))
def step_order_succeeded(ctx: MetricsScenarioContext, ms: float, price: float) -> None:
    ctx.aggregator.on_pizza_purchase(True, latency_ms=ms, price=price)


@given(parsers.parse("{n:d} requests took {ms:g} ms each"))
def step_requests_latency(ctx: MetricsScenarioContext, n: int, ms: float) -> None:
    for _ in range(n):
        ctx.aggregator.endpoint_latencies.append(ms)


@when("metrics are flushed")
def step_flush(ctx: MetricsScenarioContext) -> None:
    ctx.aggregator.flush_and_report()


# === Assertions ===
@then(parsers.re(r'the last flush reports "(?P<name>[^"]+)" as (?P<value>[\d.]+)$'))
def then_reports(ctx: MetricsScenarioContext, name: str, value: str) -> None:
    samples = find_samples(ctx.last_batch, name)
    assert len(samples) == 1, f"expected one {name} sample, got {samples}"
    assert samples[0].value == pytest.approx(float(value))


@then(
    parsers.re(
        r'the last flush reports "(?P<name>[^"]+)" with status "(?P<status>[^"]+)"'
        r" as (?P<value>[\d.]+)$"
    )
)
def then_reports_status(
    ctx: MetricsScenarioContext, name: str, status: str, value: str
) -> None:
    [sample] = find_samples(ctx.last_batch, name, status=status)
    assert sample.value == pytest.approx(float(value))


@then(parsers.parse('the last flush has no "{name}" sample'))
def then_no_sample(ctx: MetricsScenarioContext, name: str) -> None:
    assert find_samples(ctx.last_batch, name) == []


@then(parsers.parse("the endpoint latency window holds {n:d} samples"))
def then_window_size(ctx: MetricsScenarioContext, n: int) -> None:
    assert len(ctx.aggregator.endpoint_latencies) == n


@then(parsers.parse('every sample in the last flush has source "{source}"'))
def then_source(ctx: MetricsScenarioContext, source: str) -> None:
    assert all(s.attributes["source"] == source for s in ctx.last_batch)
