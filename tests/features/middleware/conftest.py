"""BDD step definitions for request logging middleware features."""

import pytest
from pytest_bdd import given, parsers, then, when
from tests.features.middleware.steps_helpers import (
    MiddlewareScenarioContext,
    run_async,
    simulate_request,
)


@pytest.fixture
def ctx() -> MiddlewareScenarioContext:
    """Fresh scenario context for each test."""
    return MiddlewareScenarioContext()


def _http_events(ctx: MiddlewareScenarioContext):
    return [e for e in ctx.log_sink.events if e.type == "http"]


# === Background Steps ===
@given("an in-memory log sink")
def step_log_sink(ctx: MiddlewareScenarioContext) -> None:
    ctx.log_sink.events.clear()


@given(parsers.parse("an app that answers with status {status:d} and body '{body}'"))
def step_app(ctx: MiddlewareScenarioContext, status: int, body: str) -> None:
    ctx.status = status
    ctx.body = body.encode()


@given(parsers.parse('the middleware excludes "{path}"'))
def step_exclude(ctx: MiddlewareScenarioContext, path: str) -> None:
    ctx.exclude_paths.append(path)


# === Request Steps ===
@when(parsers.parse('a {method} request is made to "{path}" with body \'{body}\''))
def when_request_with_body(
    ctx: MiddlewareScenarioContext, method: str, path: str, body: str
) -> None:
    run_async(simulate_request(ctx, method=method, path=path, body=body.encode()))


@when(parsers.re(r'a (?P<method>[A-Z]+) request is made to "(?P<path>[^"]+)"$'))
def when_request(ctx: MiddlewareScenarioContext, method: str, path: str) -> None:
    run_async(simulate_request(ctx, method=method, path=path))


# === Assertions ===
@then(parsers.re(r'(?P<n>\d+) log events? of type "http" (is|are) recorded'))
def then_http_log_count(ctx: MiddlewareScenarioContext, n: str) -> None:
    assert len(_http_events(ctx)) == int(n)


@then(parsers.parse('the log has level "{level}"'))
def then_level(ctx: MiddlewareScenarioContext, level: str) -> None:
    [event] = _http_events(ctx)
    assert event.level == level
    assert event.labels["level"] == level


@then(parsers.parse('the log field "{name}" is "{value}"'))
def then_field(ctx: MiddlewareScenarioContext, name: str, value: str) -> None:
    [event] = _http_events(ctx)
    assert event.payload[name] == value


@then(parsers.parse('the logged request body field "{name}" is "{value}"'))
def then_request_field(ctx: MiddlewareScenarioContext, name: str, value: str) -> None:
    [event] = _http_events(ctx)
    assert event.payload["req"][name] == value
