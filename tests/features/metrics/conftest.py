"""Step definitions for metrics_aggregation.feature."""

from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from ranchwatch.core.config import LoggerConfig, Mode
from ranchwatch.core.logger import CattleLogger
from ranchwatch.core.models import LogLevel, LogRecord, utc_timestamp


@dataclass
class MetricsScenarioContext:
    """Shared state between steps in a metrics scenario."""

    logger: CattleLogger = field(default_factory=CattleLogger)


def _record(**fields) -> LogRecord:
    defaults = {
        "timestamp": utc_timestamp(),
        "level": LogLevel.INFO,
        "event_type": "http_response",
        "message": "scenario",
    }
    defaults.update(fields)
    return LogRecord(**defaults)


@pytest.fixture
def ctx() -> MetricsScenarioContext:
    """Fresh scenario context for each test."""
    return MetricsScenarioContext()


@given("a production cattle logger")
def given_production_logger(ctx: MetricsScenarioContext) -> None:
    ctx.logger = CattleLogger(LoggerConfig(mode=Mode.PRODUCTION))


@when(parsers.parse('a "{level}" record is logged for path "{path}"'))
def when_level_record(ctx: MetricsScenarioContext, level: str, path: str) -> None:
    ctx.logger.log(_record(level=LogLevel(level), method="GET", path=path))


@when(parsers.parse('a record taking {ms:d}ms is logged for path "{path}"'))
def when_timed_record(ctx: MetricsScenarioContext, ms: int, path: str) -> None:
    ctx.logger.log(_record(method="GET", path=path, response_time=ms))


@when(parsers.parse('user "{user_id}" logs an event'))
def when_user_event(ctx: MetricsScenarioContext, user_id: str) -> None:
    ctx.logger.log(_record(user_id=user_id, event_type="cattle_updated"))


@when("the metrics are reset")
def when_metrics_reset(ctx: MetricsScenarioContext) -> None:
    ctx.logger.reset_metrics()


@then(parsers.parse("the request count should be {n:d}"))
def then_request_count(ctx: MetricsScenarioContext, n: int) -> None:
    assert ctx.logger.get_metrics().request_count == n


@then(parsers.parse("the error count should be {n:d}"))
def then_error_count(ctx: MetricsScenarioContext, n: int) -> None:
    assert ctx.logger.get_metrics().error_count == n


@then(parsers.parse("{n:d} critical alert should have been sent"))
def then_alerts_sent(ctx: MetricsScenarioContext, n: int) -> None:
    assert ctx.logger.notifier.alerts_sent == n


@then(parsers.parse('the endpoint "{path}" should have {n:d} hits'))
def then_endpoint_hits(ctx: MetricsScenarioContext, path: str, n: int) -> None:
    assert ctx.logger.get_metrics().popular_endpoints[path] == n


@then(parsers.parse("the average response time should be {value:g}"))
def then_average(ctx: MetricsScenarioContext, value: float) -> None:
    assert ctx.logger.get_metrics().average_response_time == pytest.approx(value)


@then(parsers.parse('the slow queries should be "{paths}"'))
def then_slow_queries(ctx: MetricsScenarioContext, paths: str) -> None:
    expected = paths.split(", ")
    slow = ctx.logger.get_metrics().slow_queries
    assert [q.query for q in slow] == expected


@then(parsers.parse("there should be {n:d} active users"))
def then_active_users(ctx: MetricsScenarioContext, n: int) -> None:
    assert len(ctx.logger.get_metrics().active_users) == n


@then("there should be no slow queries")
def then_no_slow_queries(ctx: MetricsScenarioContext) -> None:
    assert ctx.logger.get_metrics().slow_queries == []
