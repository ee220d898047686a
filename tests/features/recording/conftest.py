"""Step definitions for the run duration recording feature."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest
from pytest_bdd import given, parsers, then, when

from runmetrics.adapters.storage.in_memory import (
    DistributionRow,
    InMemoryLogStorage,
    InMemoryStatsRecorder,
)
from runmetrics.core.models import DurationSpec, MetricSpec
from runmetrics.core.resources import TaskRun, TaskRunStatus
from runmetrics.core.timestamps import Time, parse_rfc3339
from runmetrics.core.views import ViewRegistry
from runmetrics.recorder.histogram import RunHistogram


@dataclass
class RecordingContext:
    """Mutable state shared by the steps of one scenario."""

    monitor: str = ""
    metric: str = ""
    duration: DurationSpec | None = None
    by: list[str] = field(default_factory=list)
    run: TaskRun = field(default_factory=TaskRun)
    histogram: RunHistogram | None = None
    parsed: Time | None = None
    parse_error: Exception | None = None


@pytest.fixture
def ctx() -> RecordingContext:
    return RecordingContext()


# === Background ===
@given(parsers.parse('a task monitor "{monitor}" with a "{metric}" histogram'))
def step_monitor(ctx: RecordingContext, monitor: str, metric: str) -> None:
    ctx.monitor, ctx.metric = monitor, metric


@given(parsers.parse('the histogram measures from "{start}" to "{end}"'))
def step_duration(ctx: RecordingContext, start: str, end: str) -> None:
    ctx.duration = DurationSpec(from_path=start, to_path=end)


@given(parsers.parse('the histogram is labelled by "{path}"'))
def step_label(ctx: RecordingContext, path: str) -> None:
    ctx.by.append(path)


# === Runs ===
@given(parsers.parse('a task run started at "{value}"'))
def step_started(ctx: RecordingContext, value: str) -> None:
    ctx.run = TaskRun(status=TaskRunStatus(start_time=parse_rfc3339(value)))


@given(parsers.parse('the task run completed at "{value}"'))
def step_completed(ctx: RecordingContext, value: str) -> None:
    ctx.run.status.completion_time = parse_rfc3339(value)


@given("the task run has not completed")
def step_not_completed(ctx: RecordingContext) -> None:
    ctx.run.status.completion_time = None


@given("the task run has no pod")
def step_no_pod(ctx: RecordingContext) -> None:
    ctx.run.status.pod_name = None


@when("the run is recorded")
def step_record(
    ctx: RecordingContext,
    registry: ViewRegistry,
    recorder: InMemoryStatsRecorder,
    log_storage: InMemoryLogStorage,
) -> None:
    spec = MetricSpec(name=ctx.metric, by=tuple(ctx.by), duration=ctx.duration)
    ctx.histogram = RunHistogram(spec, "taskrun", ctx.monitor, registry)
    ctx.histogram.record(recorder, ctx.run)


@then(parsers.parse("{count:d} observation of {seconds:f} seconds is aggregated"))
def step_observed(
    ctx: RecordingContext, recorder: InMemoryStatsRecorder, count: int, seconds: float
) -> None:
    assert ctx.histogram is not None
    (row,) = recorder.rows(ctx.histogram.metric_name()).values()
    assert isinstance(row, DistributionRow)
    assert row.count == count
    assert row.total == seconds


@then("no observation is aggregated")
def step_nothing(ctx: RecordingContext, recorder: InMemoryStatsRecorder) -> None:
    assert ctx.histogram is not None
    assert recorder.rows(ctx.histogram.metric_name()) == {}


@then(parsers.parse('an {level} entry "{message}" is logged'))
def step_logged(log_storage: InMemoryLogStorage, level: str, message: str) -> None:
    entries = [(e.level, e.message) for e in log_storage.read() if e.level != "DEBUG"]
    assert entries == [(level, message)]


# === RFC 3339 ===
@when(parsers.parse('"{value}" is parsed as an RFC 3339 timestamp'))
def step_parse(ctx: RecordingContext, value: str) -> None:
    try:
        ctx.parsed = parse_rfc3339(value)
    except ValueError as exc:
        ctx.parse_error = exc


@then(parsers.parse("parsing yields {expected} UTC"))
def step_parsed(ctx: RecordingContext, expected: str) -> None:
    assert ctx.parse_error is None
    assert ctx.parsed == Time(datetime.fromisoformat(expected).replace(tzinfo=timezone.utc))


@then("parsing fails")
def step_parse_failed(ctx: RecordingContext) -> None:
    assert ctx.parsed is None
    assert isinstance(ctx.parse_error, ValueError)
