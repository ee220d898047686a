"""Duration histogram driven by monitor configuration."""

import logging
from typing import Any

from runmetrics.core.duration import duration_template, elapsed_seconds, parse_duration
from runmetrics.core.errors import ConfigurationError, PathSyntaxError, RunMetricsError
from runmetrics.core.jsonpath import compile_path
from runmetrics.core.metrics import DURATION_BUCKETS
from runmetrics.core.models import Distribution, DurationSpec, Measure, MetricSpec, View
from runmetrics.core.naming import histogram_metric
from runmetrics.core.ports import StatsRecorderPort
from runmetrics.core.tags import TagBuilder
from runmetrics.core.views import ViewRegistry, default_registry

_logger = logging.getLogger(__name__)


class RunHistogram:
    """Records the seconds between two timestamps of each observed run.

    The view is registered on construction. Recording is fire-and-forget:
    a run whose labels or timestamps cannot be resolved is logged and
    skipped, and a run still missing a timestamp is skipped at INFO level.

    Example:
        ```python
        histogram = RunHistogram(spec, resource="taskrun", monitor="builds")
        histogram.record(recorder, task_run)
        ```
    """

    def __init__(
        self,
        spec: MetricSpec,
        resource: str,
        monitor: str,
        registry: ViewRegistry | None = None,
    ) -> None:
        """Build the measure and view of a histogram and register the view.

        Raises:
            ConfigurationError: If no duration is configured, a label path is
                invalid, or the view conflicts with a registered one.
        """
        if spec.duration is None:
            raise ConfigurationError(f"histogram {spec.name!r} needs a duration")
        try:
            compile_path(duration_template(spec.duration))
        except PathSyntaxError as exc:
            raise ConfigurationError(f"invalid duration of {spec.name!r}: {exc}") from exc
        self.resource = resource
        self.monitor = monitor
        self.spec = spec
        self.duration: DurationSpec = spec.duration
        self.tags = TagBuilder(spec.by)
        self._measure = Measure(
            name=self.metric_name(),
            description=(
                f"histogram samples in seconds for {resource} monitor {monitor}/{spec.name}"
            ),
            unit="s",
        )
        self._view = View(
            name=self._measure.name,
            description=self._measure.description,
            measure=self._measure,
            aggregation=Distribution(DURATION_BUCKETS),
            tag_keys=self.tags.keys,
        )
        (registry if registry is not None else default_registry).register(self._view)

    def metric_name(self) -> str:
        return histogram_metric(self.resource, self.monitor, self.spec.name)

    def metric_type(self) -> str:
        return "histogram"

    def monitor_name(self) -> str:
        return self.monitor

    def view(self) -> View:
        return self._view

    def _context(self) -> dict[str, str]:
        return {"resource": self.resource, "monitor": self.monitor, "metric": self.spec.name}

    def record(
        self,
        recorder: StatsRecorderPort,
        run: Any,
        logger: logging.Logger | None = None,
    ) -> None:
        """Observe the duration of a run."""
        log = logger or _logger
        context = self._context()
        try:
            tags = self.tags.build(run)
        except RunMetricsError as exc:
            log.error(
                "error recording value, invalid tag map",
                extra={**context, "error": str(exc), "error_type": type(exc).__name__},
            )
            return

        try:
            start, end = parse_duration(self.duration, run)
        except RunMetricsError as exc:
            log.error(
                "error parsing duration",
                extra={**context, "error": str(exc), "error_type": type(exc).__name__},
            )
            return
        if start is None or end is None:
            log.info("missing duration timestamp", extra=context)
            return

        recorder.record(tags, [self._measure.m(elapsed_seconds(start, end))], {})

    def clean(
        self,
        recorder: StatsRecorderPort,
        run: Any,
        logger: logging.Logger | None = None,
    ) -> None:
        """Histograms keep their observations when a run is deleted."""
