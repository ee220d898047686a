"""Run counter driven by monitor configuration."""

import logging
from typing import Any

from runmetrics.core.errors import RunMetricsError
from runmetrics.core.models import Count, Measure, MetricSpec, View
from runmetrics.core.naming import counter_metric
from runmetrics.core.ports import StatsRecorderPort
from runmetrics.core.tags import TagBuilder
from runmetrics.core.views import ViewRegistry, default_registry

_logger = logging.getLogger(__name__)


class RunCounter:
    """Counts observed runs per label set."""

    def __init__(
        self,
        spec: MetricSpec,
        resource: str,
        monitor: str,
        registry: ViewRegistry | None = None,
    ) -> None:
        self.resource = resource
        self.monitor = monitor
        self.spec = spec
        self.tags = TagBuilder(spec.by)
        self._measure = Measure(
            name=self.metric_name(),
            description=f"count of {resource} runs for monitor {monitor}/{spec.name}",
        )
        self._view = View(
            name=self._measure.name,
            description=self._measure.description,
            measure=self._measure,
            aggregation=Count(),
            tag_keys=self.tags.keys,
        )
        (registry if registry is not None else default_registry).register(self._view)

    def metric_name(self) -> str:
        return counter_metric(self.resource, self.monitor, self.spec.name)

    def metric_type(self) -> str:
        return "counter"

    def monitor_name(self) -> str:
        return self.monitor

    def view(self) -> View:
        return self._view

    def record(
        self,
        recorder: StatsRecorderPort,
        run: Any,
        logger: logging.Logger | None = None,
    ) -> None:
        log = logger or _logger
        try:
            tags = self.tags.build(run)
        except RunMetricsError as exc:
            log.error(
                "error recording value, invalid tag map",
                extra={
                    "resource": self.resource,
                    "monitor": self.monitor,
                    "metric": self.spec.name,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return
        recorder.record(tags, [self._measure.m(1)], {})

    def clean(
        self,
        recorder: StatsRecorderPort,
        run: Any,
        logger: logging.Logger | None = None,
    ) -> None:
        pass
