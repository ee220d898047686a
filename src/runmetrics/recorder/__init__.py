"""Metric kinds and their construction from monitor configuration."""

from runmetrics.core.errors import ConfigurationError
from runmetrics.core.models import MonitorSpec
from runmetrics.core.ports import Metric
from runmetrics.core.views import ViewRegistry
from runmetrics.recorder.counter import RunCounter
from runmetrics.recorder.histogram import RunHistogram

METRIC_KINDS: dict[str, type[RunHistogram] | type[RunCounter]] = {
    "histogram": RunHistogram,
    "counter": RunCounter,
}


def build_metrics(
    monitor: MonitorSpec, registry: ViewRegistry | None = None
) -> list[Metric]:
    """Instantiate every metric of a monitor, registering their views.

    Raises:
        ConfigurationError: On an unknown metric type or a view conflict.
    """
    metrics: list[Metric] = []
    for spec in monitor.metrics:
        kind = METRIC_KINDS.get(spec.type)
        if kind is None:
            raise ConfigurationError(f"unknown metric type {spec.type!r} for {spec.name!r}")
        metrics.append(kind(spec, monitor.resource, monitor.name, registry))
    return metrics


__all__ = ["METRIC_KINDS", "RunCounter", "RunHistogram", "build_metrics"]
