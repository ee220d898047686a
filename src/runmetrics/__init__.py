"""Declarative duration histograms and counters for pipeline run resources."""

from runmetrics.adapters.logging import LogStorageHandler, configure_logging
from runmetrics.adapters.logging_context import log_context
from runmetrics.adapters.storage.in_memory import InMemoryLogStorage, InMemoryStatsRecorder
from runmetrics.config import load_monitor, load_monitors, monitor_from_dict
from runmetrics.core.duration import parse_duration
from runmetrics.core.errors import (
    CardinalityError,
    ConfigurationError,
    PathError,
    PathNotFoundError,
    PathSyntaxError,
    RunMetricsError,
    TagResolutionError,
    TimestampTypeError,
    ViewConflictError,
)
from runmetrics.core.jsonpath import JSONPath
from runmetrics.core.models import DurationSpec, MetricSpec, MonitorSpec
from runmetrics.core.ports import Metric, StatsRecorderPort
from runmetrics.core.timestamps import Time, must_parse_rfc3339, parse_rfc3339
from runmetrics.core.views import ViewRegistry, default_registry
from runmetrics.recorder import RunCounter, RunHistogram, build_metrics

__all__ = [
    "CardinalityError",
    "ConfigurationError",
    "DurationSpec",
    "InMemoryLogStorage",
    "InMemoryStatsRecorder",
    "JSONPath",
    "LogStorageHandler",
    "Metric",
    "MetricSpec",
    "MonitorSpec",
    "PathError",
    "PathNotFoundError",
    "PathSyntaxError",
    "RunCounter",
    "RunHistogram",
    "RunMetricsError",
    "StatsRecorderPort",
    "TagResolutionError",
    "Time",
    "TimestampTypeError",
    "ViewConflictError",
    "ViewRegistry",
    "build_metrics",
    "configure_logging",
    "default_registry",
    "load_monitor",
    "load_monitors",
    "log_context",
    "monitor_from_dict",
    "must_parse_rfc3339",
    "parse_duration",
    "parse_rfc3339",
]
