"""Monitor configuration loading.

Monitors are YAML documents shaped like the Kubernetes custom resources
that declare them:

    apiVersion: metrics.tekton.dev/v1alpha1
    kind: TaskMonitor
    metadata:
      name: build-times
    spec:
      metrics:
        - name: duration
          type: histogram
          by: [".metadata.namespace"]
          duration:
            from: .status.startTime
            to: .status.completionTime

Documents are validated with pydantic models and then mapped onto the
frozen MonitorSpec / MetricSpec used by the rest of the package.
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from runmetrics.core.errors import ConfigurationError, PathSyntaxError
from runmetrics.core.jsonpath import compile_path
from runmetrics.core.models import DurationSpec, MetricSpec, MonitorSpec

logger = logging.getLogger(__name__)

MONITOR_KINDS = {
    "TaskMonitor": "taskrun",
    "PipelineMonitor": "pipelinerun",
}


def _check_path(path: str) -> str:
    if not path.strip():
        raise ValueError("path must be a non-empty string")
    try:
        compile_path(f"{{{path}}}")
    except PathSyntaxError as exc:
        raise ValueError(str(exc)) from exc
    return path


class DurationConfig(BaseModel):
    """The ``duration`` block of a metric."""

    model_config = ConfigDict(extra="forbid")

    from_path: str = Field(alias="from")
    to_path: str = Field(alias="to")

    @field_validator("from_path", "to_path")
    @classmethod
    def _valid_path(cls, value: str) -> str:
        return _check_path(value)


class MetricConfig(BaseModel):
    """One entry of ``spec.metrics``."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    type: Literal["histogram", "counter"] = "histogram"
    by: list[str] = Field(default_factory=list)
    duration: DurationConfig | None = None

    @field_validator("by", mode="before")
    @classmethod
    def _by_default(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("by")
    @classmethod
    def _valid_by(cls, value: list[str]) -> list[str]:
        return [_check_path(path) for path in value]

    @model_validator(mode="after")
    def _histogram_needs_duration(self) -> "MetricConfig":
        if self.type == "histogram" and self.duration is None:
            raise ValueError("histogram needs a 'duration'")
        return self

    def to_spec(self) -> MetricSpec:
        duration = None
        if self.duration is not None:
            duration = DurationSpec(self.duration.from_path, self.duration.to_path)
        return MetricSpec(name=self.name, type=self.type, by=tuple(self.by), duration=duration)


class MonitorMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)


class MonitorBody(BaseModel):
    """The ``spec`` of a monitor document."""

    model_config = ConfigDict(extra="allow")

    metrics: list[MetricConfig] = Field(default_factory=list)

    @field_validator("metrics", mode="before")
    @classmethod
    def _metrics_default(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="after")
    def _unique_names(self) -> "MonitorBody":
        seen: set[str] = set()
        for metric in self.metrics:
            if metric.name in seen:
                raise ValueError(f"duplicate metric {metric.name!r}")
            seen.add(metric.name)
        return self


class MonitorDocument(BaseModel):
    """A TaskMonitor or PipelineMonitor resource."""

    model_config = ConfigDict(extra="allow")

    api_version: str | None = Field(default=None, alias="apiVersion")
    kind: Literal["TaskMonitor", "PipelineMonitor"]
    metadata: MonitorMetadata
    spec: MonitorBody = Field(default_factory=MonitorBody)

    @field_validator("spec", mode="before")
    @classmethod
    def _spec_default(cls, value: Any) -> Any:
        return {} if value is None else value

    def to_spec(self) -> MonitorSpec:
        return MonitorSpec(
            name=self.metadata.name,
            resource=MONITOR_KINDS[self.kind],
            metrics=tuple(metric.to_spec() for metric in self.spec.metrics),
        )


def _describe(where: str, exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}" if location else error["msg"])
    return f"{where}: " + "; ".join(problems)


def metric_from_dict(data: Any, where: str = "metric") -> MetricSpec:
    """Build a MetricSpec from its configuration mapping.

    Raises:
        ConfigurationError: If the mapping is invalid.
    """
    try:
        return MetricConfig.model_validate(data).to_spec()
    except ValidationError as exc:
        raise ConfigurationError(_describe(where, exc)) from exc


def monitor_from_dict(data: Any) -> MonitorSpec:
    """Build a MonitorSpec from a parsed monitor document.

    Raises:
        ConfigurationError: If the document is invalid.
    """
    try:
        document = MonitorDocument.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(_describe("monitor", exc)) from exc
    return document.to_spec()


def load_monitor(path: str | Path) -> MonitorSpec:
    """Load a single monitor document from a YAML file."""
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    monitor = monitor_from_dict(data)
    logger.info(
        "loaded monitor",
        extra={"monitor": monitor.name, "resource": monitor.resource, "path": str(path)},
    )
    return monitor


def load_monitors(paths: Iterable[str | Path]) -> list[MonitorSpec]:
    """Load every monitor document of the given YAML files.

    Files may hold several documents separated by ``---``.
    """
    monitors: list[MonitorSpec] = []
    for path in paths:
        with open(path, encoding="utf-8") as fh:
            documents = [doc for doc in yaml.safe_load_all(fh) if doc is not None]
        monitors.extend(monitor_from_dict(doc) for doc in documents)
    names = [(m.resource, m.name) for m in monitors]
    if len(set(names)) != len(names):
        raise ConfigurationError("duplicate monitor names across configuration files")
    return monitors
