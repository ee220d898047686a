"""Typed models of the pipeline run resources metrics are extracted from.

Only the fields monitors commonly reference are modelled. Field metadata
declares the Kubernetes JSON name, which is what path expressions use:

    {.status.completionTime}  ->  TaskRun.status.completion_time
"""

from dataclasses import dataclass, field
from typing import Any

from runmetrics.core.timestamps import Time, parse_rfc3339


def _json(name: str) -> dict[str, str]:
    return {"json": name}


def _time(data: dict[str, Any], key: str) -> Time | None:
    value = data.get(key)
    return parse_rfc3339(value) if value else None


@dataclass
class ObjectMeta:
    name: str = ""
    namespace: str = ""
    uid: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    creation_timestamp: Time | None = field(
        default=None, metadata=_json("creationTimestamp")
    )
    deletion_timestamp: Time | None = field(
        default=None, metadata=_json("deletionTimestamp")
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectMeta":
        return cls(
            name=data.get("name", ""),
            namespace=data.get("namespace", ""),
            uid=data.get("uid", ""),
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
            creation_timestamp=_time(data, "creationTimestamp"),
            deletion_timestamp=_time(data, "deletionTimestamp"),
        )


@dataclass
class Condition:
    """A status condition, e.g. type "Succeeded" with status "True"."""

    type: str
    status: str
    reason: str = ""
    message: str = ""
    last_transition_time: Time | None = field(
        default=None, metadata=_json("lastTransitionTime")
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Condition":
        return cls(
            type=data["type"],
            status=data["status"],
            reason=data.get("reason", ""),
            message=data.get("message", ""),
            last_transition_time=_time(data, "lastTransitionTime"),
        )


@dataclass
class TaskRef:
    name: str = ""
    kind: str = "Task"


@dataclass
class TaskRunSpec:
    task_ref: TaskRef | None = field(default=None, metadata=_json("taskRef"))
    service_account_name: str = field(default="", metadata=_json("serviceAccountName"))
    timeout: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TaskRunSpec":
        ref = data.get("taskRef")
        return cls(
            task_ref=TaskRef(ref.get("name", ""), ref.get("kind", "Task")) if ref else None,
            service_account_name=data.get("serviceAccountName", ""),
            timeout=data.get("timeout", ""),
        )


@dataclass
class TaskRunStatus:
    conditions: list[Condition] = field(default_factory=list)
    pod_name: str | None = field(default=None, metadata=_json("podName"))
    start_time: Time | None = field(default=None, metadata=_json("startTime"))
    completion_time: Time | None = field(default=None, metadata=_json("completionTime"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TaskRunStatus":
        return cls(
            conditions=[Condition.from_dict(c) for c in data.get("conditions") or []],
            pod_name=data.get("podName"),
            start_time=_time(data, "startTime"),
            completion_time=_time(data, "completionTime"),
        )


@dataclass
class TaskRun:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: TaskRunSpec = field(default_factory=TaskRunSpec)
    status: TaskRunStatus = field(default_factory=TaskRunStatus)
    kind: str = "TaskRun"
    api_version: str = field(default="tekton.dev/v1beta1", metadata=_json("apiVersion"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TaskRun":
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata") or {}),
            spec=TaskRunSpec.from_dict(data.get("spec") or {}),
            status=TaskRunStatus.from_dict(data.get("status") or {}),
            kind=data.get("kind", "TaskRun"),
            api_version=data.get("apiVersion", "tekton.dev/v1beta1"),
        )


@dataclass
class PipelineRef:
    name: str = ""


@dataclass
class PipelineRunSpec:
    pipeline_ref: PipelineRef | None = field(default=None, metadata=_json("pipelineRef"))
    service_account_name: str = field(default="", metadata=_json("serviceAccountName"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PipelineRunSpec":
        ref = data.get("pipelineRef")
        return cls(
            pipeline_ref=PipelineRef(ref.get("name", "")) if ref else None,
            service_account_name=data.get("serviceAccountName", ""),
        )


@dataclass
class PipelineRunStatus:
    conditions: list[Condition] = field(default_factory=list)
    start_time: Time | None = field(default=None, metadata=_json("startTime"))
    completion_time: Time | None = field(default=None, metadata=_json("completionTime"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PipelineRunStatus":
        return cls(
            conditions=[Condition.from_dict(c) for c in data.get("conditions") or []],
            start_time=_time(data, "startTime"),
            completion_time=_time(data, "completionTime"),
        )


@dataclass
class PipelineRun:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: PipelineRunSpec = field(default_factory=PipelineRunSpec)
    status: PipelineRunStatus = field(default_factory=PipelineRunStatus)
    kind: str = "PipelineRun"
    api_version: str = field(default="tekton.dev/v1beta1", metadata=_json("apiVersion"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PipelineRun":
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata") or {}),
            spec=PipelineRunSpec.from_dict(data.get("spec") or {}),
            status=PipelineRunStatus.from_dict(data.get("status") or {}),
            kind=data.get("kind", "PipelineRun"),
            api_version=data.get("apiVersion", "tekton.dev/v1beta1"),
        )
