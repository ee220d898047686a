"""Shared test fixtures for all test modules."""

import logging
from collections.abc import Callable, Generator
from typing import Any

import pytest

from runmetrics.adapters.logging import LogStorageHandler
from runmetrics.adapters.logging_context import clear_log_context
from runmetrics.adapters.storage.in_memory import InMemoryLogStorage, InMemoryStatsRecorder
from runmetrics.core.resources import (
    Condition,
    ObjectMeta,
    TaskRef,
    TaskRun,
    TaskRunSpec,
    TaskRunStatus,
)
from runmetrics.core.timestamps import Time, must_parse_rfc3339
from runmetrics.core.views import ViewRegistry


@pytest.fixture
def registry() -> ViewRegistry:
    """Provide an empty view registry isolated from the process-wide one."""
    return ViewRegistry()


@pytest.fixture
def recorder(registry: ViewRegistry) -> InMemoryStatsRecorder:
    """Provide an in-memory recorder bound to the test registry."""
    return InMemoryStatsRecorder(registry)


@pytest.fixture
def log_storage() -> Generator[InMemoryLogStorage, None, None]:
    """Capture everything logged under the runmetrics logger."""
    storage = InMemoryLogStorage()
    handler = LogStorageHandler(storage)
    logger = logging.getLogger("runmetrics")
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    clear_log_context()
    yield storage
    logger.removeHandler(handler)
    logger.setLevel(previous)
    clear_log_context()


@pytest.fixture
def make_task_run() -> Callable[..., TaskRun]:
    """Factory fixture for TaskRun records.

    Timestamps are given as RFC 3339 strings, or None to leave them unset.
    """

    def _make(
        start: str | None = "2024-01-01T00:00:00Z",
        end: str | None = "2024-01-01T00:01:30Z",
        name: str = "build-abc12",
        namespace: str = "ci",
        task: str = "build",
        pod_name: str | None = "build-abc12-pod",
        succeeded: str = "True",
        **labels: str,
    ) -> TaskRun:
        def ts(value: str | None) -> Time | None:
            return must_parse_rfc3339(value) if value else None

        return TaskRun(
            metadata=ObjectMeta(name=name, namespace=namespace, labels=dict(labels)),
            spec=TaskRunSpec(task_ref=TaskRef(name=task)),
            status=TaskRunStatus(
                conditions=[Condition(type="Succeeded", status=succeeded, reason="Done")],
                pod_name=pod_name,
                start_time=ts(start),
                completion_time=ts(end),
            ),
        )

    return _make


@pytest.fixture
def task_run_dict() -> dict[str, Any]:
    """A TaskRun as returned by the Kubernetes API."""
    return {
        "apiVersion": "tekton.dev/v1beta1",
        "kind": "TaskRun",
        "metadata": {
            "name": "build-abc12",
            "namespace": "ci",
            "labels": {"app.kubernetes.io/name": "builder"},
        },
        "spec": {"taskRef": {"name": "build"}, "serviceAccountName": "default"},
        "status": {
            "podName": "build-abc12-pod",
            "startTime": "2024-01-01T00:00:00Z",
            "completionTime": "2024-01-01T00:01:30Z",
            "conditions": [
                {"type": "Succeeded", "status": "True", "reason": "Succeeded"}
            ],
        },
    }
