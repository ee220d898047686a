"""Deterministic metric names.

Each component is percent-encoded before joining, so names stay readable
for Kubernetes-style identifiers while distinct (resource, monitor, metric)
tuples can never produce the same name.
"""

from urllib.parse import quote


def _component(value: str) -> str:
    return quote(value, safe="")


def metric_name(kind: str, resource: str, monitor: str, metric: str) -> str:
    """Return the unique name of a metric of the given kind."""
    parts = (resource, monitor, metric, kind)
    return "/".join(_component(part) for part in parts)


def histogram_metric(resource: str, monitor: str, metric: str) -> str:
    return metric_name("histogram", resource, monitor, metric)


def counter_metric(resource: str, monitor: str, metric: str) -> str:
    return metric_name("counter", resource, monitor, metric)
