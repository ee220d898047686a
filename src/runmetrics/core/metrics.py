"""Metric helper functions for rendering aggregates as MetricSample objects."""

import time
from collections.abc import Sequence

from runmetrics.core.models import MetricSample

# Upper bounds in seconds, from sub-second steps to multi-hour runs.
DURATION_BUCKETS = (
    0.25,
    0.5,
    1,
    2.5,
    5,
    10,
    25,
    50,
    100,
    250,
    500,
    1000,
    2500,
    5000,
    10000,
)


def counter(
    name: str,
    value: float,
    labels: dict[str, str] | None = None,
) -> MetricSample:
    """Create a counter metric sample.

    Args:
        name: Metric name (e.g., "taskrun/builds/runs/counter")
        value: Current total
        labels: Optional dimension labels

    Returns:
        MetricSample with current timestamp
    """
    return MetricSample(
        name=name,
        timestamp=time.time(),
        value=value,
        labels=labels or {},
    )


def histogram(
    name: str,
    bounds: Sequence[float],
    bucket_counts: Sequence[int],
    total: float,
    count: int,
    labels: dict[str, str] | None = None,
) -> list[MetricSample]:
    """Create histogram metric samples for an aggregated distribution.

    Args:
        name: Metric name (e.g., "taskrun/builds/duration/histogram")
        bounds: Upper bucket boundaries, ascending
        bucket_counts: Non-cumulative count per bound, plus one overflow count
        total: Sum of all observed values
        count: Number of observations
        labels: Optional dimension labels

    Returns:
        List of MetricSample objects (bucket samples + sum + count)
    """
    timestamp = time.time()
    base_labels = labels or {}

    samples: list[MetricSample] = []

    # Bucket samples carry cumulative counts
    cumulative = 0
    for boundary, bucket_count in zip(bounds, bucket_counts):
        cumulative += bucket_count
        samples.append(
            MetricSample(
                name=f"{name}_bucket",
                timestamp=timestamp,
                value=float(cumulative),
                labels={**base_labels, "le": str(boundary)},
            )
        )

    # +Inf bucket always holds every observation
    samples.append(
        MetricSample(
            name=f"{name}_bucket",
            timestamp=timestamp,
            value=float(count),
            labels={**base_labels, "le": "+Inf"},
        )
    )

    samples.append(
        MetricSample(
            name=f"{name}_sum",
            timestamp=timestamp,
            value=total,
            labels=base_labels,
        )
    )

    samples.append(
        MetricSample(
            name=f"{name}_count",
            timestamp=timestamp,
            value=float(count),
            labels=base_labels,
        )
    )

    return samples
