"""In-memory storage adapters for logs and aggregated metrics."""

import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from runmetrics.core import metrics
from runmetrics.core.models import Count, Distribution, LogEntry, Measurement, MetricSample, View
from runmetrics.core.views import ViewRegistry, default_registry


class InMemoryLogStorage:
    """In-memory implementation of LogStoragePort.

    Stores log entries in a list. Suitable for testing and
    low-volume applications where persistence is not required.
    """

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []
        self._lock = threading.Lock()

    def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        with self._lock:
            self._entries.append(entry)

    def read(self, since: float = 0) -> Iterable[LogEntry]:
        """Read log entries since the given timestamp.

        Returns entries with timestamp > since, ordered by timestamp ascending.
        """
        with self._lock:
            filtered = [e for e in self._entries if e.timestamp > since]
        return sorted(filtered, key=lambda e: e.timestamp)


@dataclass
class DistributionRow:
    """Aggregated observations of one tag set of a distribution view.

    bucket_counts has one entry per bound plus a final overflow entry.
    """

    bucket_counts: list[int]
    total: float = 0.0
    count: int = 0

    def add(self, bounds: Sequence[float], value: float) -> None:
        index = next((i for i, bound in enumerate(bounds) if value <= bound), len(bounds))
        self.bucket_counts[index] += 1
        self.total += value
        self.count += 1


@dataclass
class CountRow:
    count: int = 0

    def add(self, bounds: Sequence[float], value: float) -> None:
        self.count += 1


Row = DistributionRow | CountRow


@dataclass
class _ViewData:
    view: View
    rows: dict[tuple[str, ...], Row] = field(default_factory=dict)


class InMemoryStatsRecorder:
    """In-memory implementation of StatsRecorderPort and MetricsStoragePort.

    Each measurement is aggregated into every registered view of its
    measure, keyed by the view's tag keys in order. Tags missing from a
    record contribute an empty value; tags not declared by a view are
    ignored. Safe to call from several threads.
    """

    def __init__(self, registry: ViewRegistry | None = None) -> None:
        self._registry = registry if registry is not None else default_registry
        self._data: dict[str, _ViewData] = {}
        self._lock = threading.Lock()

    def record(
        self,
        tags: Mapping[str, str],
        measurements: Sequence[Measurement],
        attachments: Mapping[str, Any] | None = None,
    ) -> None:
        """Record measurements under a tag set."""
        for measurement in measurements:
            for view in self._registry.views_for(measurement.measure.name):
                key = tuple(tags.get(tag_key, "") for tag_key in view.tag_keys)
                with self._lock:
                    data = self._data.get(view.name)
                    if data is None or data.view != view:
                        data = self._data[view.name] = _ViewData(view)
                    row = data.rows.get(key)
                    if row is None:
                        row = data.rows[key] = self._new_row(view)
                    row.add(self._bounds(view), measurement.value)

    @staticmethod
    def _bounds(view: View) -> tuple[float, ...]:
        if isinstance(view.aggregation, Distribution):
            return view.aggregation.bounds
        return ()

    @staticmethod
    def _new_row(view: View) -> Row:
        if isinstance(view.aggregation, Count):
            return CountRow()
        return DistributionRow(bucket_counts=[0] * (len(view.aggregation.bounds) + 1))

    @staticmethod
    def _copy(row: Row) -> Row:
        if isinstance(row, DistributionRow):
            return DistributionRow(list(row.bucket_counts), row.total, row.count)
        return CountRow(row.count)

    def rows(self, view_name: str) -> dict[tuple[str, ...], Row]:
        """Return a snapshot of the aggregated rows of a view."""
        with self._lock:
            data = self._data.get(view_name)
            if data is None:
                return {}
            return {key: self._copy(row) for key, row in data.rows.items()}

    def scrape(self) -> Iterable[MetricSample]:
        """Render every aggregated row as metric samples."""
        with self._lock:
            snapshot = [
                (data.view, {key: self._copy(row) for key, row in data.rows.items()})
                for data in self._data.values()
            ]
        samples: list[MetricSample] = []
        for view, rows in snapshot:
            for key, row in rows.items():
                labels = dict(zip(view.tag_keys, key))
                if isinstance(row, DistributionRow):
                    samples.extend(
                        metrics.histogram(
                            view.name,
                            self._bounds(view),
                            row.bucket_counts,
                            row.total,
                            row.count,
                            labels,
                        )
                    )
                else:
                    samples.append(metrics.counter(view.name, float(row.count), labels))
        return samples

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
