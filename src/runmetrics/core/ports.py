"""Port interfaces between metric kinds and their collaborators.

These protocols define the contracts that adapters must implement.
The core domain depends only on these interfaces, not concrete implementations.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from runmetrics.core.models import LogEntry, Measurement, MetricSample, View


@runtime_checkable
class StatsRecorderPort(Protocol):
    """Port for the aggregation backend.

    Implementations must tolerate concurrent, unordered calls.
    Examples: InMemoryStatsRecorder.
    """

    def record(
        self,
        tags: Mapping[str, str],
        measurements: Sequence[Measurement],
        attachments: Mapping[str, Any] | None = None,
    ) -> None:
        """Record measurements under a tag set."""
        ...


@runtime_checkable
class Metric(Protocol):
    """Contract shared by every metric kind (histogram, counter).

    A monitor registry holds a collection of these and never needs the
    concrete kind.
    """

    def metric_name(self) -> str: ...

    def metric_type(self) -> str: ...

    def monitor_name(self) -> str: ...

    def view(self) -> View: ...

    def record(
        self,
        recorder: StatsRecorderPort,
        run: Any,
        logger: logging.Logger | None = None,
    ) -> None:
        """Observe a run. Failures are logged, never raised."""
        ...

    def clean(
        self,
        recorder: StatsRecorderPort,
        run: Any,
        logger: logging.Logger | None = None,
    ) -> None:
        """Retract observations of a deleted run, for kinds that need it."""
        ...


@runtime_checkable
class LogStoragePort(Protocol):
    """Port for log storage operations.

    Examples: InMemoryLogStorage.
    """

    def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        ...

    def read(self, since: float = 0) -> Iterable[LogEntry]:
        """Read log entries since the given timestamp.

        Args:
            since: Unix timestamp. Returns entries with timestamp > since.
                   Default 0 returns all entries.

        Returns:
            Iterable of LogEntry objects, ordered by timestamp ascending.
        """
        ...


@runtime_checkable
class MetricsStoragePort(Protocol):
    """Port for reading aggregated metric samples.

    Examples: InMemoryStatsRecorder.
    """

    def scrape(self) -> Iterable[MetricSample]:
        """Scrape all current metric samples.

        Returns:
            Iterable of MetricSample objects representing current state.
        """
        ...
