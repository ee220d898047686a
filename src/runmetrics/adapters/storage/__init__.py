"""Storage adapters for logs and aggregated metrics."""

from runmetrics.adapters.storage.in_memory import InMemoryLogStorage, InMemoryStatsRecorder

__all__ = ["InMemoryLogStorage", "InMemoryStatsRecorder"]
