"""Tests for metric sample helper functions."""

import time

import pytest

from runmetrics.core.metrics import DURATION_BUCKETS, counter, histogram
from runmetrics.core.models import MetricSample


class TestDurationBuckets:
    @pytest.mark.core
    def test_fifteen_buckets_from_quarter_second(self) -> None:
        assert len(DURATION_BUCKETS) == 15
        assert DURATION_BUCKETS[0] == 0.25
        assert DURATION_BUCKETS[-1] == 10000

    @pytest.mark.core
    def test_buckets_increase(self) -> None:
        assert list(DURATION_BUCKETS) == sorted(DURATION_BUCKETS)


class TestCounter:
    """Tests for counter() helper function."""

    @pytest.mark.core
    def test_counter_creates_metric_sample(self) -> None:
        sample = counter("runs", 3.0, labels={"namespace": "ci"})
        assert isinstance(sample, MetricSample)
        assert sample.value == 3.0
        assert sample.labels == {"namespace": "ci"}

    @pytest.mark.core
    def test_counter_auto_captures_timestamp(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(time, "time", lambda: 1702300000.0)
        assert counter("runs", 1.0).timestamp == 1702300000.0

    @pytest.mark.core
    def test_counter_defaults_to_empty_labels(self) -> None:
        assert counter("runs", 1.0).labels == {}


class TestHistogram:
    """Tests for histogram() helper function."""

    @pytest.mark.core
    def test_buckets_are_cumulative(self) -> None:
        samples = histogram("d", (1, 5), [2, 1, 3], total=40.0, count=6)
        buckets = [s for s in samples if s.name == "d_bucket"]
        assert [(s.labels["le"], s.value) for s in buckets] == [
            ("1", 2.0),
            ("5", 3.0),
            ("+Inf", 6.0),
        ]

    @pytest.mark.core
    def test_sum_and_count(self) -> None:
        samples = histogram("d", (1,), [0, 1], total=7.5, count=1, labels={"a": "b"})
        by_name = {s.name: s for s in samples if not s.name.endswith("_bucket")}
        assert by_name["d_sum"].value == 7.5
        assert by_name["d_count"].value == 1.0
        assert by_name["d_sum"].labels == {"a": "b"}

    @pytest.mark.core
    def test_bucket_labels_keep_base_labels(self) -> None:
        samples = histogram("d", (1,), [1, 0], total=0.5, count=1, labels={"a": "b"})
        assert all(s.labels["a"] == "b" for s in samples)
