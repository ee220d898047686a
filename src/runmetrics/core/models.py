"""Core domain models for run metric configuration and aggregation."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DurationSpec:
    """Where to find the two timestamps of a duration.

    Attributes:
        from_path: Path expression of the start timestamp.
        to_path: Path expression of the end timestamp.
    """

    from_path: str
    to_path: str


@dataclass(frozen=True)
class MetricSpec:
    """Configuration of a single metric owned by a monitor.

    Attributes:
        name: Metric name, unique inside its monitor.
        type: Metric kind ("histogram" or "counter").
        by: Path expressions whose values become labels, in label order.
        duration: Timestamps to measure, required for histograms.
    """

    name: str
    type: str = "histogram"
    by: tuple[str, ...] = ()
    duration: DurationSpec | None = None


@dataclass(frozen=True)
class MonitorSpec:
    """A named group of metrics observing one resource kind.

    Attributes:
        name: Monitor name.
        resource: Resource identifier (e.g. "taskrun").
        metrics: Metrics defined by the monitor.
    """

    name: str
    resource: str
    metrics: tuple[MetricSpec, ...] = ()


@dataclass(frozen=True)
class Measure:
    """A named quantity that measurements are recorded against."""

    name: str
    description: str
    unit: str = "1"

    def m(self, value: float) -> "Measurement":
        """Create a measurement of this measure."""
        return Measurement(measure=self, value=float(value))


@dataclass(frozen=True)
class Measurement:
    """A single value recorded against a measure."""

    measure: Measure
    value: float


@dataclass(frozen=True)
class Distribution:
    """Histogram aggregation with explicit upper bucket bounds."""

    bounds: tuple[float, ...]

    def __post_init__(self) -> None:
        if list(self.bounds) != sorted(set(self.bounds)):
            raise ValueError("distribution bounds must be strictly increasing")


@dataclass(frozen=True)
class Count:
    """Aggregation counting the number of measurements."""


Aggregation = Distribution | Count


@dataclass(frozen=True)
class View:
    """Describes how measurements of a measure are aggregated and labelled.

    Attributes:
        name: Unique view name, usually the measure name.
        description: Human readable description.
        measure: The measure being aggregated.
        aggregation: Distribution or Count.
        tag_keys: Label keys, in the order used for every row.
    """

    name: str
    description: str
    measure: Measure
    aggregation: Aggregation
    tag_keys: tuple[str, ...] = ()


@dataclass(frozen=True)
class LogEntry:
    """A structured log entry.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Log level (e.g., INFO, ERROR, DEBUG).
        message: The log message.
        attributes: Additional structured fields.
    """

    timestamp: float
    level: str
    message: str
    attributes: dict[str, str | int | float | bool] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricSample:
    """A single metric measurement.

    Attributes:
        name: Metric name (e.g., taskrun/builds/duration/histogram_count).
        timestamp: Unix timestamp in seconds.
        value: The metric value.
        labels: Key-value pairs for metric dimensions.
    """

    name: str
    timestamp: float
    value: float
    labels: dict[str, str] = field(default_factory=dict)
