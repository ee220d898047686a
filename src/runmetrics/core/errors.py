"""Exception hierarchy for run metric extraction.

Every failure that ends a single observation derives from RunMetricsError,
so metric kinds can log and skip without catching unrelated exceptions.
"""


class RunMetricsError(Exception):
    """Base class for all run metric errors."""


class PathError(RunMetricsError):
    """A path expression could not be evaluated."""


class PathSyntaxError(PathError):
    """A path expression is malformed.

    Attributes:
        expression: The template being parsed.
        position: Character offset where parsing failed.
    """

    def __init__(self, expression: str, position: int, reason: str) -> None:
        self.expression = expression
        self.position = position
        self.reason = reason
        super().__init__(f"{reason} at position {position} in {expression!r}")


class PathNotFoundError(PathError):
    """A field, key or index step matched nothing addressable."""

    def __init__(self, step: str) -> None:
        self.step = step
        super().__init__(f"{step} is not found")


class CardinalityError(RunMetricsError):
    """A path matched zero or several values where exactly one is required.

    Attributes:
        side: Which lookup failed ("duration", "from", "to" or a label path).
        count: Number of matches actually found.
    """

    def __init__(self, side: str, count: int) -> None:
        self.side = side
        self.count = count
        super().__init__(f"unable to parse {side!r}, got {count} results")


class TimestampTypeError(RunMetricsError):
    """A resolved field cannot represent a point in time."""

    def __init__(self, field: str, found: object) -> None:
        self.field = field
        self.found = found
        super().__init__(f"could not parse {field!r} duration, wrong type {found!r}")


class TagResolutionError(RunMetricsError):
    """A label path resolved to a null or unrenderable value."""

    def __init__(self, path: str, reason: str = "has no value") -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"label {path!r} {reason}")


class ConfigurationError(RunMetricsError):
    """Monitor or metric configuration is invalid."""


class ViewConflictError(ConfigurationError):
    """A view name is already registered with a different definition."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"view {name!r} is already registered with a different definition")
