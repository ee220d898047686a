"""Duration extraction between two timestamp fields of a record."""

from typing import Any

from runmetrics.core.errors import CardinalityError
from runmetrics.core.jsonpath import compile_path
from runmetrics.core.models import DurationSpec
from runmetrics.core.timestamps import CanonicalTimestamp, Time, normalize


def duration_template(duration: DurationSpec) -> str:
    """Combine the from and to paths into a single two-action template."""
    return f"{{{duration.from_path}}}{{{duration.to_path}}}"


def parse_duration(
    duration: DurationSpec, record: Any
) -> tuple[CanonicalTimestamp, CanonicalTimestamp]:
    """Resolve the from and to timestamps of a record.

    Both paths are resolved in one pass over the record. Each side must
    match exactly one field.

    Args:
        duration: Paths of the two timestamps.
        record: Any record reachable by path expressions.

    Returns:
        (from, to). Either may be None when its field is an unset nullable
        timestamp; the duration is then not yet computable.

    Raises:
        PathError: If the template is malformed or a step matches nothing.
        CardinalityError: If a side matches zero or several fields.
        TimestampTypeError: If a matched field is not a timestamp.
    """
    results = compile_path(duration_template(duration)).find_results(record)
    if len(results) != 2:
        raise CardinalityError("duration", len(results))
    if len(results[0]) != 1:
        raise CardinalityError("from", len(results[0]))
    if len(results[1]) != 1:
        raise CardinalityError("to", len(results[1]))

    start = normalize("from", results[0][0])
    end = normalize("to", results[1][0])
    return start, end


def elapsed_seconds(start: Time, end: Time) -> float:
    """Return the seconds elapsed from start to end."""
    return end.sub(start).total_seconds()
