"""Timestamp representations and their normalization.

Records expose points in time in several shapes. A field may hold a plain
``datetime`` or a ``Time`` wrapper, and either may be declared nullable
(``datetime | None`` / ``Time | None``). Normalization folds all of them
into a single canonical value: a ``Time``, or None when a nullable field is
legitimately unset.
"""

import re
import types
import typing
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from runmetrics.core.errors import TimestampTypeError
from runmetrics.core.jsonpath import Slot


@dataclass(frozen=True, order=True)
class Time:
    """A timezone-aware point in time, serialized as RFC 3339.

    Naive datetimes are taken to be UTC.
    """

    time: datetime

    def __post_init__(self) -> None:
        if self.time.tzinfo is None:
            object.__setattr__(self, "time", self.time.replace(tzinfo=timezone.utc))

    @classmethod
    def now(cls) -> "Time":
        return cls(datetime.now(timezone.utc))

    def sub(self, other: "Time") -> timedelta:
        """Return the time elapsed from other to self."""
        return self.time - other.time

    def deep_copy(self) -> "Time":
        return Time(self.time)

    def rfc3339(self) -> str:
        """Format as RFC 3339 in UTC, with a fraction only when one is set."""
        utc = self.time.astimezone(timezone.utc)
        text = utc.strftime("%Y-%m-%dT%H:%M:%S")
        if utc.microsecond:
            text += f".{utc.microsecond:06d}".rstrip("0")
        return text + "Z"

    def __str__(self) -> str:
        return self.rfc3339()


CanonicalTimestamp = Time | None


class TimestampKind(Enum):
    """How a matched field represents a point in time."""

    WRAPPED_VALUE = "wrapped-value"
    WRAPPED_POINTER = "wrapped-pointer"
    PLAIN_VALUE = "plain-value"
    PLAIN_POINTER = "plain-pointer"
    UNRECOGNIZED = "unrecognized"


def _declared(hint: Any) -> tuple[Any, bool]:
    """Split a type hint into (base type, nullable)."""
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        args = typing.get_args(hint)
        rest = [a for a in args if a is not type(None)]
        nullable = len(rest) < len(args)
        return (rest[0] if len(rest) == 1 else hint), nullable
    return hint, False


def _untyped(declared: Any) -> bool:
    return declared is None or declared is Any or declared is object


def classify(slot: Slot) -> TimestampKind:
    """Classify a matched slot into one of the timestamp representations.

    The declared type decides nullability. A null taken from an untyped
    container (a JSON null in a mapping, or a value declared ``Any``) reads
    as an unset plain pointer.
    """
    value = slot.value
    declared, nullable = _declared(slot.declared)
    untyped = _untyped(declared)
    if value is None and not untyped and not nullable:
        return TimestampKind.UNRECOGNIZED
    if isinstance(value, Time) or (value is None and declared is Time):
        return TimestampKind.WRAPPED_POINTER if nullable else TimestampKind.WRAPPED_VALUE
    if isinstance(value, datetime) or (value is None and declared is datetime):
        return TimestampKind.PLAIN_POINTER if nullable else TimestampKind.PLAIN_VALUE
    if value is None and untyped:
        return TimestampKind.PLAIN_POINTER
    return TimestampKind.UNRECOGNIZED


def normalize(field: str, slot: Slot) -> CanonicalTimestamp:
    """Convert a matched slot to a canonical timestamp.

    Args:
        field: Name of the side being parsed, used in error messages.
        slot: The matched value.

    Returns:
        A fresh Time, or None if the slot is an unset nullable timestamp.

    Raises:
        TimestampTypeError: If the slot cannot represent a point in time.
    """
    kind = classify(slot)
    if kind is TimestampKind.WRAPPED_VALUE:
        return slot.value.deep_copy()
    if kind is TimestampKind.WRAPPED_POINTER:
        return None if slot.value is None else slot.value.deep_copy()
    if kind is TimestampKind.PLAIN_VALUE:
        return Time(slot.value)
    if kind is TimestampKind.PLAIN_POINTER:
        return None if slot.value is None else Time(slot.value)
    raise TimestampTypeError(field, type(slot.value).__name__)


_RFC3339 = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def parse_rfc3339(value: str) -> Time:
    """Parse an RFC 3339 timestamp.

    Raises:
        ValueError: If value is not a valid RFC 3339 timestamp.
    """
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(f"invalid RFC 3339 timestamp: {value!r}")
    # datetime keeps microseconds; finer digits are dropped
    fraction = (match.group(1) or "")[:7]
    zone = "+00:00" if match.group(2) == "Z" else match.group(2)
    return Time(datetime.fromisoformat(value[:19] + fraction + zone))


def must_parse_rfc3339(value: str) -> Time:
    """Parse an RFC 3339 timestamp known to be valid.

    For constants and fixtures only. An invalid value is a programming
    error and raises RuntimeError rather than ValueError.
    """
    try:
        return parse_rfc3339(value)
    except ValueError as exc:
        raise RuntimeError(str(exc)) from exc
