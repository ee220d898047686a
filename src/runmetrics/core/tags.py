"""Label extraction from records.

Each ``by`` path of a metric becomes one label. The label key is derived
from the path text, so every observation of a metric shares the same key
schema; only the values vary between records.
"""

import json
import re
from collections.abc import Iterable, Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from runmetrics.core.errors import (
    CardinalityError,
    ConfigurationError,
    PathSyntaxError,
    TagResolutionError,
)
from runmetrics.core.jsonpath import JSONPath, compile_path
from runmetrics.core.timestamps import Time

_INVALID_LABEL_CHARS = re.compile(r"[^A-Za-z0-9_]+")


def label_key(path: str) -> str:
    """Derive a label key from a path expression.

    Example:
        ``.status.podName`` becomes ``status_podName``.
    """
    key = _INVALID_LABEL_CHARS.sub("_", path.lstrip("$")).strip("_")
    if not key:
        raise ConfigurationError(f"cannot derive a label name from {path!r}")
    if key[0].isdigit():
        key = f"_{key}"
    return key


def _ordered(value: Any) -> Any:
    """Order mapping items by the text of their keys."""
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda item: str(item[0]))
        return {key: _ordered(item) for key, item in items}
    if isinstance(value, (list, tuple)):
        return [_ordered(item) for item in value]
    return value


def format_value(value: Any) -> str:
    """Render a matched value as a label value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Time):
        return value.rfc3339()
    if isinstance(value, datetime):
        return Time(value).rfc3339()
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(_ordered(value), default=str)
    return str(value)


class TagBuilder:
    """Builds ordered label maps from a fixed list of paths.

    Paths are compiled once; a malformed path fails at construction.
    """

    def __init__(self, by: Iterable[str]) -> None:
        self.by: tuple[str, ...] = tuple(by)
        self.keys: tuple[str, ...] = tuple(label_key(path) for path in self.by)
        if len(set(self.keys)) != len(self.keys):
            raise ConfigurationError(f"label paths {list(self.by)} produce duplicate keys")
        self._paths: list[JSONPath] = []
        for path in self.by:
            try:
                self._paths.append(compile_path(f"{{{path}}}"))
            except PathSyntaxError as exc:
                raise ConfigurationError(f"invalid label path {path!r}: {exc}") from exc

    def build(self, record: Any) -> dict[str, str]:
        """Resolve every label path against record.

        Returns:
            Label key to value, in ``by`` order.

        Raises:
            PathError: If a path matches nothing addressable.
            CardinalityError: If a path matches zero or several values.
            TagResolutionError: If a path matches a null value, or one that
                cannot be rendered as text.
        """
        tags: dict[str, str] = {}
        for path, key, compiled in zip(self.by, self.keys, self._paths):
            matches = compiled.find_results(record)[0]
            if len(matches) != 1:
                raise CardinalityError(path, len(matches))
            if matches[0].value is None:
                raise TagResolutionError(path)
            try:
                tags[key] = format_value(matches[0].value)
            except (TypeError, ValueError) as exc:
                raise TagResolutionError(path, f"cannot be rendered: {exc}") from exc
        return tags