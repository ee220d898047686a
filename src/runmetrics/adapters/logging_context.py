"""Context-local structured fields attached to every emitted log entry.

A reconciliation worker binds identifying fields (run name, namespace)
once; entries logged while they are bound carry them as attributes.
"""

from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar

LogValue = str | int | float | bool

_log_context: ContextVar[dict[str, LogValue] | None] = ContextVar(
    "runmetrics_log_context", default=None
)


def get_log_context() -> dict[str, LogValue]:
    """Return a copy of the fields bound in the current context."""
    return dict(_log_context.get() or {})


def set_log_context(**fields: LogValue) -> None:
    """Replace the bound fields."""
    _log_context.set(dict(fields))


def update_log_context(**fields: LogValue) -> None:
    """Add or overwrite bound fields."""
    _log_context.set({**get_log_context(), **fields})


def clear_log_context() -> None:
    _log_context.set(None)


@contextmanager
def log_context(**fields: LogValue) -> Generator[dict[str, LogValue], None, None]:
    """Bind fields for the duration of a block, restoring the previous ones."""
    token = _log_context.set({**get_log_context(), **fields})
    try:
        yield get_log_context()
    finally:
        _log_context.reset(token)
