"""Process-wide registry of views.

Registration happens when metrics are constructed, at startup. Registering
an identical view twice is a no-op; reusing a name for a different view is
a configuration error.
"""

import logging
import threading

from runmetrics.core.errors import ViewConflictError
from runmetrics.core.models import View

logger = logging.getLogger(__name__)


class ViewRegistry:
    """Thread-safe mapping of view names to views."""

    def __init__(self) -> None:
        self._views: dict[str, View] = {}
        self._lock = threading.Lock()

    def register(self, view: View) -> None:
        """Register a view.

        Raises:
            ViewConflictError: If another view with the same name exists.
        """
        with self._lock:
            existing = self._views.get(view.name)
            if existing is None:
                self._views[view.name] = view
                logger.debug("registered view", extra={"view": view.name})
                return
        if existing != view:
            raise ViewConflictError(view.name)

    def unregister(self, name: str) -> None:
        """Remove a view. Unknown names are ignored."""
        with self._lock:
            self._views.pop(name, None)

    def find(self, name: str) -> View | None:
        with self._lock:
            return self._views.get(name)

    def views_for(self, measure_name: str) -> list[View]:
        """Return every view aggregating the named measure."""
        with self._lock:
            return [v for v in self._views.values() if v.measure.name == measure_name]

    def views(self) -> list[View]:
        with self._lock:
            return list(self._views.values())


default_registry = ViewRegistry()
