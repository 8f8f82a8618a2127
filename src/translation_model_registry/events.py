"""Change and error notifications for registry observers.

Presentation layers (a table view, a CLI, a log sink) subscribe to an
EventEmitter to learn about errors, catalog fetches and changes to the list of
installed models. Operations never depend on observers: a failing callback is
logged and skipped.
"""

import threading
from enum import Enum
from typing import Any, Callable, Dict, List

from .logging import LogEvent, log_error

# Type for event callback functions
EventCallback = Callable[["RegistryEvent", Dict[str, Any]], None]


class RegistryEvent(str, Enum):
    """Events raised to registry observers."""

    ERROR = "error"
    CORRUPT_PACKAGE = "corrupt_package"
    FETCH_STARTED = "fetch_started"
    FETCH_FINISHED = "fetch_finished"
    REGISTRY_CHANGED = "registry_changed"
    ROW_INSERTED = "row_inserted"
    ROW_CHANGED = "row_changed"
    ROW_REMOVED = "row_removed"


class EventEmitter:
    """Dispatches registry events to subscribed callbacks."""

    def __init__(self) -> None:
        """Initialize an emitter without subscribers."""
        self._callbacks: List[EventCallback] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register a callback for all events.

        Args:
            callback: Function called with the event and its data

        Returns:
            A function that removes the subscription again
        """
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def emit(self, event: RegistryEvent, **data: Any) -> None:
        """Send ``event`` to every subscriber.

        Args:
            event: Event type
            **data: Event payload, e.g. ``message`` or ``position``
        """
        with self._lock:
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(event, dict(data))
            except Exception as e:
                log_error(
                    LogEvent.MODEL_REGISTRY,
                    f"Event callback failed with error: {e}",
                    registry_event=event.value,
                )
