"""Contains the event bus that delivers events from the callback handler to the
listeners registered by the application.
"""

__all__ = ["EventBus"]

import logging
from threading import Lock
from typing import Self

from ytwebsub.enums import EventKind
from ytwebsub.models.event import IntentVerificationEvent, NotificationEvent
from ytwebsub.types import EventListener


class EventBus:
    """A publish/subscribe channel for the events of the notifier.

    Listeners can be added and removed from any thread. Each emission calls a
    snapshot of the listeners registered at that moment, and a listener that raises
    does not prevent the others from being called.
    """

    def __init__(self) -> None:
        """Create a new EventBus instance."""
        self._logger = logging.getLogger(self.__class__.__name__)
        self._listeners: dict[EventKind, list[EventListener]] = {
            kind: [] for kind in EventKind
        }
        self._lock = Lock()

    def add_listener(self, kind: EventKind, func: EventListener) -> Self:
        """Add a listener for an event.

        :param kind: The kind of event to listen for.
        :param func: The listener function to add.
        :return: The EventBus instance to allow for method chaining.
        """
        with self._lock:
            self._listeners[kind].append(func)

        self._logger.debug(
            "Added %s listener (%s)", kind.name, getattr(func, "__name__", func)
        )
        return self

    def remove_listener(self, kind: EventKind, func: EventListener) -> Self:
        """Remove a listener for an event.

        :param kind: The kind of event the listener was added for.
        :param func: The listener function to remove.
        :return: The EventBus instance to allow for method chaining.
        :raises ValueError: If the listener was not added for the event.
        """
        with self._lock:
            self._listeners[kind].remove(func)

        return self

    def get_listeners(self, kind: EventKind) -> list[EventListener]:
        """Get a copy of the listeners for an event.

        :param kind: The kind of event.
        :return: The listeners.
        """
        with self._lock:
            return list(self._listeners[kind])

    async def emit(
        self, kind: EventKind, event: IntentVerificationEvent | NotificationEvent
    ) -> int:
        """Call the listeners of an event.

        :param kind: The kind of event.
        :param event: The event to pass to the listeners.
        :return: The number of listeners that completed without raising.
        """
        listeners = self.get_listeners(kind)
        self._logger.debug("Emitting %s event to %d listener(s)", kind.name, len(listeners))

        succeeded = 0
        for func in listeners:
            try:
                await func(event)
            except Exception:
                self._logger.exception(
                    "Listener (%s) failed to handle %s event",
                    getattr(func, "__name__", func),
                    kind.name,
                )
            else:
                succeeded += 1

        return succeeded
