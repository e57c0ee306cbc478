"""Contains type hints for the library."""

__all__ = [
    "EventListener",
    "IntentListener",
    "NotificationListener",
]

from collections.abc import Awaitable, Callable

from ytwebsub.models.event import IntentVerificationEvent, NotificationEvent

IntentListener = Callable[[IntentVerificationEvent], Awaitable[None]]
NotificationListener = Callable[[NotificationEvent], Awaitable[None]]
EventListener = IntentListener | NotificationListener
