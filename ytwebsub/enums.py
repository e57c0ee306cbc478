"""Defines Enum classes used in the package."""

__all__ = ["EventKind", "SubscriptionIntent"]

from enum import Enum


class SubscriptionIntent(Enum):
    """Enum for the intent of a subscription request, as sent in ``hub.mode``."""

    SUBSCRIBE = "subscribe"
    """Subscribe to a channel"""

    UNSUBSCRIBE = "unsubscribe"
    """Unsubscribe from a channel"""


class EventKind(Enum):
    """Enum for the kind of event emitted by the notifier."""

    SUBSCRIBE = "subscribe"
    """The hub verified a subscribe request"""

    UNSUBSCRIBE = "unsubscribe"
    """The hub verified an unsubscribe request"""

    NOTIFIED = "notified"
    """The hub delivered a video notification"""

    @classmethod
    def from_intent(cls, intent: SubscriptionIntent) -> "EventKind":
        """Get the event kind emitted when the hub verifies the given intent.

        :param intent: The verified subscription intent.
        :return: The matching event kind.
        """
        return cls(intent.value)
