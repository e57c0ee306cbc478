"""Contains the dataclasses for the events emitted by the notifier."""

__all__ = ["DeletedEntry", "IntentVerificationEvent", "NotificationEvent"]

import re
from dataclasses import dataclass
from datetime import datetime

from ytwebsub.enums import SubscriptionIntent
from ytwebsub.models.video import Channel, Video

_FRACTION_PATTERN = re.compile(r"\.\d+")


def parse_timestamp(timestamp: str) -> datetime:
    """Parse a timestamp sent by the hub, dropping fractional seconds.

    :param timestamp: A timestamp such as ``2015-03-09T19:05:24.552394234+00:00``.
    :return: The timezone-aware datetime.
    """
    # The hub sends nanoseconds, which datetime cannot hold
    return datetime.fromisoformat(_FRACTION_PATTERN.sub("", timestamp, count=1))


@dataclass(frozen=True)
class IntentVerificationEvent:
    """Represents a subscription or unsubscription verified by the hub."""

    type: SubscriptionIntent
    """The verified intent"""

    channel: str
    """The ID of the channel"""

    lease_seconds: str | None = None
    """The lease of the subscription in seconds, if the hub supplied one"""


@dataclass(frozen=True)
class NotificationEvent:
    """Represents a video notification delivered by the hub."""

    video: Video
    """The notified video"""

    channel: Channel
    """The channel that owns the video"""

    published: str
    """The published time of the video, as sent by the hub"""

    updated: str
    """The updated time of the video, as sent by the hub"""

    @property
    def published_at(self) -> datetime:
        """Get the published time as a datetime.

        :return: The published time.
        """
        return parse_timestamp(self.published)

    @property
    def updated_at(self) -> datetime:
        """Get the updated time as a datetime.

        :return: The updated time.
        """
        return parse_timestamp(self.updated)


@dataclass(frozen=True)
class DeletedEntry:
    """Represents a tombstone for a video removed from the feed."""

    ref: str | None
    """The ID of the removed entry, such as ``yt:video:VIDEO_ID``"""

    when: str | None
    """The time the entry was removed"""
