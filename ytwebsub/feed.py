"""Extracts notifications from the Atom feeds pushed by the hub.

The hub posts a feed with either one or more ``<entry>`` elements describing an
uploaded or edited video, or an ``<at:deleted-entry>`` tombstone when a video is
removed. The body is parsed by xmltodict into nested dictionaries, with ``entry``
and ``link`` always parsed as lists.
"""

__all__ = [
    "extract",
    "extract_notification",
    "get_deleted_entry",
    "get_entries",
    "get_first_entry",
    "parse_feed",
]

from collections.abc import Mapping
from typing import Any

import xmltodict
from pyexpat import ExpatError

from ytwebsub.errors import MalformedFeedError, MissingEntryError
from ytwebsub.models.event import DeletedEntry, NotificationEvent
from ytwebsub.models.video import Channel, Video

_FORCE_LIST = ("entry", "link")
_DELETED_ENTRY_KEY = "at:deleted-entry"


def parse_feed(body: bytes | str) -> dict[str, Any]:
    """Parse the body of a push notification.

    :param body: The raw request body.
    :return: The parsed document.
    :raises MalformedFeedError: If the body is not well-formed XML.
    """
    try:
        return xmltodict.parse(body, force_list=_FORCE_LIST)
    except ExpatError as ex:
        raise MalformedFeedError(f"Invalid XML in request body: {ex}") from ex


def _get_feed(document: Mapping[str, Any]) -> Mapping[str, Any]:
    feed = document.get("feed")
    return feed if isinstance(feed, Mapping) else {}


def get_deleted_entry(document: Mapping[str, Any]) -> DeletedEntry | None:
    """Get the tombstone of the feed if a video was deleted.

    :param document: The parsed document.
    :return: The deleted entry, or None if the feed does not mark a deletion.
    """
    feed = _get_feed(document)
    if _DELETED_ENTRY_KEY not in feed:
        return None

    tombstone = _first(feed[_DELETED_ENTRY_KEY])
    if not isinstance(tombstone, Mapping):
        return DeletedEntry(ref=None, when=None)

    return DeletedEntry(ref=tombstone.get("@ref"), when=tombstone.get("@when"))


def get_entries(document: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    """Get the entries of the feed.

    :param document: The parsed document.
    :return: The entries, which is empty if the feed has none.
    """
    entries = _get_feed(document).get("entry") or []
    return [entry for entry in entries if isinstance(entry, Mapping)]


def get_first_entry(document: Mapping[str, Any]) -> Mapping[str, Any]:
    """Get the first entry of the feed.

    :param document: The parsed document.
    :return: The first entry.
    :raises MissingEntryError: If the feed has no entry.
    """
    entries = get_entries(document)
    if not entries:
        raise MissingEntryError("Feed has no entry")

    return entries[0]


def extract_notification(entry: Mapping[str, Any]) -> NotificationEvent:
    """Build a notification from a feed entry.

    :param entry: The parsed ``<entry>`` element.
    :return: The notification.
    :raises MissingEntryError: If any of the expected fields is missing.
    """
    author = _first(entry.get("author"))
    if not isinstance(author, Mapping):
        raise MissingEntryError("Entry has no author")

    return NotificationEvent(
        video=Video(
            id=_text(entry, "yt:videoId"),
            title=_text(entry, "title"),
            link=_attribute(entry, "link", "@href"),
        ),
        channel=Channel(
            id=_text(entry, "yt:channelId"),
            name=_text(author, "name"),
            link=_text(author, "uri"),
        ),
        published=_text(entry, "published"),
        updated=_text(entry, "updated"),
    )


def extract(document: Mapping[str, Any]) -> NotificationEvent | DeletedEntry:
    """Extract the notification from a parsed feed.

    :param document: The parsed document.
    :return: The notification of the first entry, or the tombstone if a video was
        deleted.
    :raises MissingEntryError: If the feed has no usable entry.
    """
    deleted = get_deleted_entry(document)
    if deleted is not None:
        return deleted

    return extract_notification(get_first_entry(document))


def _first(value: Any) -> Any:
    """Unwrap a value that may be wrapped in a list."""
    if isinstance(value, list):
        return value[0] if value else None

    return value


def _text(element: Mapping[str, Any], key: str) -> str:
    value = _first(element.get(key))

    # Elements with attributes keep their text under '#text'
    if isinstance(value, Mapping):
        value = value.get("#text")

    if not isinstance(value, str) or not value:
        raise MissingEntryError(f"Entry has no {key}")

    return value


def _attribute(element: Mapping[str, Any], key: str, attribute: str) -> str:
    value = _first(element.get(key))
    if not isinstance(value, Mapping) or not value.get(attribute):
        raise MissingEntryError(f"Entry has no {key} with {attribute}")

    return value[attribute]
