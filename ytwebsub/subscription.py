"""Builds and sends subscription requests to the hub."""

__all__ = [
    "BASE_TOPIC",
    "SubscriptionRequest",
    "build_subscription_request",
    "channel_id_from_topic",
    "send_subscription_request",
    "topic_url",
]

import logging
from dataclasses import dataclass, field
from urllib.parse import urlencode

from httpx import AsyncClient

from ytwebsub.enums import SubscriptionIntent
from ytwebsub.errors import HTTPError
from ytwebsub.models import NotifierConfig

BASE_TOPIC = "https://www.youtube.com/xml/feeds/videos.xml?channel_id="

_logger = logging.getLogger(__name__)


def topic_url(channel_id: str) -> str:
    """Get the topic URL of a channel's video feed.

    :param channel_id: The channel ID.
    :return: The topic URL.
    """
    return BASE_TOPIC + channel_id


def channel_id_from_topic(topic: str) -> str:
    """Get the channel ID back from a topic URL.

    :param topic: The topic URL sent by the hub.
    :return: The channel ID.
    """
    return topic.replace(BASE_TOPIC, "", 1)


@dataclass(frozen=True)
class SubscriptionRequest:
    """Represents a request to subscribe or unsubscribe a channel."""

    channel_id: str
    """The ID of the channel"""

    intent: SubscriptionIntent
    """Whether to subscribe or unsubscribe"""

    url: str
    """The URL of the hub"""

    data: dict[str, str]
    """The form fields of the request"""

    headers: dict[str, str] = field(
        default_factory=lambda: {"Content-Type": "application/x-www-form-urlencoded"}
    )
    """The headers of the request"""

    @property
    def form_body(self) -> str:
        """Get the form-encoded body of the request.

        :return: The body.
        """
        return urlencode(self.data)


def build_subscription_request(
    channel_id: str, intent: SubscriptionIntent, config: NotifierConfig
) -> SubscriptionRequest:
    """Build the request the hub expects to (un)subscribe a channel.

    :param channel_id: The ID of the channel.
    :param intent: Whether to subscribe or unsubscribe.
    :param config: The configuration of the notifier.
    :return: The request.
    """
    data = {
        "hub.callback": config.callback_url,
        "hub.mode": intent.value,
        "hub.topic": topic_url(channel_id),
    }

    if config.secret:
        data["hub.secret"] = config.secret

    return SubscriptionRequest(
        channel_id=channel_id, intent=intent, url=config.hub_url, data=data
    )


async def send_subscription_request(
    request: SubscriptionRequest, *, client: AsyncClient | None = None
) -> None:
    """Send a subscription request to the hub.

    :param request: The request to send.
    :param client: The client to send the request with. If not provided, a new
        client is created for the request.
    :raises HTTPError: If the hub rejected the request.
    :raises httpx.HTTPError: If the hub could not be reached.
    """
    mode = request.intent.value

    _logger.debug("Sending %s request for channel: %s", mode, request.channel_id)

    if client is None:
        async with AsyncClient() as new_client:
            response = await new_client.post(
                request.url, content=request.form_body, headers=request.headers
            )
    else:
        response = await client.post(
            request.url, content=request.form_body, headers=request.headers
        )

    if not response.is_success:
        raise HTTPError(
            f"Failed to {mode} channel: {request.channel_id}", response.status_code
        )

    _logger.info("Successfully sent %s request for channel: %s", mode, request.channel_id)
