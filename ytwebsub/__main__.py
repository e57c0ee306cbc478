"""Run a standalone notifier that logs the events of the given channels.

Usage: ``python -m ytwebsub CHANNEL_ID [CHANNEL_ID ...]``

The notifier is configured with the environment variables below, which can also be
set in a ``.env`` file:

- ``YTWEBSUB_CALLBACK_URL`` (required)
- ``YTWEBSUB_HUB_URL``
- ``YTWEBSUB_SECRET``
- ``YTWEBSUB_PATH``
- ``YTWEBSUB_HOST``
- ``YTWEBSUB_PORT``
"""

import logging
import os
import sys

from dotenv import load_dotenv

from ytwebsub import (
    IntentVerificationEvent,
    NotificationEvent,
    NotifierConfig,
    YouTubeNotifier,
)
from ytwebsub.models import DEFAULT_HUB_URL

logger = logging.getLogger(__package__)


def get_config() -> NotifierConfig:
    """Read the configuration of the notifier from the environment.

    :return: The configuration.
    :raises ConfigurationError: If the callback URL is not set.
    """
    return NotifierConfig(
        callback_url=os.getenv("YTWEBSUB_CALLBACK_URL", ""),
        hub_url=os.getenv("YTWEBSUB_HUB_URL") or DEFAULT_HUB_URL,
        secret=os.getenv("YTWEBSUB_SECRET") or None,
        path=os.getenv("YTWEBSUB_PATH", "/"),
        host=os.getenv("YTWEBSUB_HOST", "0.0.0.0"),  # noqa: S104
        port=int(os.getenv("YTWEBSUB_PORT", "3000")),
    )


def main(channel_ids: list[str]) -> None:
    """Subscribe to the channels and log their events until interrupted."""
    notifier = YouTubeNotifier(get_config())

    @notifier.subscribed()
    async def _(event: IntentVerificationEvent) -> None:
        logger.info(
            "Subscribed to channel %s for %s seconds", event.channel, event.lease_seconds
        )

    @notifier.unsubscribed()
    async def _(event: IntentVerificationEvent) -> None:
        logger.info("Unsubscribed from channel %s", event.channel)

    @notifier.notified()
    async def _(event: NotificationEvent) -> None:
        logger.info(
            "New video from %s: %s (%s)",
            event.channel.name,
            event.video.title,
            event.video.link,
        )

    notifier.subscribe(channel_ids)
    notifier.run()


if __name__ == "__main__":  # pragma: no cover
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if len(sys.argv) < 2:  # noqa: PLR2004
        sys.exit(f"usage: python -m {__package__} CHANNEL_ID [CHANNEL_ID ...]")

    main(sys.argv[1:])
