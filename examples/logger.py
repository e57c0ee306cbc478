"""The following is an example of a simple YouTube Notifier with logging module."""

import logging

from ytwebsub import IntentVerificationEvent, NotificationEvent, YouTubeNotifier


def main() -> None:
    """Run the application."""
    logger = logging.getLogger(__name__)
    notifier = YouTubeNotifier(callback_url="https://example.com/")

    @notifier.subscribed()
    async def on_subscribe(event: IntentVerificationEvent) -> None:
        """Listener called when the hub verifies a subscription."""
        logger.info("Subscribed to %s for %s seconds", event.channel, event.lease_seconds)

    @notifier.notified()
    async def on_notify(event: NotificationEvent) -> None:
        """Listener called when a video is published on any subscribed channel."""
        logger.info("New video from %s: %s", event.channel.name, event.video.title)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    notifier.subscribe("UCuFFtHWoLl5fauMMD5Ww2jA")  # Channel ID of CBC News
    notifier.run()


if __name__ == "__main__":
    main()
