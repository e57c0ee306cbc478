"""The following example demonstrates how to use the YouTubeNotifier to listen for
new videos from a channel.
"""

from ytwebsub import NotificationEvent, YouTubeNotifier


def main() -> None:
    """Run the application."""
    notifier = YouTubeNotifier(callback_url="https://example.com/", secret="s3cret")

    @notifier.notified()
    async def listener(event: NotificationEvent) -> None:
        print(f"New video from {event.channel.name}: {event.video.title}")

    notifier.subscribe("UCuFFtHWoLl5fauMMD5Ww2jA")  # Channel ID of CBC News
    notifier.run()


if __name__ == "__main__":
    main()
