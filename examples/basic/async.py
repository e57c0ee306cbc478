"""The following example demonstrates how to use the AsyncYouTubeNotifier to listen
for new videos from a channel.
"""

import asyncio

from ytwebsub import AsyncYouTubeNotifier, NotificationEvent


async def main() -> None:
    """Run the application."""
    notifier = AsyncYouTubeNotifier(callback_url="https://example.com/", secret="s3cret")

    @notifier.notified()
    async def listener(event: NotificationEvent) -> None:
        """It is called when a video is published on a subscribed channel."""
        print(f"New video from {event.channel.name}: {event.video.title}")

    async with notifier.run_in_background() as server:
        tasks = await notifier.subscribe("UCuFFtHWoLl5fauMMD5Ww2jA")  # CBC News

        # Wait for the hub to accept the request
        await asyncio.gather(*tasks)
        await server


if __name__ == "__main__":
    asyncio.run(main())
