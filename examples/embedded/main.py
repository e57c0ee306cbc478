"""The following example demonstrates how to receive notifications in an existing
FastAPI app, served by uvicorn.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from ytwebsub import AsyncYouTubeNotifier, NotificationEvent

notifier = AsyncYouTubeNotifier(
    callback_url="https://example.com/youtube",
    path="/youtube",
    secret="s3cret",
    middleware=True,
)


@notifier.notified()
async def listener(event: NotificationEvent) -> None:
    """It is called when a video is published on a subscribed channel."""
    print(f"New video from {event.channel.name}: {event.video.title}")


@asynccontextmanager
async def lifespan(_app: FastAPI):  # noqa: ANN201
    """Subscribe once the app has started."""
    await notifier.subscribe(["UCuFFtHWoLl5fauMMD5Ww2jA", "UCupvZG-5ko_eiXAupbDfxWw"])
    yield


app = FastAPI(lifespan=lifespan)
notifier.mount(app)


@app.get("/health")
async def health() -> dict[str, str]:
    """Report that the app is running."""
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)  # noqa: S104
