"""Contains the tests for the class AsyncYouTubeNotifier."""

import asyncio
import socket
from http import HTTPStatus
from urllib.parse import parse_qs

import httpx
import pytest
import respx
from fastapi import APIRouter, FastAPI
from fastapi.testclient import TestClient
from httpx import Response

from tests import CALLBACK_URL, HUB_URL, SECRET, TOPIC, XML, sign
from ytwebsub import (
    AsyncYouTubeNotifier,
    EventBus,
    EventKind,
    IntentVerificationEvent,
    NotificationEvent,
    NotifierConfig,
)
from ytwebsub.errors import ArgumentError, ConfigurationError, HTTPError

channel_ids = [
    "UCPF-oYb2-xN5FbCXy0167Gg",
    "UCuFFtHWoLl5fauMMD5Ww2jA",
    "UCupvZG-5ko_eiXAupbDfxWw",
]


def get_free_port() -> int:
    """Get a port that is free to bind on localhost."""
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def app() -> FastAPI:
    """Fixture for the FastAPI app the notifier is mounted on."""
    return FastAPI()


@pytest.fixture
def notifier(app: FastAPI) -> AsyncYouTubeNotifier:
    """Fixture for AsyncYouTubeNotifier."""
    return AsyncYouTubeNotifier(callback_url=CALLBACK_URL, app=app)


def test_config() -> None:
    """Test the configuration of the notifier."""
    with pytest.raises(ConfigurationError):
        AsyncYouTubeNotifier()

    with pytest.raises(ConfigurationError):
        AsyncYouTubeNotifier(callback_url="")

    notifier = AsyncYouTubeNotifier(callback_url=CALLBACK_URL, hub_url="")
    assert notifier.callback_url == CALLBACK_URL
    assert notifier.config.hub_url == HUB_URL
    assert notifier.config.port == 3000  # noqa: PLR2004

    config = NotifierConfig(callback_url=CALLBACK_URL, secret=SECRET, path="/cb")
    assert AsyncYouTubeNotifier(config).config is config

    events = EventBus()
    assert AsyncYouTubeNotifier(config, events=events).events is events


@respx.mock
@pytest.mark.asyncio
async def test_subscribe() -> None:
    """Test the subscribe method of the AsyncYouTubeNotifier class."""
    notifier = AsyncYouTubeNotifier(callback_url=CALLBACK_URL, secret=SECRET)
    route = respx.post(HUB_URL).mock(Response(HTTPStatus.ACCEPTED))

    tasks = await notifier.subscribe(channel_ids)
    assert len(tasks) == len(channel_ids)

    await asyncio.gather(*tasks)

    assert route.call_count == len(channel_ids), "Should subscribe to each channel ID"

    forms = [parse_qs(call.request.content.decode()) for call in route.calls]
    assert {form["hub.topic"][0] for form in forms} == {
        f"https://www.youtube.com/xml/feeds/videos.xml?channel_id={channel_id}"
        for channel_id in channel_ids
    }
    for form in forms:
        assert form["hub.mode"] == ["subscribe"]
        assert form["hub.callback"] == [CALLBACK_URL]
        assert form["hub.secret"] == [SECRET]

    route.reset()

    tasks = await notifier.subscribe(channel_ids[0])
    await asyncio.gather(*tasks)
    assert route.call_count == 1


@respx.mock
@pytest.mark.asyncio
async def test_unsubscribe(notifier: AsyncYouTubeNotifier) -> None:
    """Test the unsubscribe method of the AsyncYouTubeNotifier class."""
    route = respx.post(HUB_URL).mock(Response(HTTPStatus.NO_CONTENT))

    tasks = await notifier.unsubscribe(channel_ids)
    await asyncio.gather(*tasks)

    assert route.call_count == len(channel_ids), (
        "Should unsubscribe from each channel ID"
    )
    for call in route.calls:
        form = parse_qs(call.request.content.decode())
        assert form["hub.mode"] == ["unsubscribe"]
        assert "hub.secret" not in form


@respx.mock
@pytest.mark.asyncio
async def test_subscribe_failure(
    notifier: AsyncYouTubeNotifier, caplog: pytest.LogCaptureFixture
) -> None:
    """Test that failed requests can be observed and are logged."""
    respx.post(HUB_URL).mock(Response(HTTPStatus.CONFLICT))

    tasks = await notifier.subscribe(channel_ids)
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert all(isinstance(result, HTTPError) for result in results)
    assert all(channel_id in caplog.text for channel_id in channel_ids)

    respx.post(HUB_URL).mock(side_effect=httpx.ConnectError("Connection refused"))

    tasks = await notifier.subscribe(channel_ids[0])
    with pytest.raises(httpx.ConnectError):
        await tasks[0]


@pytest.mark.parametrize(
    "channel_ids",
    [None, "", [], ["UC123", ""], [1], 123, ["UC123", None]],
)
@pytest.mark.asyncio
async def test_subscribe_invalid(
    notifier: AsyncYouTubeNotifier, channel_ids: object
) -> None:
    """Test that invalid channel IDs are rejected before sending requests."""
    with respx.mock:
        route = respx.post(HUB_URL)

        with pytest.raises(ArgumentError):
            await notifier.subscribe(channel_ids)

        with pytest.raises(ArgumentError):
            await notifier.unsubscribe(channel_ids)

        assert not route.called


def test_listener(app: FastAPI, notifier: AsyncYouTubeNotifier) -> None:
    """Test the decorators of the AsyncYouTubeNotifier class."""
    client = TestClient(app)
    notified: list[NotificationEvent] = []
    subscribed: list[IntentVerificationEvent] = []
    unsubscribed: list[IntentVerificationEvent] = []

    @notifier.notified()
    async def listener(event: NotificationEvent) -> None:
        notified.append(event)

    @notifier.subscribed()
    async def listener(event: IntentVerificationEvent) -> None:
        subscribed.append(event)

    @notifier.unsubscribed()
    async def listener(event: IntentVerificationEvent) -> None:
        unsubscribed.append(event)

    response = client.post("/", content=XML)
    assert response.status_code == HTTPStatus.OK
    assert len(notified) == 1

    for mode in ("subscribe", "unsubscribe"):
        response = client.get(
            "/", params={"hub.mode": mode, "hub.topic": TOPIC, "hub.challenge": "1"}
        )
        assert response.text == "1"

    assert len(subscribed) == 1
    assert len(unsubscribed) == 1


def test_add_listener(app: FastAPI, notifier: AsyncYouTubeNotifier) -> None:
    """Test adding and removing listeners."""
    client = TestClient(app)
    called = 0

    async def listener(_event: NotificationEvent) -> None:
        nonlocal called
        called += 1

    notifier.add_notified_listener(listener).add_listener(listener, EventKind.NOTIFIED)

    client.post("/", content=XML)
    assert called == 2  # noqa: PLR2004

    notifier.remove_listener(listener, EventKind.NOTIFIED)

    client.post("/", content=XML)
    assert called == 3  # noqa: PLR2004


def test_secret(app: FastAPI) -> None:
    """Test that the notifier checks signatures when a secret is set."""
    notifier = AsyncYouTubeNotifier(callback_url=CALLBACK_URL, secret=SECRET, app=app)
    client = TestClient(app)
    notified = []

    @notifier.notified()
    async def listener(event: NotificationEvent) -> None:
        notified.append(event)

    assert client.post("/", content=XML).status_code == HTTPStatus.FORBIDDEN

    response = client.post(
        "/", content=XML, headers={"X-Hub-Signature": sign(XML, secret="other")}
    )
    assert response.status_code == HTTPStatus.OK
    assert notified == []

    response = client.post("/", content=XML, headers={"X-Hub-Signature": sign(XML)})
    assert response.status_code == HTTPStatus.OK
    assert len(notified) == 1


def test_mount() -> None:
    """Test mounting the notifier on an existing app."""
    app = FastAPI()
    notifier = AsyncYouTubeNotifier(callback_url=CALLBACK_URL, path="/youtube")
    notifier.mount(app)

    client = TestClient(app)
    assert client.post("/youtube", content=XML).status_code == HTTPStatus.OK
    assert client.put("/youtube").status_code == HTTPStatus.FORBIDDEN
    assert client.get("/").status_code == HTTPStatus.NOT_FOUND

    app = FastAPI()
    app.get("/youtube")(lambda: None)

    with pytest.raises(ValueError):
        notifier.mount(app)

    with pytest.raises(ValueError):
        AsyncYouTubeNotifier(callback_url=CALLBACK_URL, path="/youtube", app=app)


@pytest.mark.parametrize(
    "method", ["PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT", "PROPFIND"]
)
def test_mount_other_methods(method: str) -> None:
    """Test that the mounted endpoint forbids every method but GET and POST."""
    app = FastAPI()
    AsyncYouTubeNotifier(callback_url=CALLBACK_URL).mount(app)

    response = TestClient(app).request(method, "/")
    assert response.status_code == HTTPStatus.FORBIDDEN

    app = FastAPI()
    app.include_router(
        AsyncYouTubeNotifier(callback_url=CALLBACK_URL, path="/hub").get_router(),
        prefix="/api",
    )

    client = TestClient(app)
    assert client.request(method, "/api/hub").status_code == HTTPStatus.FORBIDDEN
    assert client.post("/api/hub", content=XML).status_code == HTTPStatus.OK
    assert client.get("/api/hub").status_code == HTTPStatus.BAD_REQUEST


def test_as_request_handler() -> None:
    """Test mounting the request handler on a router of an existing app."""
    notifier = AsyncYouTubeNotifier(
        callback_url=CALLBACK_URL, path="/hub", middleware=True
    )
    router = APIRouter()
    router.add_api_route(
        notifier.config.path, notifier.as_request_handler(), methods=["GET", "POST"]
    )

    app = FastAPI()
    app.include_router(router, prefix="/api")

    response = TestClient(app).get(
        "/api/hub",
        params={"hub.mode": "subscribe", "hub.topic": TOPIC, "hub.challenge": "abc"},
    )
    assert response.status_code == HTTPStatus.OK
    assert response.text == "abc"


@pytest.mark.asyncio
async def test_run_middleware() -> None:
    """Test that the server cannot run when the notifier is used as a middleware."""
    notifier = AsyncYouTubeNotifier(callback_url=CALLBACK_URL, middleware=True)

    with pytest.raises(ConfigurationError):
        await notifier.run()

    notifier = AsyncYouTubeNotifier(callback_url=CALLBACK_URL, port=None)

    with pytest.raises(ConfigurationError):
        await notifier.run()


@pytest.mark.asyncio
async def test_run_in_background() -> None:
    """Test run_in_background method."""
    port = get_free_port()
    notifier = AsyncYouTubeNotifier(
        callback_url=CALLBACK_URL, host="127.0.0.1", port=port
    )

    assert not notifier.is_ready

    async with notifier.run_in_background():
        assert notifier.is_ready

        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"http://127.0.0.1:{port}/",
                params={"hub.mode": "subscribe", "hub.topic": TOPIC, "hub.challenge": "1"},
            )

        assert response.status_code == HTTPStatus.OK
        assert response.text == "1"

    assert not notifier.is_ready
