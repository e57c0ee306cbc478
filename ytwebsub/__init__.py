"""Contains the YouTubeNotifier class which is used to subscribe to YouTube channels
through a PubSubHubbub hub and receive push notifications when videos are uploaded.
"""

__all__ = [
    "AsyncYouTubeNotifier",
    "Channel",
    "EventBus",
    "EventKind",
    "IntentVerificationEvent",
    "NotificationEvent",
    "NotifierConfig",
    "SubscriptionIntent",
    "Video",
    "YouTubeNotifier",
]

import asyncio
import logging
import time
from asyncio import Task
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import asynccontextmanager, contextmanager
from threading import Lock, Thread
from typing import Any, Self

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.routing import APIRoute
from starlette.routing import Route
from uvicorn import Config, Server

from ytwebsub.enums import EventKind, SubscriptionIntent
from ytwebsub.errors import ArgumentError, ConfigurationError
from ytwebsub.events import EventBus
from ytwebsub.handler import CallbackHandler
from ytwebsub.models import DEFAULT_HUB_URL, NotifierConfig
from ytwebsub.models.event import IntentVerificationEvent, NotificationEvent
from ytwebsub.models.video import Channel, Video
from ytwebsub.subscription import (
    SubscriptionRequest,
    build_subscription_request,
    send_subscription_request,
)
from ytwebsub.types import EventListener, IntentListener, NotificationListener


class AsyncYouTubeNotifier:
    """A class that encapsulates the functionality for subscribing to YouTube
    channels and receiving push notifications.
    """

    def __init__(
        self,
        config: NotifierConfig | None = None,
        *,
        callback_url: str | None = None,
        hub_url: str | None = None,
        secret: str | None = None,
        path: str = "/",
        host: str = "0.0.0.0",  # noqa: S104
        port: int | None = 3000,
        middleware: bool = False,
        app: FastAPI | None = None,
        events: EventBus | None = None,
    ) -> None:
        """Set up the YouTubeNotifier instance.

        :param config: The configuration to use. If provided, the other
            configuration arguments are ignored.
        :param callback_url: The URL the hub calls back to deliver notifications.
        :param hub_url: The URL of the hub. It is advised not to change this.
        :param secret: The secret for signing notifications. If not provided,
            notifications are accepted without checking their signature.
        :param path: The path the callback endpoint is mounted on.
        :param host: The host to run the standalone server on.
        :param port: The port to run the standalone server on.
        :param middleware: Whether the notifier is mounted in an existing app
            instead of running its own server.
        :param app: The FastAPI app instance to mount the callback endpoint on.
        :param events: The event bus to emit events to. If not provided, a new
            instance will be created.
        :raises ConfigurationError: If the callback URL is missing.
        :raises ValueError: If the given app already has a route at the path.
        """
        self._logger = logging.getLogger(self.__class__.__name__)

        self._config = config or NotifierConfig(
            callback_url=callback_url,
            hub_url=hub_url or DEFAULT_HUB_URL,
            secret=secret,
            path=path,
            host=host,
            port=port,
            middleware=middleware,
        )
        self._events = events or EventBus()
        self._handler = CallbackHandler(self._config, self._events)
        self._pending: set[Task[None]] = set()
        self._server: Server | None = None
        self._app: FastAPI | None = None

        if app is not None:
            self.mount(app)

    @property
    def config(self) -> NotifierConfig:
        """Get the configuration of the notifier.

        :return: The configuration.
        """
        return self._config

    @property
    def callback_url(self) -> str:
        """Get the callback URL.

        :return: The callback URL.
        """
        return self._config.callback_url

    @property
    def events(self) -> EventBus:
        """Get the event bus the notifier emits events to.

        :return: The event bus.
        """
        return self._events

    @property
    def is_ready(self) -> bool:
        """Check if the standalone server is accepting connections.

        :return: True if the server is ready, False otherwise.
        """
        return self._server is not None and self._server.started

    def listener(
        self, *, kind: EventKind
    ) -> Callable[[EventListener], EventListener]:
        """Decorate the function to add a listener for an event.

        :param kind: The kind of event to listen for.
        :return: The decorator function.
        """

        def decorator(func: EventListener) -> EventListener:
            self.add_listener(func, kind)

            return func

        return decorator

    def notified(self) -> Callable[[NotificationListener], NotificationListener]:
        """Decorate the function to add a listener for video notifications.
        Alias for @listener(kind=EventKind.NOTIFIED).

        :return: The decorator function.
        """
        return self.listener(kind=EventKind.NOTIFIED)

    def subscribed(self) -> Callable[[IntentListener], IntentListener]:
        """Decorate the function to add a listener for when the hub verifies a
        subscription. Alias for @listener(kind=EventKind.SUBSCRIBE).

        :return: The decorator function.
        """
        return self.listener(kind=EventKind.SUBSCRIBE)

    def unsubscribed(self) -> Callable[[IntentListener], IntentListener]:
        """Decorate the function to add a listener for when the hub verifies an
        unsubscription. Alias for @listener(kind=EventKind.UNSUBSCRIBE).

        :return: The decorator function.
        """
        return self.listener(kind=EventKind.UNSUBSCRIBE)

    def add_listener(self, func: EventListener, kind: EventKind) -> Self:
        """Add a listener for an event.

        :param func: The listener function to add.
        :param kind: The kind of event to listen for.
        :return: The YouTubeNotifier instance to allow for method chaining.
        """
        self._events.add_listener(kind, func)
        return self

    def add_notified_listener(self, func: NotificationListener) -> Self:
        """Add a listener for video notifications.
        Alias for add_listener(func, EventKind.NOTIFIED).

        :param func: The listener function to add.
        :return: The YouTubeNotifier instance to allow for method chaining.
        """
        return self.add_listener(func, EventKind.NOTIFIED)

    def remove_listener(self, func: EventListener, kind: EventKind) -> Self:
        """Remove a listener for an event.

        :param func: The listener function to remove.
        :param kind: The kind of event the listener was added for.
        :return: The YouTubeNotifier instance to allow for method chaining.
        :raises ValueError: If the listener was not added for the event.
        """
        self._events.remove_listener(kind, func)
        return self

    def as_request_handler(self) -> Callable[[Request], Awaitable[Response]]:
        """Get the handler for the requests of the hub, to mount it on a router
        of an existing app at the configured path.

        :return: The request handler.
        """
        return self._handler.handle

    def get_router(self) -> APIRouter:
        """Get a router with the callback endpoint at the configured path.

        :return: The router.
        """
        router = APIRouter()
        # An empty method list matches every method, so the handler answers them all
        router.add_route(
            self._config.path,
            self._handler.handle,
            methods=[],
            include_in_schema=False,
        )

        return router

    def mount(self, app: FastAPI) -> Self:
        """Mount the callback endpoint on a FastAPI app.

        :param app: The FastAPI app instance to mount the endpoint on.
        :return: The YouTubeNotifier instance to allow for method chaining.
        :raises ValueError: If the app already has a route at the path.
        """
        self._verify_app(app=app, path=self._config.path)
        app.include_router(self.get_router())
        self._app = app

        return self

    @staticmethod
    def _verify_app(*, app: FastAPI, path: str) -> None:
        """Verify if the given app instance has a route that conflicts with
            the notifier's routes.

        :param app: The FastAPI app instance to verify.
        :param path: The path of the notifier's endpoint.
        """
        for route in app.routes:
            if isinstance(route, (APIRoute, Route)) and route.path == path:
                raise ValueError(
                    f"Endpoint {path} is reserved for {__package__} "
                    "so it cannot be used by the app"
                )

    @staticmethod
    def _validate_channel_ids(channel_ids: str | Iterable[str]) -> list[str]:
        """Verify the channel IDs given to subscribe or unsubscribe.

        :param channel_ids: The channel ID(s).
        :return: The channel IDs as a list.
        :raises ArgumentError: If the channel IDs are missing or not strings.
        """
        if isinstance(channel_ids, str):
            channel_ids = [channel_ids]
        elif not isinstance(channel_ids, Iterable):
            raise ArgumentError(
                "You need to provide a channel ID or an iterable of channel IDs"
            )

        channel_ids = list(channel_ids)
        if not channel_ids:
            raise ArgumentError("You need to provide at least one channel ID")

        for channel_id in channel_ids:
            if not isinstance(channel_id, str) or not channel_id:
                raise ArgumentError(f"Invalid channel ID: {channel_id!r}")

        return channel_ids

    def _build_requests(
        self, channel_ids: str | Iterable[str], intent: SubscriptionIntent
    ) -> list[SubscriptionRequest]:
        """Build one request per channel ID.

        :param channel_ids: The channel ID(s).
        :param intent: Whether to subscribe or unsubscribe.
        :return: The requests.
        :raises ArgumentError: If the channel IDs are missing or not strings.
        """
        return [
            build_subscription_request(channel_id, intent, self._config)
            for channel_id in self._validate_channel_ids(channel_ids)
        ]

    def _on_request_done(
        self, request: SubscriptionRequest, future: Task[None] | Future[None]
    ) -> None:
        """Log the outcome of a request sent in the background."""
        if future.cancelled():
            return

        ex = future.exception()
        if ex is not None:
            self._logger.error(
                "Failed to send %s request for channel %s: %s",
                request.intent.value,
                request.channel_id,
                ex,
            )

    def _schedule(self, requests: list[SubscriptionRequest]) -> list[Task[None]]:
        """Send the requests in the background of the running event loop.

        :param requests: The requests to send.
        :return: The tasks sending the requests.
        """
        tasks = []
        for request in requests:
            task = asyncio.create_task(send_subscription_request(request))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            task.add_done_callback(
                lambda future, request=request: self._on_request_done(request, future)
            )
            tasks.append(task)

        return tasks

    async def subscribe(self, channel_ids: str | Iterable[str]) -> list[Task[None]]:
        """Subscribe to YouTube channels to receive push notifications.
        The requests are sent in the background, one per channel.

        :param channel_ids: The channel ID(s) to subscribe to.
        :return: The tasks sending the requests, to await them if the outcome
            matters.
        :raises ArgumentError: If the channel IDs are missing or not strings.
        """
        return self._schedule(
            self._build_requests(channel_ids, SubscriptionIntent.SUBSCRIBE)
        )

    async def unsubscribe(self, channel_ids: str | Iterable[str]) -> list[Task[None]]:
        """Unsubscribe from YouTube channels to stop receiving push notifications.
        The requests are sent in the background, one per channel.

        :param channel_ids: The channel ID(s) to unsubscribe from.
        :return: The tasks sending the requests, to await them if the outcome
            matters.
        :raises ArgumentError: If the channel IDs are missing or not strings.
        """
        return self._schedule(
            self._build_requests(channel_ids, SubscriptionIntent.UNSUBSCRIBE)
        )

    def _create_server(self, *, log_level: int, **configs: object) -> Server:
        """Create the standalone server serving the callback endpoint.

        :param log_level: The log level to use for the uvicorn server.
        :param configs: Additional arguments to pass to the Config class of uvicorn.
        :return: The server.
        :raises ConfigurationError: If the notifier is used as a middleware or no
            port is configured.
        """
        if self._config.middleware:
            raise ConfigurationError(
                "You cannot run a server if you are using middleware"
            )

        if self._config.port is None:
            raise ConfigurationError("You need to provide a port to run a server")

        if self._app is None:
            self.mount(FastAPI())

        config = Config(
            app=self._app,
            host=self._config.host,
            port=self._config.port,
            log_level=log_level,
            **configs,  # ty: ignore[invalid-argument-type]
        )
        self._server = Server(config=config)
        self._logger.info("Callback URL: %s", self._config.callback_url)

        return self._server

    async def run(self, *, log_level: int = logging.WARNING, **configs: object) -> None:
        """Start the server to receive push notifications in an existing event
            loop and wait until the server stops.

        :param log_level: The log level to use for the uvicorn server.
        :param configs: Additional arguments to pass to the Config class of uvicorn.
        :raises ConfigurationError: If the notifier is used as a middleware.
        """
        server = self._create_server(log_level=log_level, **configs)

        try:
            await server.serve()
        finally:
            self._server = None

    @asynccontextmanager
    async def run_in_background(
        self, *, log_level: int = logging.WARNING, **configs: object
    ) -> AsyncIterator[Task]:
        """Run the server in an existing event loop and return once it is ready.

        :param log_level: The log level to use for the server.
        :param configs: Additional configurations to pass to the server.
        :raises ConfigurationError: If the notifier is used as a middleware.
        """
        task = asyncio.create_task(self.run(log_level=log_level, **configs))
        try:
            while not self.is_ready:
                if task.done():
                    await task
                    raise RuntimeError("Server stopped before it was ready")

                await asyncio.sleep(0.1)

            yield task
        finally:
            self.stop()
            await task

    def stop(self) -> None:
        """Gracefully stop the server.
        If the server is not running, this method will do nothing.
        """
        if self._server is None:
            return

        self._server.should_exit = True


class YouTubeNotifier(AsyncYouTubeNotifier):
    """A class that encapsulates the functionality for subscribing to YouTube
    channels and receiving push notifications, for synchronous code.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Create a new YouTubeNotifier instance.
        Takes the same arguments as :class:`AsyncYouTubeNotifier`.
        """
        super().__init__(*args, **kwargs)
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = Lock()

    def _submit(self, requests: list[SubscriptionRequest]) -> list[Future[None]]:
        """Send the requests in background threads.

        :param requests: The requests to send.
        :return: The futures of the requests.
        """
        futures = []
        with self._executor_lock:
            # The pool is shut down with the server and recreated on demand
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=4, thread_name_prefix=__package__
                )

            for request in requests:
                future = self._executor.submit(
                    asyncio.run, send_subscription_request(request)
                )
                future.add_done_callback(
                    lambda done, request=request: self._on_request_done(request, done)
                )
                futures.append(future)

        return futures

    def _shutdown_executor(self) -> None:
        """Shut down the thread pool. Requests already submitted still complete."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None

    def subscribe(self, channel_ids: str | Iterable[str]) -> list[Future[None]]:  # noqa: D102
        return self._submit(
            self._build_requests(channel_ids, SubscriptionIntent.SUBSCRIBE)
        )

    def unsubscribe(self, channel_ids: str | Iterable[str]) -> list[Future[None]]:  # noqa: D102
        return self._submit(
            self._build_requests(channel_ids, SubscriptionIntent.UNSUBSCRIBE)
        )

    def run(self, *, log_level: int = logging.WARNING, **configs: object) -> None:
        """Start the server to receive push notifications in the current thread and
            wait until the server stops.

        :param log_level: The log level to use for the uvicorn server.
        :param configs: Additional arguments to pass to the Config class of uvicorn.
        :raises ConfigurationError: If the notifier is used as a middleware.
        """
        server = self._create_server(log_level=log_level, **configs)

        try:
            server.run()
        except KeyboardInterrupt:  # pragma: no cover
            pass
        finally:
            self._server = None
            self._shutdown_executor()

    @contextmanager
    def run_in_background(
        self, *, log_level: int = logging.WARNING, **configs: object
    ) -> Iterator[Thread]:
        """Start the server to receive push notifications in a separate thread and
            return once it is ready.

        :param log_level: The log level to use for the uvicorn server.
        :param configs: Additional arguments to pass to the Config class of uvicorn.
        :return: A thread that runs the server in the background.
        :raises ConfigurationError: If the notifier is used as a middleware.
        """
        # Fail in the caller's thread rather than in the background
        if self._config.middleware:
            raise ConfigurationError(
                "You cannot run a server if you are using middleware"
            )

        configs["log_level"] = log_level

        thread = Thread(target=self.run, kwargs=configs, daemon=True)
        thread.start()
        try:
            while not self.is_ready:
                if not thread.is_alive():
                    raise RuntimeError("Server stopped before it was ready")

                time.sleep(0.1)
            yield thread
        finally:
            self.stop()
            thread.join()

    def stop(self) -> None:
        """Gracefully stop the server and shut down the threads sending
        subscription requests. Requests already sent still complete.
        """
        super().stop()
        self._shutdown_executor()
