"""Contains the handler for the requests the hub sends to the callback URL."""

__all__ = ["CallbackHandler"]

import logging
from http import HTTPStatus

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from starlette.background import BackgroundTask

from ytwebsub.enums import EventKind, SubscriptionIntent
from ytwebsub.errors import MalformedFeedError, MissingEntryError, UnsupportedAlgorithmError
from ytwebsub.events import EventBus
from ytwebsub.feed import extract_notification, get_deleted_entry, get_entries, parse_feed
from ytwebsub.models import NotifierConfig
from ytwebsub.models.event import IntentVerificationEvent
from ytwebsub.signature import parse_signature_header, verify_signature
from ytwebsub.subscription import channel_id_from_topic

SIGNATURE_HEADER = "X-Hub-Signature"


def _status_response(status: HTTPStatus) -> Response:
    return PlainTextResponse(status.phrase, status_code=status)


class CallbackHandler:
    """Handles the intent verification and the notification requests of the hub.

    Every request ends with a response. Protocol errors never propagate to the
    caller, and only verified requests emit events to the event bus.
    """

    def __init__(self, config: NotifierConfig, events: EventBus) -> None:
        """Create a new CallbackHandler instance.

        :param config: The configuration of the notifier.
        :param events: The event bus to emit the verified events to.
        """
        self._logger = logging.getLogger(self.__class__.__name__)
        self._config = config
        self._events = events

    async def handle(self, request: Request) -> Response:
        """Handle a request from the hub.

        :param request: The request.
        :return: The response to send to the hub.
        """
        if request.method == "GET":
            return self._get(request)

        if request.method == "POST":
            return await self._post(request)

        self._logger.debug("Rejected %s request", request.method)
        return _status_response(HTTPStatus.FORBIDDEN)

    def _get(self, request: Request) -> Response:
        """Handle a challenge from the hub to verify the intent of a request."""
        params = request.query_params
        topic = params.get("hub.topic")
        mode = params.get("hub.mode")

        if not topic or not mode:
            self._logger.warning("Received verification request without topic or mode")
            return _status_response(HTTPStatus.BAD_REQUEST)

        challenge = params.get("hub.challenge", "")

        try:
            intent = SubscriptionIntent(mode)
        except ValueError:
            self._logger.warning("Received verification with unknown mode: %s", mode)
            return PlainTextResponse(challenge)

        lease_seconds = None
        if intent == SubscriptionIntent.SUBSCRIBE:
            lease_seconds = params.get("hub.lease_seconds") or None

        event = IntentVerificationEvent(
            type=intent, channel=channel_id_from_topic(topic), lease_seconds=lease_seconds
        )
        self._logger.debug("Verified %s for channel: %s", mode, event.channel)

        # Emitted after the response is sent, so listeners cannot break the handshake
        background = BackgroundTask(
            self._events.emit, EventKind.from_intent(intent), event
        )
        return PlainTextResponse(challenge, background=background)

    async def _post(self, request: Request) -> Response:
        """Handle a push notification from the hub."""
        signature_header = request.headers.get(SIGNATURE_HEADER)
        if self._config.secret and not signature_header:
            self._logger.warning("Received notification without signature")
            return _status_response(HTTPStatus.FORBIDDEN)

        body = await request.body()

        try:
            document = parse_feed(body)
        except MalformedFeedError:
            self._logger.debug("Received invalid request body: %s", body)
            return _status_response(HTTPStatus.BAD_REQUEST)

        deleted = get_deleted_entry(document)
        if deleted is not None:
            self._logger.debug("Ignoring notification for deleted entry: %s", deleted.ref)
            return _status_response(HTTPStatus.OK)

        entries = get_entries(document)
        if not entries:
            self._logger.warning("Received notification without entry")
            return _status_response(HTTPStatus.BAD_REQUEST)

        if len(entries) > 1:
            self._logger.debug(
                "Received %d entries, only the first one is processed", len(entries)
            )

        if self._config.secret:
            algorithm, signature = parse_signature_header(signature_header)
            try:
                authentic = verify_signature(
                    self._config.secret, algorithm, signature, body
                )
            except UnsupportedAlgorithmError:
                self._logger.warning("Received notification signed with: %s", algorithm)
                return _status_response(HTTPStatus.FORBIDDEN)

            # The hub expects a success even if the signature does not match
            if not authentic:
                self._logger.warning("Ignoring notification with invalid signature")
                return _status_response(HTTPStatus.OK)

        try:
            event = extract_notification(entries[0])
        except MissingEntryError:
            self._logger.warning("Failed to parse entry: %s", entries[0])
            return _status_response(HTTPStatus.BAD_REQUEST)

        self._logger.debug("Received notification for video: %s", event.video.id)
        await self._events.emit(EventKind.NOTIFIED, event)

        return _status_response(HTTPStatus.OK)
