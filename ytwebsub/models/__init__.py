"""Contains the dataclasses used in the YouTubeNotifier."""

__all__ = [
    "DEFAULT_HUB_URL",
    "NotifierConfig",
]

from dataclasses import dataclass

from ytwebsub.errors import ConfigurationError

DEFAULT_HUB_URL = "https://pubsubhubbub.appspot.com/"


@dataclass(frozen=True)
class NotifierConfig:
    """Represents the configuration of the YouTubeNotifier."""

    callback_url: str
    """The URL the hub calls back to deliver notifications"""

    hub_url: str = DEFAULT_HUB_URL
    """The URL of the hub to send subscription requests to"""

    secret: str | None = None
    """The secret for signing notifications. If not set, signatures are not checked"""

    path: str = "/"
    """The path the callback endpoint is mounted on"""

    host: str = "0.0.0.0"  # noqa: S104
    """The host to run the standalone server on"""

    port: int | None = 3000
    """The port to run the standalone server on"""

    middleware: bool = False
    """Whether the notifier is mounted in an existing app instead of its own server"""

    def __post_init__(self) -> None:
        """Validate the configuration.

        :raises ConfigurationError: If the callback URL is missing or the path is
            not absolute.
        """
        if not self.callback_url:
            raise ConfigurationError("You need to provide the callback URL")

        if not self.path or not self.path.startswith("/"):
            raise ConfigurationError(f"Path must start with '/': {self.path}")
