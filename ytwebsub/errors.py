"""Contains custom exceptions for the ytwebsub package."""

__all__ = [
    "ArgumentError",
    "ConfigurationError",
    "HTTPError",
    "MalformedFeedError",
    "MissingEntryError",
    "UnsupportedAlgorithmError",
    "YouTubeNotifierError",
]

import sys
from http import HTTPStatus

if sys.version_info >= (3, 12):  # pragma: no cover
    from typing import override  # novm
else:
    from typing_extensions import override


class HTTPError(Exception):
    """Exception raised when the hub answers a request with an error status."""

    @override
    def __init__(self, message: str, status_code: int | HTTPStatus) -> None:
        """Initialize the HTTPError object.

        :param message: The error message
        :param status_code: The status code of the error
        """
        super().__init__(message, status_code)
        self.status_code: int | HTTPStatus
        try:
            self.status_code = HTTPStatus(status_code)
        except ValueError:
            # Codes outside the standard, such as a proxy's 520, stay plain integers
            self.status_code = status_code

        self.message = message

    @override
    def __str__(self) -> str:
        """Return a string representation of the HTTPError object."""
        return f"Status code: {self.status_code}: {self.message}"


class YouTubeNotifierError(Exception):
    """Base class for the errors raised by the notifier."""


class ConfigurationError(YouTubeNotifierError, ValueError):
    """Exception raised when the notifier is configured incorrectly."""


class ArgumentError(YouTubeNotifierError, ValueError):
    """Exception raised when a method receives invalid channel IDs."""


class UnsupportedAlgorithmError(YouTubeNotifierError, ValueError):
    """Exception raised when a signature uses an unknown hash algorithm."""

    @override
    def __init__(self, algorithm: str) -> None:
        """Initialize the UnsupportedAlgorithmError object.

        :param algorithm: The name of the rejected algorithm
        """
        super().__init__(f"Unsupported signature algorithm: {algorithm!r}")
        self.algorithm = algorithm


class MalformedFeedError(YouTubeNotifierError, ValueError):
    """Exception raised when a notification body is not valid XML."""


class MissingEntryError(YouTubeNotifierError, ValueError):
    """Exception raised when a notification has no usable feed entry."""
